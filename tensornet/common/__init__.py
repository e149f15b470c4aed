from .logger import LogLevel, get_logger, setup_logging

__all__ = ['LogLevel', 'get_logger', 'setup_logging']
