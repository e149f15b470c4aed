"""
Test suite for the tensornet training engine.

Run with:
    pytest tests/ -v
"""
