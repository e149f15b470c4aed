"""
Reinforcement learning on top of the neural network engine.
"""
from ._agent import Experience, ExperienceBuffer, ReinforcementLearningAgent

__all__ = ['Experience', 'ExperienceBuffer', 'ReinforcementLearningAgent']
