"""
Engagement-reward engine for a gamified vocabulary trainer
"""
__version__ = "1.0.0"
