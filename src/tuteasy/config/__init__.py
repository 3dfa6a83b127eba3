"""Configuration module for TutEasy."""

from tuteasy.config.settings import RelevanceWeights, SearchConfig, Settings, get_settings

__all__ = ["RelevanceWeights", "SearchConfig", "Settings", "get_settings"]
