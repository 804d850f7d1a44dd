"""
Configuration module for the indicator library.

Provides centralized configuration management using Pydantic settings
and an optional YAML overlay file.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
