"""
Configuration package for llcm.

Region tables and the settings loader.
"""

from .regions import ALLOWED_REGIONS, DEFAULT_REGIONS
from .settings import LlcmSettings, load_settings

__all__ = [
    'ALLOWED_REGIONS',
    'DEFAULT_REGIONS',
    'LlcmSettings',
    'load_settings',
]
