"""
Utility modules for the link crawler.
"""

from .config import Config, ConfigManager, load_config, get_config
from .events import EventHook

__all__ = ['Config', 'ConfigManager', 'load_config', 'get_config', 'EventHook']
