"""
Utility Functions and Helpers

Configuration and command line helpers for the converter.
"""

from .config_manager import ConfigManager
from .argument_parser import parse_option

__all__ = ['ConfigManager', 'parse_option']
