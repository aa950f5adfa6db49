"""
Configuration for opgate.
"""

from .settings import get_all_flags, get_setting, is_enabled, set_flag

__all__ = [
    'get_all_flags',
    'get_setting',
    'is_enabled',
    'set_flag',
]
