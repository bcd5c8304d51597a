"""
Configuration module for the timesheet system.
"""
from .settings import (
    HourbookConfig,
    SystemSettings,
    get_config,
    load_config,
    reload_config,
)

__all__ = [
    'HourbookConfig',
    'SystemSettings',
    'get_config',
    'load_config',
    'reload_config',
]
