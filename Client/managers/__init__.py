"""
PatraKosh Client - Managers Package

Contains manager classes for configuration and the signed-in session.

Author: PatraKosh Project
"""

from .config_manager import ConfigManager, DEFAULT_CONFIG, get_base_dir
from .session_manager import SessionManager

__all__ = [
    'ConfigManager',
    'DEFAULT_CONFIG',
    'get_base_dir',
    'SessionManager'
]
