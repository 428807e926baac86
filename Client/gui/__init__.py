"""
PatraKosh Client - GUI Package

This package contains the GUI components for the PatraKosh client.
"""

from .patrakosh_gui import FileManagerGUI, launch_gui
from .login_dialog import LoginDialog
from .log_handler import GUILogHandler, setup_gui_logging

__all__ = [
    'FileManagerGUI',
    'LoginDialog',
    'GUILogHandler',
    'setup_gui_logging',
    'launch_gui'
]
