"""
PatraKosh Client - GUI Log Handler Module

Mirrors log records into the window's log panel.

Author: PatraKosh Project
"""

import tkinter as tk
import logging
from pathlib import Path

from managers import ConfigManager
from managers.log_manager import LOG_FORMAT, LOG_DATE_FORMAT, new_log_file, log_level


class GUILogHandler(logging.Handler):
    """
    Appends formatted records to a read-only text widget.

    emit() may run on any thread; the widget is only touched from the
    Tk event loop via after().
    """

    def __init__(self, log_widget, root_widget):
        super().__init__()
        self.log_widget = log_widget
        self.root_widget = root_widget

    def emit(self, record):
        try:
            line = self.format(record)
            self.root_widget.after(0, self._append, line)
        except Exception:
            self.handleError(record)

    def _append(self, line: str):
        try:
            self.log_widget.config(state=tk.NORMAL)
            self.log_widget.insert(tk.END, line + "\n")
            self.log_widget.see(tk.END)
            self.log_widget.config(state=tk.DISABLED)
        except tk.TclError:
            # Window already closed
            return


def setup_gui_logging(config_manager: ConfigManager, log_widget, root_widget) -> Path:
    """
    Route the root logger to a patrakosh-gui-*.log file and the log panel.

    Returns:
        Path to the created log file
    """
    level = log_level(config_manager)
    log_file = new_log_file("gui")
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    for handler in (logging.FileHandler(log_file), GUILogHandler(log_widget, root_widget)):
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).info(f"PatraKosh GUI mode - log file: {log_file}")
    return log_file
