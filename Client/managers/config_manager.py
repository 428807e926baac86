"""
PatraKosh Client - Configuration Manager

Handles loading and saving client configuration from/to config.json.

Author: PatraKosh Project
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any

# Configure logging
logger = logging.getLogger(__name__)


# Environment variable that overrides the config file location
CONFIG_ENV_VAR = "PATRAKOSH_CONFIG"

# Default configuration values
DEFAULT_CONFIG = {
    "server_url": "http://localhost",
    "server_port": 8080,
    "api_prefix": "/api",
    "verify_ssl": False,
    "request_timeout": 30,
    "download_timeout": 300,
    "download_dir": None,  # None means use the user's Downloads folder
    "log_level": "INFO",
    "log_retention_days": 30,
    "show_log_on_startup": False
}


def get_base_dir() -> Path:
    """
    Directory holding config.json and the logs folder.

    Next to the executable when frozen, otherwise the current directory.
    """
    if getattr(sys, 'frozen', False):
        # Running as compiled executable
        return Path(sys.executable).parent
    # Running as script
    return Path.cwd()


class ConfigManager:
    """
    Manages client configuration.

    Responsibilities:
    - Load/save config.json next to the executable (same location as logs folder)
    - Fill in defaults for keys missing from the file
    - Provide configuration values to other modules
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit config path; defaults to $PATRAKOSH_CONFIG
                         or config.json in the base directory
        """
        if config_file is None:
            env_path = os.environ.get(CONFIG_ENV_VAR)
            config_file = Path(env_path) if env_path else get_base_dir() / "config.json"

        self.config_file = Path(config_file)
        self.config: Dict[str, Any] = {}

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from config.json.
        Creates default config if file doesn't exist.

        Returns:
            Configuration dictionary
        """
        if self.config_file.exists():
            logger.debug(f"Loading configuration from {self.config_file}")
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)
            # Merge with defaults for any missing keys
            for key, value in DEFAULT_CONFIG.items():
                if key not in self.config:
                    self.config[key] = value
            logger.info("Configuration loaded successfully")
        else:
            logger.info(f"Configuration file not found, creating default at {self.config_file}")
            self.config = DEFAULT_CONFIG.copy()
            self.save_config()

        return self.config

    def save_config(self):
        """Save current configuration to config.json."""
        logger.debug(f"Saving configuration to {self.config_file}")
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)
        logger.debug("Configuration saved successfully")

    def get(self, key: str, default=None) -> Any:
        """
        Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """
        Set configuration value and save to file.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self.config[key] = value
        self.save_config()

    def get_download_dir(self) -> Path:
        """
        Folder downloads are saved to when no destination is given.

        Returns:
            The configured download_dir, or ~/Downloads
        """
        configured = self.get("download_dir")
        if configured:
            return Path(configured).expanduser()
        return Path.home() / "Downloads"
