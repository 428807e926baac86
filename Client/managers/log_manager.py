"""
PatraKosh Client - Log File Manager

Names the timestamped log files shared by CLI and GUI mode and prunes old
ones past the configured retention.

Author: PatraKosh Project
"""

import logging
from datetime import datetime
from pathlib import Path

from .config_manager import ConfigManager, get_base_dir

# Configure logging
logger = logging.getLogger(__name__)


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Every mode writes patrakosh-*.log so retention covers both
LOG_PREFIX = "patrakosh"


def new_log_file(mode: str = "") -> Path:
    """
    Path for a new log file in the "logs" folder beside config.json.

    Args:
        mode: Optional mode tag, e.g. "gui" -> patrakosh-gui-YYYY-MM-DD-HH-MM-SS.log

    Returns:
        Path of the (not yet created) log file
    """
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_dir = get_base_dir() / "logs"
    log_dir.mkdir(exist_ok=True)
    stem = f"{LOG_PREFIX}-{mode}" if mode else LOG_PREFIX
    return log_dir / f"{stem}-{timestamp}.log"


def log_level(config_manager: ConfigManager) -> int:
    name = config_manager.get("log_level", "INFO")
    return getattr(logging, str(name).upper(), logging.INFO)


def cleanup_old_logs(config_manager: ConfigManager, current_log: Path) -> int:
    """
    Delete log files older than the retention period.

    Args:
        config_manager: ConfigManager instance for retention settings
        current_log: Path to current log file (never deleted)

    Returns:
        Number of files deleted
    """
    retention_days = config_manager.get("log_retention_days", 30)
    if not retention_days or retention_days <= 0:
        return 0

    cutoff_time = datetime.now().timestamp() - (retention_days * 86400)

    deleted_count = 0
    for log_file in current_log.parent.glob(f"{LOG_PREFIX}-*.log"):
        if log_file == current_log:
            continue

        try:
            if log_file.stat().st_mtime < cutoff_time:
                log_file.unlink()
                deleted_count += 1
        except OSError as e:
            logger.warning(f"Failed to delete old log file {log_file}: {e}")

    if deleted_count > 0:
        logger.info(f"Deleted {deleted_count} old log file(s)")
    return deleted_count
