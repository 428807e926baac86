"""
PatraKosh Client - Transfer Helper Module

Saves a file's raw content from the server to the local disk. Downloads are
not cached and never touch the file collection view.

Author: PatraKosh Project
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

# Configure logging
logger = logging.getLogger(__name__)


DEFAULT_DOWNLOAD_NAME = "download"


def safe_filename(suggested_filename: Optional[str]) -> str:
    """
    Reduce a server-supplied name to a bare filename.

    Directory components are dropped; a missing or blank name becomes
    "download".
    """
    name = Path((suggested_filename or "").replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        return DEFAULT_DOWNLOAD_NAME
    return name


class TransferHelper:
    """
    Downloads files to disk.

    The content is streamed into a temporary file beside the destination and
    moved into place once complete, so a failed transfer never leaves a
    partial file under the final name. The temporary file is removed on
    every exit path. Single attempt, no retry.
    """

    def __init__(self, api_client, download_dir: Optional[Union[str, Path]] = None):
        """
        Initialize transfer helper.

        Args:
            api_client: PatraKoshAPI instance used to stream file content
            download_dir: Folder used when no explicit save path is given
                          (defaults to ~/Downloads)
        """
        self.api = api_client
        self.download_dir = Path(download_dir) if download_dir else Path.home() / "Downloads"

    def download(self, file_id, suggested_filename: Optional[str] = None,
                 save_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Download a file.

        Args:
            file_id: Id of the file on the server
            suggested_filename: Name to save under when save_path is not given
            save_path: Full destination path chosen by the user

        Returns:
            Path of the saved file

        Raises:
            PatraKoshAPIError: If the server request fails
            OSError: If the file cannot be written
        """
        if save_path:
            target = Path(save_path)
        else:
            target = self.download_dir / safe_filename(suggested_filename)

        target.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading file {file_id} to: {target}")

        fd, temp_path = tempfile.mkstemp(prefix=".patrakosh-", suffix=".part", dir=target.parent)
        try:
            with os.fdopen(fd, 'wb') as f:
                size = self.api.download_file(file_id, f)
            os.replace(temp_path, target)
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.info(f"Saved {size} bytes to: {target}")
        return target
