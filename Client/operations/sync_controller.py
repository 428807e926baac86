"""
PatraKosh Client - Sync Controller Module

Keeps the local file collection in step with the server. Every mutation
(upload, delete, rename) is followed by a full refresh of the listing and
statistics rather than a local patch of the cached items.

Author: PatraKosh Project
"""

import logging
import mimetypes
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Optional, Callable, Union

from exceptions import PatraKoshAPIError
from models import FileCollectionCache, CollectionView, OperationState
from .transfer_helper import TransferHelper

# Configure logging
logger = logging.getLogger(__name__)


# Messages shown when the server did not provide one
LOAD_FAILED = "Failed to load files"
UPLOAD_FAILED = "Upload failed"
DELETE_FAILED = "Delete failed"
RENAME_FAILED = "Rename failed"
DOWNLOAD_FAILED = "Download failed"

ChangeListener = Callable[[CollectionView, OperationState], None]
NameSupplier = Callable[[str], Optional[str]]


class SyncController:
    """
    Orchestrates file operations against the server.

    Responsibilities:
    - Fetch the file listing and statistics together and commit both at once
    - Upload, delete and rename files, then refresh
    - Download files through the TransferHelper
    - Own the loading/uploading/error flags shown to the user

    Operations never raise API errors; a failure ends up as a single message
    in `state.error_message` and the collection view keeps its last synced
    contents. Busy flags are cleared on every exit path.

    Overlapping operations are not serialized. Two refreshes in flight both
    commit when they finish, so a slower, older refresh can overwrite a newer
    one.
    """

    def __init__(self, api_client, cache: Optional[FileCollectionCache] = None,
                 transfer_helper: Optional[TransferHelper] = None,
                 on_change: Optional[ChangeListener] = None):
        """
        Initialize the sync controller.

        Args:
            api_client: PatraKoshAPI instance (already wired to the session's token)
            cache: Cache to commit results into; a fresh one by default
            transfer_helper: Helper used for downloads; built from api_client by default
            on_change: Called with (view, state) after every state or cache change.
                       May be called from worker threads.
        """
        self.api = api_client
        self.cache = cache if cache is not None else FileCollectionCache()
        self.transfer = transfer_helper if transfer_helper is not None else TransferHelper(api_client)
        self.on_change = on_change
        self._lock = threading.Lock()
        self._state = OperationState()
        self._query = ""

    # ==================== State ====================

    @property
    def state(self) -> OperationState:
        with self._lock:
            return self._state

    @property
    def view(self) -> CollectionView:
        return self.cache.view

    @property
    def query(self) -> str:
        """The last submitted (trimmed) search string."""
        with self._lock:
            return self._query

    def _update_state(self, **changes):
        with self._lock:
            self._state = replace(self._state, **changes)
        self._notify()

    def _fail(self, message: str):
        logger.error(f"Operation failed: {message}")
        self._update_state(error_message=message)

    def _notify(self):
        if self.on_change:
            self.on_change(self.cache.view, self.state)

    # ==================== Operations ====================

    def initial_load(self) -> bool:
        """Populate the view with the unfiltered listing."""
        return self.refresh("")

    def refresh(self, query: Optional[str] = None) -> bool:
        """
        Re-fetch the listing and statistics and replace the cached view.

        Both requests are issued concurrently; the cache is replaced only
        once both have succeeded.

        Args:
            query: New search string; None repeats the last submitted query

        Returns:
            True if the view was replaced
        """
        with self._lock:
            if query is not None:
                self._query = query.strip()
            submitted = self._query

        self._update_state(error_message="", loading=True)
        logger.info(f"Refreshing file list (query: {submitted!r})")

        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="patrakosh-refresh") as pool:
                list_future = pool.submit(self.api.list_files, submitted)
                stats_future = pool.submit(self.api.get_stats)
                items = list_future.result()
                stats = stats_future.result()

            self.cache.replace(items, stats, submitted)
            logger.info(f"Loaded {len(items)} file(s); {stats.file_count} in collection")
            return True

        except PatraKoshAPIError as e:
            self._fail(e.user_message(LOAD_FAILED))
            return False
        finally:
            self._update_state(loading=False)

    def upload(self, file_path: Union[str, Path]) -> bool:
        """
        Upload a local file, then refresh with the current query.

        Args:
            file_path: Path of the file to upload

        Returns:
            True if both the upload and the follow-up refresh succeeded
        """
        path = Path(file_path)
        content_type, _ = mimetypes.guess_type(path.name)

        def send():
            with open(path, 'rb') as f:
                self.api.upload_file(path.name, f, content_type)

        return self._run_upload(path.name, send)

    def upload_bytes(self, filename: str, data: bytes,
                     content_type: Optional[str] = None) -> bool:
        """
        Upload in-memory content under the given name, then refresh.

        Returns:
            True if both the upload and the follow-up refresh succeeded
        """
        return self._run_upload(filename, lambda: self.api.upload_file(filename, data, content_type))

    def _run_upload(self, filename: str, send: Callable[[], None]) -> bool:
        self._update_state(error_message="", uploading=True)
        logger.info(f"Uploading {filename}")

        try:
            send()
        except PatraKoshAPIError as e:
            self._fail(e.user_message(UPLOAD_FAILED))
            return False
        except OSError as e:
            logger.error(f"Cannot read {filename}: {e}")
            self._fail(UPLOAD_FAILED)
            return False
        else:
            logger.info(f"Uploaded {filename}")
            # uploading stays set until the refresh has finished
            return self.refresh()
        finally:
            self._update_state(uploading=False)

    def delete(self, file_id) -> bool:
        """
        Delete a file, then refresh.

        Returns:
            True if both the delete and the follow-up refresh succeeded
        """
        self._update_state(error_message="")
        logger.info(f"Deleting file {file_id}")

        try:
            self.api.delete_file(file_id)
        except PatraKoshAPIError as e:
            self._fail(e.user_message(DELETE_FAILED))
            return False

        return self.refresh()

    def rename(self, file_id, new_name: Optional[str]) -> bool:
        """
        Rename a file, then refresh.

        An empty name, or one equal to the current name, is ignored: no
        request is made and neither the view nor the error message changes.

        Returns:
            False only if the rename or its follow-up refresh failed
        """
        name = (new_name or "").strip()
        current = self.cache.view.find(file_id)

        if not name:
            logger.debug(f"Rename of file {file_id} skipped: empty name")
            return True
        if current is not None and name == current.filename:
            logger.debug(f"Rename of file {file_id} skipped: name unchanged")
            return True

        self._update_state(error_message="")
        logger.info(f"Renaming file {file_id} to {name!r}")

        try:
            self.api.rename_file(file_id, name)
        except PatraKoshAPIError as e:
            self._fail(e.user_message(RENAME_FAILED))
            return False

        return self.refresh()

    def rename_with_prompt(self, file_id, name_supplier: NameSupplier) -> bool:
        """
        Ask name_supplier for the new name, then rename.

        Args:
            file_id: Id of the file to rename
            name_supplier: Called with the current filename; returns the new
                           name, or None when the user cancels
        """
        current = self.cache.view.find(file_id)
        new_name = name_supplier(current.filename if current else "")
        if new_name is None:
            logger.debug(f"Rename of file {file_id} cancelled")
            return True
        return self.rename(file_id, new_name)

    def download(self, file_id, suggested_filename: Optional[str] = None,
                 save_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """
        Save a file's content locally. Does not touch the view or busy flags.

        Args:
            file_id: Id of the file to download
            suggested_filename: Name to save under (falls back to "download")
            save_path: Full destination path; the helper's default folder otherwise

        Returns:
            Path of the saved file, or None on failure
        """
        self._update_state(error_message="")

        try:
            return self.transfer.download(file_id, suggested_filename, save_path)
        except PatraKoshAPIError as e:
            self._fail(e.user_message(DOWNLOAD_FAILED))
        except OSError as e:
            logger.error(f"Cannot save download of file {file_id}: {e}")
            self._fail(DOWNLOAD_FAILED)
        return None
