"""
Tests for the SyncController in PatraKosh Client

Tests refresh, upload, delete, rename and download against an in-memory
fake of the API client, including the error message and busy flag handling.
"""

import sys
import threading
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from exceptions import PatraKoshServerError, PatraKoshAuthError
from models import FileRecord, CollectionStats, format_bytes, summarize_stats
from operations import (
    SyncController,
    TransferHelper,
    LOAD_FAILED,
    UPLOAD_FAILED,
    DELETE_FAILED,
    RENAME_FAILED,
    DOWNLOAD_FAILED
)


class FakeAPI:
    """In-memory stand-in for PatraKoshAPI that records every call."""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = []
        self.failures = {}
        self.next_id = 100
        self.content = {}
        self.lock = threading.Lock()

    def _check(self, name):
        error = self.failures.get(name)
        if error is not None:
            raise error

    def list_files(self, query=None):
        with self.lock:
            self.calls.append(("list", query))
        self._check("list")
        query = (query or "").lower()
        return [r for r in self.records if query in r.filename.lower()]

    def get_stats(self):
        with self.lock:
            self.calls.append(("stats",))
        self._check("stats")
        return CollectionStats(
            file_count=len(self.records),
            storage_used=sum(r.file_size for r in self.records)
        )

    def upload_file(self, filename, file_data, content_type=None):
        self.calls.append(("upload", filename, content_type))
        self._check("upload")
        data = file_data if isinstance(file_data, bytes) else file_data.read()
        record = FileRecord(id=self.next_id, filename=filename, file_size=len(data),
                            mime_type=content_type)
        self.next_id += 1
        self.records.append(record)
        return record

    def delete_file(self, file_id):
        self.calls.append(("delete", file_id))
        self._check("delete")
        with self.lock:
            self.records = [r for r in self.records if r.id != file_id]

    def rename_file(self, file_id, filename):
        self.calls.append(("rename", file_id, filename))
        self._check("rename")
        with self.lock:
            self.records = [
                r.model_copy(update={"filename": filename}) if r.id == file_id else r
                for r in self.records
            ]

    def download_file(self, file_id, destination, chunk_size=8192):
        self.calls.append(("download", file_id))
        self._check("download")
        data = self.content.get(file_id, b"")
        destination.write(data)
        return len(data)

    def count(self, name):
        return len([c for c in self.calls if c[0] == name])


def make_records():
    return [
        FileRecord(id=1, filename="a.txt", file_size=1024),
        FileRecord(id=2, filename="report-2024.pdf", file_size=2048, mime_type="application/pdf"),
        FileRecord(id=3, filename="photo.png", file_size=4096, mime_type="image/png"),
    ]


def make_controller(api, tmp_path=None, on_change=None):
    helper = TransferHelper(api, tmp_path) if tmp_path else None
    return SyncController(api, transfer_helper=helper, on_change=on_change)


def server_error(message=None, status=500):
    return PatraKoshServerError(message or f"Request failed with status {status}",
                                server_message=message, status_code=status)


def assert_view_matches_server(controller, api, query=""):
    """The cache equals the latest list+stats for the query."""
    view = controller.view
    expected = [r for r in api.records if query.lower() in r.filename.lower()]
    assert list(view.items) == expected
    assert view.stats.file_count == len(api.records)
    assert view.stats.storage_used == sum(r.file_size for r in api.records)


# ==================== Refresh ====================

def test_initial_load():
    """Test initial load fetches the unfiltered list and the stats"""
    api = FakeAPI([FileRecord.model_validate({"id": 1, "filename": "a.txt", "fileSize": 1024})])
    controller = make_controller(api)

    assert controller.initial_load()

    assert ("list", "") in api.calls
    assert ("stats",) in api.calls
    view = controller.view
    assert len(view.items) == 1
    assert view.items[0].filename == "a.txt"
    assert format_bytes(view.items[0].file_size) == "1.00 KB"
    assert view.stats.file_count == 1
    assert view.stats.storage_used == 1024
    assert summarize_stats(view.stats) == "1 files • 1.00 KB used"
    assert controller.state.loading is False
    assert controller.state.error_message == ""

    print("Initial load tests passed")


def test_search_filters_items_but_not_stats():
    """Test search replaces items with matches while stats stay collection-wide"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()

    assert controller.refresh("  report ")

    assert ("list", "report") in api.calls
    assert [r.id for r in controller.view.items] == [2]
    assert controller.view.query == "report"
    assert controller.query == "report"
    assert controller.view.stats.file_count == 3
    assert controller.view.stats.storage_used == 1024 + 2048 + 4096

    print("Search tests passed")


def test_refresh_without_query_repeats_last_query():
    """Test refresh() with no argument re-uses the last submitted query"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.refresh("photo")
    api.calls.clear()

    controller.refresh()

    assert api.calls.count(("list", "photo")) == 1
    assert [r.id for r in controller.view.items] == [3]

    print("Repeat query tests passed")


def test_refresh_failure_keeps_previous_view():
    """Test a failed refresh leaves the view at its last synced state"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()
    before = controller.view

    api.failures["stats"] = server_error(None, 503)
    assert not controller.refresh("report")

    assert controller.view is before
    assert controller.state.error_message == LOAD_FAILED
    assert controller.state.loading is False

    print("Refresh failure tests passed")


def test_refresh_failure_uses_server_message():
    """Test the server's message wins over the fallback"""
    api = FakeAPI(make_records())
    api.failures["list"] = PatraKoshAuthError("Session expired", server_message="Session expired",
                                              status_code=401)
    controller = make_controller(api)

    assert not controller.initial_load()
    assert controller.state.error_message == "Session expired"
    assert controller.view.items == ()

    print("Refresh server message tests passed")


def test_next_operation_clears_error():
    """Test a persisted error is replaced only by the next attempt"""
    api = FakeAPI(make_records())
    api.failures["list"] = server_error()
    controller = make_controller(api)
    controller.initial_load()
    assert controller.state.error_message == LOAD_FAILED

    del api.failures["list"]
    assert controller.refresh()
    assert controller.state.error_message == ""

    print("Error clearing tests passed")


def test_concurrent_refresh_older_result_wins_when_slower():
    """Test a slower, older refresh overwrites a newer one that finished first"""
    api = FakeAPI(make_records())
    entered = threading.Event()
    release = threading.Event()
    original_list = api.list_files

    def slow_list(query=None):
        if query == "a":
            entered.set()
            release.wait(5)
        return original_list(query)

    api.list_files = slow_list
    controller = make_controller(api)

    refresh_a = threading.Thread(target=controller.refresh, args=("a",))
    refresh_a.start()
    assert entered.wait(5)

    assert controller.refresh("photo")
    assert controller.view.query == "photo"

    release.set()
    refresh_a.join(5)
    assert not refresh_a.is_alive()

    # A was requested first but resolved last, so its results are what remain
    assert controller.view.query == "a"
    assert [r.id for r in controller.view.items] == [1]
    assert controller.query == "photo"
    assert controller.state.loading is False

    print("Concurrent refresh tests passed")


# ==================== Upload ====================

def test_upload_refreshes_view(tmp_path):
    """Test a successful upload is followed by a full refresh"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()

    source = tmp_path / "notes.txt"
    source.write_bytes(b"hello world")
    assert controller.upload(source)

    assert ("upload", "notes.txt", "text/plain") in api.calls
    assert api.count("list") == 2
    assert api.count("stats") == 2
    assert "notes.txt" in [r.filename for r in controller.view.items]
    assert_view_matches_server(controller, api)
    assert controller.state.uploading is False

    print("Upload tests passed")


def test_upload_failure_shows_server_message():
    """Test upload rejected with "Quota exceeded" shows exactly that"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()
    before = controller.view

    api.failures["upload"] = server_error("Quota exceeded", 413)
    assert not controller.upload_bytes("big.bin", b"x" * 10)

    assert controller.state.error_message == "Quota exceeded"
    assert controller.view is before
    assert controller.state.uploading is False
    assert api.count("list") == 1

    print("Upload failure tests passed")


def test_upload_failure_without_message_uses_fallback():
    api = FakeAPI()
    api.failures["upload"] = server_error(None, 500)
    controller = make_controller(api)

    assert not controller.upload_bytes("a.txt", b"data")
    assert controller.state.error_message == UPLOAD_FAILED

    print("Upload fallback tests passed")


def test_upload_unreadable_file(tmp_path):
    """Test a missing local file fails the upload without calling the server"""
    api = FakeAPI()
    controller = make_controller(api)

    assert not controller.upload(tmp_path / "missing.txt")

    assert controller.state.error_message == UPLOAD_FAILED
    assert controller.state.uploading is False
    assert api.count("upload") == 0

    print("Unreadable upload tests passed")


def test_upload_busy_flag_transitions():
    """Test uploading is set during the upload and cleared afterwards"""
    api = FakeAPI()
    states = []
    controller = make_controller(api, on_change=lambda view, state: states.append(state))

    controller.upload_bytes("a.txt", b"abc")

    assert any(s.uploading for s in states)
    assert any(s.loading for s in states)
    assert states[-1].uploading is False
    assert states[-1].loading is False

    states.clear()
    api.failures["upload"] = server_error()
    controller.upload_bytes("b.txt", b"abc")

    assert states[0].uploading is True
    assert states[-1].uploading is False
    assert states[-1].error_message == UPLOAD_FAILED

    print("Upload busy flag tests passed")


# ==================== Delete ====================

def test_delete_refreshes_view():
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()

    assert controller.delete(2)

    assert ("delete", 2) in api.calls
    assert controller.view.find(2) is None
    assert controller.view.stats.file_count == 2
    assert_view_matches_server(controller, api)

    print("Delete tests passed")


def test_delete_failure_leaves_view_unchanged():
    """Test a failed delete keeps the view and reports the error"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()
    before = controller.view

    api.failures["delete"] = server_error(None, 404)
    assert not controller.delete(2)

    assert controller.view is before
    assert controller.view.find(2) is not None
    assert controller.state.error_message == DELETE_FAILED
    assert controller.state.loading is False
    assert api.count("list") == 1

    print("Delete failure tests passed")


def test_delete_during_refresh():
    """Test a delete issued while a refresh is in flight ends consistent"""
    api = FakeAPI(make_records())
    entered = threading.Event()
    release = threading.Event()
    original_list = api.list_files

    def slow_list(query=None):
        if not entered.is_set():
            entered.set()
            release.wait(5)
        return original_list(query)

    api.list_files = slow_list
    controller = make_controller(api)

    first = threading.Thread(target=controller.initial_load)
    first.start()
    assert entered.wait(5)

    assert controller.delete(1)
    release.set()
    first.join(5)

    # The slow refresh may have read the list before the delete; a final
    # refresh always brings the view back in line with the server
    assert controller.refresh()
    assert_view_matches_server(controller, api)
    assert controller.state.loading is False

    print("Delete during refresh tests passed")


# ==================== Rename ====================

def test_rename_refreshes_view():
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()

    assert controller.rename(1, "  b.txt  ")

    assert ("rename", 1, "b.txt") in api.calls
    assert controller.view.find(1).filename == "b.txt"
    assert_view_matches_server(controller, api)

    print("Rename tests passed")


def test_rename_unchanged_or_empty_is_noop():
    """Test empty or unchanged names make no calls and keep the error"""
    api = FakeAPI(make_records())
    api.failures["list"] = server_error()
    controller = make_controller(api)
    controller.initial_load()
    del api.failures["list"]
    controller.cache.replace(api.records, api.get_stats())
    api.calls.clear()

    assert controller.rename(1, "")
    assert controller.rename(1, "   ")
    assert controller.rename(1, None)
    assert controller.rename(1, "a.txt")
    assert controller.rename(1, " a.txt ")

    assert api.calls == []
    assert controller.state.error_message == LOAD_FAILED

    print("Rename no-op tests passed")


def test_numeric_string_ids_match_integer_lookups():
    """Test an id sent as "7" is found when looked up as 7"""
    api = FakeAPI([FileRecord.model_validate({"id": "7", "filename": "notes.txt", "fileSize": 3})])
    controller = make_controller(api)
    controller.initial_load()

    assert controller.view.find(7).filename == "notes.txt"
    assert controller.view.find("7").filename == "notes.txt"
    assert controller.view.find(8) is None

    assert controller.rename(7, "notes.txt")
    assert api.count("rename") == 0

    seen = []
    controller.rename_with_prompt(7, lambda current: seen.append(current))
    assert seen == ["notes.txt"]

    print("String id lookup tests passed")


def test_rename_failure():
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()
    before = controller.view

    api.failures["rename"] = server_error("Name already taken", 409)
    assert not controller.rename(1, "photo.png")
    assert controller.state.error_message == "Name already taken"
    assert controller.view is before

    api.failures["rename"] = server_error(None, 500)
    assert not controller.rename(1, "other.txt")
    assert controller.state.error_message == RENAME_FAILED

    print("Rename failure tests passed")


def test_rename_with_prompt():
    """Test the supplier sees the current name and None cancels"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()
    seen = []

    def cancel(current):
        seen.append(current)
        return None

    assert controller.rename_with_prompt(1, cancel)
    assert seen == ["a.txt"]
    assert api.count("rename") == 0

    assert controller.rename_with_prompt(1, lambda current: "renamed.txt")
    assert controller.view.find(1).filename == "renamed.txt"

    print("Rename prompt tests passed")


def test_concurrent_delete_and_rename():
    """Test delete and rename of different records running at the same time"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.initial_load()
    results = {}

    def run_delete():
        results["delete"] = controller.delete(2)

    def run_rename():
        results["rename"] = controller.rename(3, "holiday.png")

    threads = [threading.Thread(target=run_delete), threading.Thread(target=run_rename)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5)

    assert results == {"delete": True, "rename": True}
    assert controller.refresh()
    assert controller.view.find(2) is None
    assert controller.view.find(3).filename == "holiday.png"
    assert_view_matches_server(controller, api)
    assert controller.state.loading is False
    assert controller.state.error_message == ""

    print("Concurrent delete and rename tests passed")


def test_cache_matches_server_after_mutation_sequence():
    """Test the cache equals the latest list+stats after each mutation"""
    api = FakeAPI(make_records())
    controller = make_controller(api)
    controller.refresh("p")
    assert_view_matches_server(controller, api, "p")

    controller.upload_bytes("plan.doc", b"1234")
    assert_view_matches_server(controller, api, "p")

    controller.rename(3, "picture.png")
    assert_view_matches_server(controller, api, "p")

    controller.delete(2)
    assert_view_matches_server(controller, api, "p")

    print("Mutation sequence tests passed")


# ==================== Download ====================

def test_download_saves_file(tmp_path):
    api = FakeAPI(make_records())
    api.content[2] = b"%PDF-1.4 report"
    controller = make_controller(api, tmp_path)
    controller.initial_load()
    before = controller.view

    saved = controller.download(2, "report-2024.pdf")

    assert saved == tmp_path / "report-2024.pdf"
    assert saved.read_bytes() == b"%PDF-1.4 report"
    assert controller.view is before
    assert controller.state.error_message == ""
    assert api.count("list") == 1

    print("Download tests passed")


def test_download_failure_sets_error(tmp_path):
    """Test a failed download reports through the error message"""
    api = FakeAPI(make_records())
    api.failures["download"] = server_error(None, 404)
    controller = make_controller(api, tmp_path)

    assert controller.download(2, "report-2024.pdf") is None
    assert controller.state.error_message == DOWNLOAD_FAILED
    assert controller.state.loading is False
    assert controller.state.uploading is False
    assert not (tmp_path / "report-2024.pdf").exists()

    api.failures["download"] = server_error("File not found", 404)
    assert controller.download(2, "report-2024.pdf") is None
    assert controller.state.error_message == "File not found"

    print("Download failure tests passed")


if __name__ == "__main__":
    import tempfile

    print("Running Client sync controller tests...")
    print()

    test_initial_load()
    test_search_filters_items_but_not_stats()
    test_refresh_without_query_repeats_last_query()
    test_refresh_failure_keeps_previous_view()
    test_refresh_failure_uses_server_message()
    test_next_operation_clears_error()
    test_concurrent_refresh_older_result_wins_when_slower()
    with tempfile.TemporaryDirectory() as temp_dir:
        test_upload_refreshes_view(Path(temp_dir))
    test_upload_failure_shows_server_message()
    test_upload_failure_without_message_uses_fallback()
    with tempfile.TemporaryDirectory() as temp_dir:
        test_upload_unreadable_file(Path(temp_dir))
    test_upload_busy_flag_transitions()
    test_delete_refreshes_view()
    test_delete_failure_leaves_view_unchanged()
    test_delete_during_refresh()
    test_rename_refreshes_view()
    test_rename_unchanged_or_empty_is_noop()
    test_numeric_string_ids_match_integer_lookups()
    test_rename_failure()
    test_rename_with_prompt()
    test_concurrent_delete_and_rename()
    test_cache_matches_server_after_mutation_sequence()
    with tempfile.TemporaryDirectory() as temp_dir:
        test_download_saves_file(Path(temp_dir))
    with tempfile.TemporaryDirectory() as temp_dir:
        test_download_failure_sets_error(Path(temp_dir))

    print()
    print("All tests passed!")
