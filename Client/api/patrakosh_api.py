"""
PatraKosh Client - API Communication Module

Handles all communication with the PatraKosh file store via REST API.
Sends the session's bearer token, parses responses into models and converts
failures into PatraKosh exceptions carrying the server's message.

Author: PatraKosh Project
"""

import logging
import threading
import weakref
import requests
from typing import Optional, Dict, Any, List, Callable, BinaryIO, Union

from pydantic import ValidationError

from exceptions import (
    PatraKoshAuthError,
    PatraKoshServerError,
    PatraKoshValidationError
)
from models import (
    FileRecord,
    CollectionStats,
    LoginRequest,
    SignupRequest,
    AuthResponse
)

# Configure logging
logger = logging.getLogger(__name__)

FileId = Union[int, str]


class PatraKoshAPI:
    """
    API client for communicating with the PatraKosh server.

    Responsibilities:
    - Login and signup (unauthenticated)
    - File list, stats, upload, rename, delete and download (authenticated)
    - Map HTTP and transport failures onto PatraKosh exceptions

    The client never stores or clears the bearer token itself; it asks the
    token provider for it on every authenticated call.
    """

    def __init__(self, server_url: str, server_port: int, api_prefix: str = "/api",
                 verify_ssl: bool = True, timeout: int = 30, download_timeout: int = 300,
                 token_provider: Optional[Callable[[], Optional[str]]] = None,
                 session_factory: Optional[Callable[[], requests.Session]] = None):
        """
        Initialize API client.

        Args:
            server_url: Base URL of server (e.g., "http://localhost")
            server_port: Server port number (e.g., 8080)
            api_prefix: Path prefix of the REST API (e.g., "/api")
            verify_ssl: Whether to verify SSL certificates
            timeout: Timeout in seconds for regular requests
            download_timeout: Timeout in seconds for streamed downloads
            token_provider: Callable returning the current bearer token (or None)
            session_factory: Builds the per-thread sessions (requests.Session by default)
        """
        self.base_url = f"{server_url.rstrip('/')}:{server_port}{api_prefix.rstrip('/')}"
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.download_timeout = download_timeout
        self.token_provider = token_provider
        self.session_factory = session_factory or requests.Session
        # One Session per thread: refresh runs list and stats on separate workers
        self._local = threading.local()
        self._sessions = weakref.WeakSet()
        self._sessions_lock = threading.Lock()
        logger.debug(f"Initialized API client for {self.base_url} (SSL verification: {self.verify_ssl})")

    @property
    def session(self) -> requests.Session:
        """The calling thread's session, created on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self.session_factory()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.add(session)
        return session

    def close(self):
        """
        Close every open session and release resources.

        Should be called when done using the API client.
        """
        lock = getattr(self, '_sessions_lock', None)
        if lock is None:
            return
        with lock:
            sessions = list(self._sessions)
            self._sessions.clear()
            self._local = threading.local()
        for session in sessions:
            session.close()
        if sessions:
            logger.debug(f"API client closed {len(sessions)} session(s)")

    def __del__(self):
        """Cleanup on deletion."""
        self.close()

    # ==================== Request Plumbing ====================

    def _send(self, method: str, endpoint: str, authenticated: bool = True,
              **kwargs) -> requests.Response:
        """
        Send a request and return the successful response.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (e.g., "/files")
            authenticated: Whether to attach the bearer token
            **kwargs: Additional arguments for requests

        Returns:
            Response with a 2xx status code

        Raises:
            PatraKoshAuthError: If no token is available or the server answers 401
            PatraKoshServerError: On transport failure or any other error status
        """
        url = f"{self.base_url}{endpoint}"
        headers = kwargs.pop("headers", {})

        if authenticated:
            token = self.token_provider() if self.token_provider else None
            if not token:
                logger.error("Attempted API request without authentication")
                raise PatraKoshAuthError("Not authenticated - please login first")
            headers["Authorization"] = f"Bearer {token}"

        kwargs.setdefault("verify", self.verify_ssl)
        kwargs.setdefault("timeout", self.timeout)

        logger.debug(f"API request: {method} {endpoint}")

        try:
            response = self.session.request(method, url, headers=headers, **kwargs)
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Cannot connect to server at {self.base_url}: {e}")
            raise PatraKoshServerError(f"Cannot connect to server at {self.base_url}")
        except requests.exceptions.Timeout:
            logger.error("Request timed out")
            raise PatraKoshServerError("Request timed out")
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {str(e)}")
            raise PatraKoshServerError(f"Request error: {str(e)}")

        if response.status_code >= 400:
            self._raise_for_status(response)

        return response

    @staticmethod
    def _error_body(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _raise_for_status(self, response: requests.Response):
        """
        Convert an error response into the matching exception.

        Raises:
            PatraKoshAuthError: For 401
            PatraKoshValidationError: For bodies carrying "fieldErrors"
            PatraKoshServerError: For everything else
        """
        status = response.status_code
        body = self._error_body(response)
        server_message = body.get("message") or None

        if status == 401:
            # Session teardown belongs to the session owner, not to the API client
            logger.warning(f"Authentication rejected by server: {server_message}")
            raise PatraKoshAuthError(
                server_message or "Authentication token expired or invalid - please login again",
                server_message=server_message,
                status_code=status
            )

        field_errors = body.get("fieldErrors")
        if isinstance(field_errors, dict) and field_errors:
            logger.warning(f"Validation failed with status {status}: {field_errors}")
            raise PatraKoshValidationError(field_errors, status_code=status)

        if status >= 500:
            logger.error(f"Server error {status}: {server_message or response.text}")
        else:
            logger.error(f"Request failed with status {status}: {server_message or response.text}")

        raise PatraKoshServerError(
            server_message or f"Request failed with status {status}",
            server_message=server_message,
            status_code=status
        )

    def _make_request(self, method: str, endpoint: str, authenticated: bool = True,
                      **kwargs) -> Any:
        """
        Make an API request and return the parsed JSON body (None when empty).
        """
        response = self._send(method, endpoint, authenticated=authenticated, **kwargs)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise PatraKoshServerError(
                f"Invalid JSON in response to {method} {endpoint}",
                status_code=response.status_code
            )

    @staticmethod
    def _parse(model, data, endpoint: str):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Unexpected response shape from {endpoint}: {e}")
            raise PatraKoshServerError(f"Unexpected response from server for {endpoint}")

    # ==================== Authentication ====================

    def login(self, username_or_email: str, password: str) -> AuthResponse:
        """
        Authenticate with the server.

        Args:
            username_or_email: Username or email address
            password: User's password

        Returns:
            AuthResponse with the bearer token and user profile

        Raises:
            PatraKoshAuthError: If credentials are rejected
            PatraKoshServerError: If server error occurs
        """
        logger.info(f"Attempting login for user: {username_or_email}")
        payload = LoginRequest(username_or_email=username_or_email, password=password)
        data = self._make_request(
            "POST", "/auth/login",
            authenticated=False,
            json=payload.model_dump(by_alias=True)
        )
        result = self._parse(AuthResponse, data, "/auth/login")
        logger.info(f"Login successful for user: {username_or_email}")
        return result

    def signup(self, username: str, email: str, password: str,
               confirm_password: str) -> AuthResponse:
        """
        Create an account.

        Returns:
            AuthResponse with the bearer token and user profile

        Raises:
            PatraKoshValidationError: If the server rejects individual fields
            PatraKoshServerError: If server error occurs
        """
        logger.info(f"Attempting signup for user: {username}")
        payload = SignupRequest(
            username=username,
            email=email,
            password=password,
            confirm_password=confirm_password
        )
        data = self._make_request(
            "POST", "/auth/signup",
            authenticated=False,
            json=payload.model_dump(by_alias=True)
        )
        result = self._parse(AuthResponse, data, "/auth/signup")
        logger.info(f"Signup successful for user: {username}")
        return result

    # ==================== File Operations ====================

    def list_files(self, query: Optional[str] = None) -> List[FileRecord]:
        """
        List the user's files, optionally filtered by a search string.

        Args:
            query: Search string; the "q" parameter is sent only when non-empty

        Returns:
            Records in server order
        """
        query = (query or "").strip()
        params = {"q": query} if query else {}
        data = self._make_request("GET", "/files", params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise PatraKoshServerError("Unexpected response from server for /files")
        return [self._parse(FileRecord, item, "/files") for item in data]

    def get_stats(self) -> CollectionStats:
        """
        Get collection-wide statistics (file count and storage used).
        """
        data = self._make_request("GET", "/files/stats")
        return self._parse(CollectionStats, data or {}, "/files/stats")

    def upload_file(self, filename: str, file_data: Union[bytes, BinaryIO],
                    content_type: Optional[str] = None) -> Optional[FileRecord]:
        """
        Upload a file as multipart form field "file".

        Args:
            filename: Name to store the file under
            file_data: Binary content or an open binary file
            content_type: Optional MIME type of the part

        Returns:
            The created record, or None when the server answered 2xx without
            a recognisable record (the file is stored either way)
        """
        if content_type:
            files = {"file": (filename, file_data, content_type)}
        else:
            files = {"file": (filename, file_data)}
        logger.info(f"Uploading file: {filename}")
        response = self._send("POST", "/files", files=files)
        if not response.content:
            return None
        try:
            return FileRecord.model_validate(response.json())
        except ValueError as e:
            # Covers both non-JSON bodies and pydantic's ValidationError
            logger.warning(f"Upload of {filename} succeeded with an unrecognised response body: {e}")
            return None

    def rename_file(self, file_id: FileId, filename: str) -> Optional[FileRecord]:
        """
        Rename a file.

        Returns:
            The updated record, or None if the server answered without a body
        """
        logger.info(f"Renaming file {file_id} to: {filename}")
        data = self._make_request("PUT", f"/files/{file_id}", json={"filename": filename})
        if data is None:
            return None
        return self._parse(FileRecord, data, f"/files/{file_id}")

    def delete_file(self, file_id: FileId) -> None:
        """Delete a file."""
        logger.info(f"Deleting file {file_id}")
        self._send("DELETE", f"/files/{file_id}")

    def download_file(self, file_id: FileId, destination: BinaryIO,
                      chunk_size: int = 8192) -> int:
        """
        Stream a file's raw bytes into an open binary file.

        Args:
            file_id: Id of the file to download
            destination: Writable binary file object
            chunk_size: Size of streamed chunks

        Returns:
            Number of bytes written

        Raises:
            PatraKoshServerError: If the download fails or the stream breaks
        """
        response = self._send(
            "GET", f"/files/{file_id}/download",
            stream=True,
            timeout=self.download_timeout
        )

        written = 0
        try:
            # Write file in chunks to handle large files
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    destination.write(chunk)
                    written += len(chunk)
        except requests.exceptions.RequestException as e:
            logger.error(f"Download of file {file_id} interrupted: {e}")
            raise PatraKoshServerError(f"Download error: {str(e)}")
        finally:
            response.close()

        logger.debug(f"Downloaded {written} bytes for file {file_id}")
        return written
