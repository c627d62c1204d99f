"""HTTP client for the UCD API.

The client wraps a requests Session with automatic retries on transient
status codes. Its public methods are async and run the blocking request in a
worker thread, so many downloads can be in flight under a single event loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Annotated, Any

import requests
from pydantic import BaseModel, ConfigDict, Field
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ucdstore.errors import ApiNotFoundError, ApiResponseError, MalformedPayloadError
from ucdstore.models.entry import FSEntry, entry_from_dict
from ucdstore.tree import join_path, normalize_path

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.ucdjs.dev"

RETRY_STATUS_CODES = (408, 409, 425, 429, 500, 502, 503, 504)

# Releases from 4.1.0 on keep their data files under a 'ucd/' folder.
UCD_FOLDER_MIN_VERSION = (4, 1, 0)


class ClientConfig(BaseModel):
    """Connection settings for the UCD API.

    Attributes:
        base_url: API origin (e.g., 'https://api.ucdjs.dev').
        timeout: Per-request timeout in seconds.
        retries: Retry attempts for transient failures.
        backoff_factor: Exponential backoff factor between retries.
    """

    model_config = ConfigDict(extra="forbid")

    base_url: Annotated[str, Field(description="API origin")] = DEFAULT_API_URL
    timeout: Annotated[float, Field(gt=0, description="Request timeout in seconds")] = 30.0
    retries: Annotated[int, Field(ge=0, description="Retry attempts")] = 3
    backoff_factor: Annotated[float, Field(ge=0, description="Retry backoff factor")] = 0.5


@dataclass(frozen=True, slots=True)
class RemoteFile:
    """A downloaded file.

    Attributes:
        content: Raw response body.
        content_type: Media type without parameters (e.g., 'text/plain').
        charset: Charset parameter of the Content-Type header, if any.
    """

    content: bytes
    content_type: str
    charset: str | None = None

    @property
    def is_text(self) -> bool:
        """True for JSON and text/* media types."""
        return self.content_type == "application/json" or self.content_type.startswith("text/")

    def text(self, encoding: str | None = None) -> str:
        """Decode the body with the given encoding, the declared charset or UTF-8."""
        return self.content.decode(encoding or self.charset or "utf-8")


def parse_content_type(header: str) -> tuple[str, str | None]:
    """Split a Content-Type header into its media type and charset.

    Example:
        >>> parse_content_type("text/plain; charset=ISO-8859-1")
        ('text/plain', 'iso-8859-1')
    """
    media_type, *params = header.split(";")
    charset = None
    for param in params:
        key, _, value = param.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            charset = value.strip().strip('"').lower()
    return media_type.strip().lower(), charset


def parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted version into integers, ignoring non-numeric suffixes."""
    parts: list[int] = []
    for segment in version.split("."):
        digits = ""
        for char in segment:
            if not char.isdigit():
                break
            digits += char
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


def has_ucd_folder_path(version: str) -> bool:
    """Check whether a release stores its files under a 'ucd/' folder.

    Args:
        version: Unicode version (e.g., '16.0.0').

    Returns:
        True for versions 4.1.0 and later.
    """
    parsed = parse_version(version)
    if not parsed:
        return False
    padded = parsed + (0,) * (len(UCD_FOLDER_MIN_VERSION) - len(parsed))
    return padded >= UCD_FOLDER_MIN_VERSION


def remote_file_path(version: str, path: str) -> str:
    """Build the API path of a version-relative file."""
    folder = "ucd" if has_ucd_folder_path(version) else ""
    return join_path(version, folder, normalize_path(path))


def create_session(config: ClientConfig) -> requests.Session:
    """Create a Session that retries idempotent requests on transient errors."""
    retry = Retry(
        total=config.retries,
        backoff_factor=config.backoff_factor,
        status_forcelist=RETRY_STATUS_CODES,
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = "ucdstore"
    return session


class UCDClient:
    """Client for the file-tree, files and versions endpoints."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Connection settings. Uses defaults if None.
            session: Session to use. A retrying session is created if None.
        """
        self.config = config or ClientConfig()
        self._session = session or create_session(self.config)

    def url(self, *parts: str) -> str:
        """Build an absolute API URL."""
        return f"{self.config.base_url.rstrip('/')}/{join_path(*parts)}"

    def _get(self, resource: str, url: str, accept: str | None = None) -> requests.Response:
        headers = {"Accept": accept} if accept else None
        try:
            response = self._session.get(url, headers=headers, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise ApiResponseError(resource, None, str(e)) from e

        if response.status_code == 404:
            raise ApiNotFoundError(resource)
        if not response.ok:
            raise ApiResponseError(resource, response.status_code, response.reason or "")
        return response

    def _get_json(self, resource: str, url: str) -> Any:
        response = self._get(resource, url, accept="application/json")
        try:
            return response.json()
        except ValueError as e:
            msg = f"Response for {resource} is not valid JSON"
            raise MalformedPayloadError(msg) from e

    def _get_file_tree_sync(self, version: str) -> list[FSEntry]:
        resource = f"file tree of {version}"
        payload = self._get_json(resource, self.url("api/v1/versions", version, "file-tree"))
        if not isinstance(payload, list):
            msg = f"Expected a list of entries for {resource}, got {type(payload).__name__}"
            raise MalformedPayloadError(msg)
        try:
            return [entry_from_dict(item) for item in payload]
        except ValueError as e:
            raise MalformedPayloadError(f"Invalid entry in {resource}: {e}") from e

    def _get_file_sync(self, version: str, path: str) -> RemoteFile:
        remote_path = remote_file_path(version, path)
        response = self._get(remote_path, self.url("api/v1/files", remote_path))
        content_type, charset = parse_content_type(
            response.headers.get("Content-Type", "application/octet-stream")
        )
        return RemoteFile(content=response.content, content_type=content_type, charset=charset)

    def _list_versions_sync(self) -> list[str]:
        payload = self._get_json("versions", self.url("api/v1/versions"))
        if not isinstance(payload, list):
            msg = f"Expected a list of versions, got {type(payload).__name__}"
            raise MalformedPayloadError(msg)
        versions: list[str] = []
        for item in payload:
            version = item.get("version") if isinstance(item, dict) else item
            if not isinstance(version, str):
                msg = f"Invalid version entry: {item!r}"
                raise MalformedPayloadError(msg)
            versions.append(version)
        return versions

    async def get_file_tree(self, version: str) -> list[FSEntry]:
        """Fetch the expected file tree of a version.

        Args:
            version: Unicode version.

        Returns:
            Top-level entries of the version's tree.

        Raises:
            ApiNotFoundError: If the API does not know the version.
            ApiResponseError: On other non-success responses or network errors.
            MalformedPayloadError: If the payload is not a list of entries.
        """
        logger.debug("Fetching file tree for %s", version)
        return await asyncio.to_thread(self._get_file_tree_sync, version)

    async def get_file(self, version: str, path: str) -> RemoteFile:
        """Download a version-relative file.

        Raises:
            ApiNotFoundError: If the file does not exist remotely.
            ApiResponseError: On other non-success responses or network errors.
        """
        logger.debug("Downloading %s/%s", version, path)
        return await asyncio.to_thread(self._get_file_sync, version, path)

    async def list_versions(self) -> list[str]:
        """Fetch all versions known to the API, newest first as served."""
        return await asyncio.to_thread(self._list_versions_sync)

    def close(self) -> None:
        self._session.close()
