"""Read-only storage bridge over the remote files API.

Useful for analyzing what the API serves without a local copy. The bridge
declares no optional capabilities, so Mirror, Clean and Repair refuse to run
against it.

Bridge paths have the store layout ('16.0.0/UnicodeData.txt'). They are mapped
onto the API layout, which keeps the files of 4.1.0 and later under a
'ucd/' folder, so the bridge lists a version exactly as the store would.
"""

import asyncio
import logging
from typing import Any

import requests

from ucdstore.bridges.base import ROOT_PATHS, BridgeMetadata, FileSystemBridge
from ucdstore.client import (
    DEFAULT_API_URL,
    ClientConfig,
    create_session,
    parse_version,
    remote_file_path,
)
from ucdstore.errors import (
    BridgeFileNotFoundError,
    GenericStoreError,
    MalformedPayloadError,
    PathTraversalError,
)
from ucdstore.models.entry import DirectoryEntry, FSEntry, entry_from_dict
from ucdstore.tree import join_path, normalize_path

logger = logging.getLogger(__name__)

FILES_ENDPOINT = "api/v1/files"


class HTTPBridge(FileSystemBridge):
    """Bridge that reads files and listings from the UCD API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the bridge.

        Args:
            base_url: API origin.
            session: Session to use. A retrying session is created if None.
            timeout: Per-request timeout in seconds.
        """
        super().__init__(capabilities=())
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or create_session(ClientConfig(base_url=base_url, timeout=timeout))

    @property
    def meta(self) -> BridgeMetadata:
        return BridgeMetadata(
            name="http",
            description=f"Read-only bridge over {self._base_url}/{FILES_ENDPOINT}",
        )

    def _url(self, path: str) -> str:
        try:
            relative = normalize_path(path)
        except ValueError as e:
            raise PathTraversalError(FILES_ENDPOINT, path) from e
        version, _, rest = relative.partition("/")
        if parse_version(version):
            relative = remote_file_path(version, rest)
        return f"{self._base_url}/{join_path(FILES_ENDPOINT, relative)}"

    def _read_sync(self, path: str) -> bytes:
        response = self._session.get(self._url(path), timeout=self._timeout)
        if response.status_code == 404:
            raise BridgeFileNotFoundError(path)
        if not response.ok:
            raise GenericStoreError(
                f"Failed to read remote file {path}: {response.reason}",
                status=response.status_code,
            )
        return response.content

    def _exists_sync(self, path: str) -> bool:
        try:
            response = self._session.head(self._url(path), timeout=self._timeout)
        except requests.RequestException as e:
            logger.debug("HEAD %s failed: %s", path, e)
            return False
        return response.ok

    def _listdir_sync(self, path: str, recursive: bool) -> list[FSEntry]:
        response = self._session.get(
            self._url(path),
            headers={"Accept": "application/json"},
            timeout=self._timeout,
        )
        if response.status_code in (403, 404):
            return []
        if not response.ok:
            raise GenericStoreError(
                f"Failed to list directory {path}: {response.reason} ({response.status_code})",
                status=response.status_code,
            )

        entries = self._parse_listing(path, response)
        if not recursive:
            return [
                DirectoryEntry(name=e.name, path=e.path) if isinstance(e, DirectoryEntry) else e
                for e in entries
            ]

        result: list[FSEntry] = []
        for entry in entries:
            if isinstance(entry, DirectoryEntry):
                children = self._listdir_sync(join_path(path, entry.name), recursive=True)
                result.append(
                    DirectoryEntry(name=entry.name, path=entry.path, children=tuple(children))
                )
            else:
                result.append(entry)
        return result

    @staticmethod
    def _parse_listing(path: str, response: requests.Response) -> list[FSEntry]:
        try:
            payload: Any = response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"Listing of {path!r} is not valid JSON") from e
        if not isinstance(payload, list):
            raise MalformedPayloadError(f"Listing of {path!r} is not a list of entries")
        try:
            return [entry_from_dict(item) for item in payload]
        except ValueError as e:
            raise MalformedPayloadError(f"Invalid entry in listing of {path!r}: {e}") from e

    async def read(self, path: str) -> bytes:
        return await asyncio.to_thread(self._read_sync, path)

    async def exists(self, path: str) -> bool:
        if path.strip() in ROOT_PATHS:
            return True
        return await asyncio.to_thread(self._exists_sync, path)

    async def listdir(self, path: str, recursive: bool = False) -> list[FSEntry]:
        return await asyncio.to_thread(self._listdir_sync, path, recursive)
