"""Expected-set resolution.

The expected set of a version is the flattened list of files its remote tree
contains, narrowed by the store's path filter. Any client failure is re-raised
as GenericStoreError carrying the version and, where known, the HTTP status.
"""

import logging
from typing import Protocol

from ucdstore.client import UCDClient
from ucdstore.errors import ApiError, GenericStoreError
from ucdstore.filters import PathFilter
from ucdstore.models.entry import FSEntry
from ucdstore.tree import flatten_file_paths

logger = logging.getLogger(__name__)


class FileTreeSource(Protocol):
    """Anything that can produce a version's file tree."""

    async def get_file_tree(self, version: str) -> list[FSEntry]: ...


class ExpectedSetResolver:
    """Resolves the files each version is expected to contain."""

    def __init__(
        self,
        client: FileTreeSource | UCDClient,
        path_filter: PathFilter | None = None,
    ) -> None:
        self._client = client
        self.path_filter = path_filter or PathFilter()

    async def expected_files(self, version: str) -> list[str]:
        """Return the sorted, unique version-relative paths of a version.

        Args:
            version: Unicode version.

        Returns:
            Sorted list of expected file paths.

        Raises:
            GenericStoreError: If the tree cannot be fetched or is malformed.
        """
        try:
            tree = await self._client.get_file_tree(version)
        except ApiError as e:
            status = getattr(e, "status", None)
            raise GenericStoreError(
                f"Failed to fetch file tree for version '{version}': {e}",
                version=version,
                status=status,
            ) from e

        files = sorted(set(self.path_filter.filter_paths(flatten_file_paths(tree))))
        logger.debug("Resolved %d expected files for %s", len(files), version)
        return files
