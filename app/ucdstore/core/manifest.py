"""Store manifest I/O through a storage bridge.

The manifest is pretty-printed JSON at the bridge root. Reading validates it
with the StoreManifest model; writing requires the bridge's write capability.
"""

import json
import logging

from pydantic import ValidationError

from ucdstore.bridges.base import FileSystemBridge, assert_capability
from ucdstore.errors import InvalidManifestError, UCDStoreError
from ucdstore.models.manifest import StoreManifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = ".ucd-store.json"


async def write_manifest(
    bridge: FileSystemBridge,
    manifest: StoreManifest,
    path: str = MANIFEST_FILENAME,
) -> None:
    """Write the store manifest.

    Args:
        bridge: Bridge to write through.
        manifest: Manifest to persist.
        path: Bridge-relative manifest path.

    Raises:
        UnsupportedOperationError: If the bridge cannot write.
    """
    assert_capability(bridge, "write")
    await bridge.write(path, manifest.to_json())
    logger.debug("Wrote manifest %s with versions %s", path, ", ".join(manifest.versions))


async def read_manifest(
    bridge: FileSystemBridge,
    path: str = MANIFEST_FILENAME,
) -> StoreManifest:
    """Read and validate the store manifest.

    Args:
        bridge: Bridge to read through.
        path: Bridge-relative manifest path.

    Returns:
        Validated StoreManifest.

    Raises:
        BridgeFileNotFoundError: If the manifest does not exist.
        InvalidManifestError: If the manifest is empty, not JSON or does not
            match the expected schema.
    """
    raw = await bridge.read(path)
    if not raw.strip():
        raise InvalidManifestError(path, "store manifest is empty")

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidManifestError(path, "store manifest is not valid JSON") from e

    try:
        return StoreManifest.model_validate(data)
    except ValidationError as e:
        raise InvalidManifestError(
            path, f"store manifest does not match expected schema: {e}"
        ) from e


async def read_manifest_or_default(
    bridge: FileSystemBridge,
    path: str = MANIFEST_FILENAME,
    default: StoreManifest | None = None,
) -> StoreManifest:
    """Read the store manifest, falling back to a default on any read error.

    Args:
        bridge: Bridge to read through.
        path: Bridge-relative manifest path.
        default: Manifest to return on failure. An empty manifest if None.

    Returns:
        The stored manifest, or the default.
    """
    try:
        return await read_manifest(bridge, path)
    except (UCDStoreError, OSError) as e:
        logger.debug("Failed to read manifest %s, using default: %s", path, e)
        return default if default is not None else StoreManifest()
