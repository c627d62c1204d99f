"""Storage bridges.

Reconciliation code talks to storage only through a FileSystemBridge.
"""

from ucdstore.bridges.base import (
    BridgeMetadata,
    FileSystemBridge,
    assert_capability,
    supports,
)
from ucdstore.bridges.http import HTTPBridge
from ucdstore.bridges.local import LocalBridge, resolve_safe_path
from ucdstore.bridges.memory import MemoryBridge

__all__ = [
    "BridgeMetadata",
    "FileSystemBridge",
    "HTTPBridge",
    "LocalBridge",
    "MemoryBridge",
    "assert_capability",
    "resolve_safe_path",
    "supports",
]
