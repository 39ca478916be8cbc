"""
Video catalog: the in-process index of schedulable assets.
"""

from .asset_sources import AssetSource, DatabaseAssetSource, JsonAssetSource
from .snapshot_store import JsonSnapshotStore
from .video_library import VideoLibraryManager

__all__ = [
    "AssetSource",
    "DatabaseAssetSource",
    "JsonAssetSource",
    "JsonSnapshotStore",
    "VideoLibraryManager",
]
