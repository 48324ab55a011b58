"""Resource module for scivo.

リソースアーカイブ（マップファイルとデータファイルの組）を読み込むモジュール。
インデックス解析、データ読み込み、パッチファイル出力を提供する。
"""

from scivo.resource.block import Block, BlockSource
from scivo.resource.datafile import (
    CompressionMethod,
    Contents,
    DataFile,
    RawContents,
    ResourceHeader,
    decode_payload,
)
from scivo.resource.mapfile import Location, ResourceLocations
from scivo.resource.patch import PatchResult, extract_as_patch, patch_filename
from scivo.resource.store import (
    ReadResult,
    ResourceStore,
    open_main_store,
    open_message_store,
)
from scivo.resource.types import ResourceId, ResourceType

__all__ = [
    "Block",
    "BlockSource",
    "CompressionMethod",
    "Contents",
    "DataFile",
    "Location",
    "PatchResult",
    "RawContents",
    "ReadResult",
    "ResourceHeader",
    "ResourceId",
    "ResourceLocations",
    "ResourceStore",
    "ResourceType",
    "decode_payload",
    "extract_as_patch",
    "open_main_store",
    "open_message_store",
    "patch_filename",
]
