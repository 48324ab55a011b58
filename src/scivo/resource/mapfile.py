"""マップファイル（リソースインデックス）の解析モジュール

マップファイルを読み込み、リソースIDからデータファイル内の位置への
順序付きマッピングを構築する。

マップファイルの構造（リトルエンディアン）:
    種別ディレクトリ: [u8 種別タグ][u16 エントリ表オフセット] の繰り返し。
        タグ 0xFF で終端し、そのオフセットが最後のエントリ表の終端を示す。
    エントリ表: [u16 リソース番号][u24 ワードオフセット] の5バイトレコード。
        データファイル内のバイトオフセットは ``ワードオフセット << 1``。
"""

from __future__ import annotations

import struct
from collections.abc import Iterator
from dataclasses import dataclass

from scivo.errors import FormatError
from scivo.resource.types import ResourceId, ResourceType

DIRECTORY_TERMINATOR = 0xFF
DIRECTORY_RECORD_SIZE = 3
ENTRY_RECORD_SIZE = 5


@dataclass(frozen=True)
class Location:
    """データファイル内のリソース位置

    Attributes:
        resource_id: リソースID
        offset: データファイル内のバイトオフセット
    """

    resource_id: ResourceId
    offset: int


@dataclass(frozen=True)
class _TypeTable:
    resource_type: ResourceType
    start: int
    end: int


class ResourceLocations:
    """リソースIDからデータファイル位置への順序付きマッピング

    マップファイル全体を一度だけ読み込んで構築する。
    """

    def __init__(self, locations: dict[ResourceId, Location]) -> None:
        self._locations = {key: locations[key] for key in sorted(locations)}

    @classmethod
    def read_from(cls, data: bytes) -> ResourceLocations:
        """マップファイルのバイト列を解析する

        Args:
            data: マップファイル全体のバイト列

        Returns:
            解析されたリソース位置マッピング

        Raises:
            FormatError: マップファイルの構造が不正な場合
        """
        tables = _read_directory(data)
        locations: dict[ResourceId, Location] = {}

        for table in tables:
            length = table.end - table.start
            if length % ENTRY_RECORD_SIZE != 0:
                raise FormatError(
                    f"{table.resource_type.name}のエントリ表の長さが不正です: {length}バイト"
                )
            for pos in range(table.start, table.end, ENTRY_RECORD_SIZE):
                number, offset_low, offset_high = struct.unpack_from("<HHB", data, pos)
                resource_id = ResourceId(table.resource_type, number)
                if resource_id in locations:
                    raise FormatError(f"リソースIDが重複しています: {resource_id}")
                word_offset = offset_low | (offset_high << 16)
                locations[resource_id] = Location(resource_id=resource_id, offset=word_offset << 1)

        return cls(locations)

    def get_location(self, resource_id: ResourceId) -> Location | None:
        """リソースIDの位置を取得する

        Args:
            resource_id: 検索するリソースID

        Returns:
            見つかった位置、存在しない場合None
        """
        return self._locations.get(resource_id)

    def locations(self) -> Iterator[Location]:
        """すべての位置を (種別, 番号) の昇順で返す"""
        return iter(self._locations.values())

    def __len__(self) -> int:
        return len(self._locations)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._locations


def _read_directory(data: bytes) -> list[_TypeTable]:
    """種別ディレクトリを読み込み、種別ごとのエントリ表範囲を返す

    Raises:
        FormatError: 終端がない・タグが未知・オフセットが不正な場合
    """
    headers: list[tuple[int, int]] = []
    pos = 0
    while True:
        if pos + DIRECTORY_RECORD_SIZE > len(data):
            raise FormatError("マップファイルの種別ディレクトリに終端がありません")
        tag, offset = struct.unpack_from("<BH", data, pos)
        pos += DIRECTORY_RECORD_SIZE
        headers.append((tag, offset))
        if tag == DIRECTORY_TERMINATOR:
            break

    directory_end = pos
    tables: list[_TypeTable] = []
    seen_types: set[ResourceType] = set()

    for (tag, start), (_, end) in zip(headers, headers[1:]):
        resource_type = ResourceType.from_tag(tag)
        if resource_type in seen_types:
            raise FormatError(f"種別ディレクトリに{resource_type.name}が重複しています")
        seen_types.add(resource_type)
        if start < directory_end or end < start or end > len(data):
            raise FormatError(
                f"{resource_type.name}のエントリ表の範囲が不正です: {start}..{end}"
            )
        tables.append(_TypeTable(resource_type=resource_type, start=start, end=end))

    terminator_offset = headers[-1][1]
    if terminator_offset > len(data):
        raise FormatError(f"マップファイルが途中で切れています: 終端オフセット {terminator_offset}")

    return tables
