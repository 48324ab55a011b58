"""リソースストアモジュール

マップファイルとデータファイルの組を一つのアーカイブとして扱い、
列挙・検索・読み込みのAPIを提供する。
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from scivo.errors import ResourceNotFoundError
from scivo.resource.block import BlockSource
from scivo.resource.datafile import Contents, DataFile, RawContents
from scivo.resource.mapfile import Location, ResourceLocations
from scivo.resource.types import ResourceId, ResourceType

logger = logging.getLogger(__name__)

MAIN_MAP_FILE = "RESOURCE.MAP"
MAIN_DATA_FILE = "RESOURCE.000"
MESSAGE_MAP_FILE = "MESSAGE.MAP"
MESSAGE_DATA_FILE = "RESOURCE.MSG"


@dataclass(frozen=True)
class ReadResult:
    """一括列挙における1件分の読み込み結果

    成功時はcontentsを、失敗時はerrorを保持する。

    Attributes:
        location: 読み込み対象の位置
        contents: 読み込んだ生データ（失敗時はNone）
        error: 発生した例外（成功時はNone）
    """

    location: Location
    contents: RawContents | None = None
    error: Exception | None = None

    @property
    def is_success(self) -> bool:
        """読み込みが成功したかどうかを返す"""
        return self.error is None


class ResourceStore:
    """マップファイルとデータファイルの組を扱うリソースストア

    構築後は読み込み専用で、複数スレッドから同時に参照できる。
    """

    def __init__(self, locations: ResourceLocations, data_file: DataFile) -> None:
        self._locations = locations
        self._data_file = data_file

    @classmethod
    def open(cls, map_path: Path, data_path: Path) -> ResourceStore:
        """マップファイルとデータファイルを開く

        Args:
            map_path: マップファイルのパス
            data_path: データファイルのパス

        Returns:
            開かれたリソースストア

        Raises:
            FileNotFoundError: いずれかのファイルが存在しない場合
            OSError: ファイルの読み込みに失敗した場合
            FormatError: マップファイルの解析に失敗した場合
        """
        if not map_path.exists():
            raise FileNotFoundError(f"マップファイルが見つかりません: {map_path}")
        data_source = BlockSource.from_path(data_path)
        locations = ResourceLocations.read_from(map_path.read_bytes())
        logger.debug(f"{map_path}: {len(locations)}件のリソースを検出")
        return cls(locations, DataFile(data_source))

    @property
    def locations(self) -> ResourceLocations:
        return self._locations

    def resource_ids(self, resource_type: ResourceType | None = None) -> list[ResourceId]:
        """インデックスに含まれるリソースIDを昇順で返す

        Args:
            resource_type: 指定した場合はその種別のみを返す

        Returns:
            リソースIDのリスト
        """
        return [
            location.resource_id
            for location in self._locations.locations()
            if resource_type is None or location.resource_id.resource_type == resource_type
        ]

    def read_raw_contents(self) -> Iterator[ReadResult]:
        """すべてのリソースの生データを順に読み込む

        1件の失敗は列挙全体を中断せず、その位置の結果にエラーとして格納される。

        Yields:
            位置ごとの読み込み結果
        """
        for location in self._locations.locations():
            try:
                contents = self._data_file.read_raw_contents(location)
            except (OSError, ValueError) as e:
                logger.warning(f"{location.resource_id}: 読み込みに失敗しました: {e}")
                yield ReadResult(location=location, error=e)
            else:
                yield ReadResult(location=location, contents=contents)

    def read_raw_resource(self, resource_type: ResourceType, number: int) -> RawContents:
        """指定リソースの生データを読み込む

        Raises:
            ResourceNotFoundError: インデックスに存在しない場合
        """
        return self._data_file.read_raw_contents(self._find(resource_type, number))

    def read_resource(self, resource_type: ResourceType, number: int) -> Contents:
        """指定リソースを読み込み、展開済みの内容を返す

        Args:
            resource_type: リソース種別
            number: リソース番号

        Returns:
            展開済みのリソース内容

        Raises:
            ResourceNotFoundError: インデックスに存在しない場合
            FormatError: データが不正な場合
            OSError: 読み込みに失敗した場合
        """
        return self._data_file.read_contents(self._find(resource_type, number))

    def _find(self, resource_type: ResourceType, number: int) -> Location:
        resource_id = ResourceId(resource_type, number)
        location = self._locations.get_location(resource_id)
        if location is None:
            raise ResourceNotFoundError(resource_id)
        return location


def open_main_store(root_dir: Path) -> ResourceStore:
    """ゲームディレクトリのメインリソースストアを開く"""
    return ResourceStore.open(root_dir / MAIN_MAP_FILE, root_dir / MAIN_DATA_FILE)


def open_message_store(root_dir: Path) -> ResourceStore:
    """ゲームディレクトリのメッセージリソースストアを開く"""
    return ResourceStore.open(root_dir / MESSAGE_MAP_FILE, root_dir / MESSAGE_DATA_FILE)
