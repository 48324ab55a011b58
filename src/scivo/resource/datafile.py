"""データファイル読み込みモジュール

マップファイルが示す位置からリソースのヘッダーとペイロードを読み込む。
格納されたままの生データ読み込みと、圧縮を解いた内容の読み込みを提供する。

レコードヘッダーの構造（9バイト, リトルエンディアン）:
    [u8 種別タグ][u16 リソース番号][u16 格納サイズ][u16 展開後サイズ][u16 圧縮方式]
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from scivo.errors import FormatError
from scivo.resource.block import Block, BlockSource
from scivo.resource.dcl import DCLDecoder
from scivo.resource.mapfile import Location
from scivo.resource.types import ResourceId, ResourceType

logger = logging.getLogger(__name__)

HEADER_FORMAT = "<BHHHH"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)


class CompressionMethod(IntEnum):
    """ヘッダーに格納される圧縮方式タグ"""

    STORED = 0
    DCL_18 = 18
    DCL_19 = 19
    DCL_20 = 20


@dataclass(frozen=True)
class ResourceHeader:
    """データファイル内のレコードヘッダー

    Attributes:
        resource_type: リソース種別
        number: リソース番号
        packed_size: 格納されているペイロードのサイズ
        unpacked_size: 展開後のサイズ
        compression: 圧縮方式タグ（未知の値もそのまま保持する）
    """

    resource_type: ResourceType
    number: int
    packed_size: int
    unpacked_size: int
    compression: int

    @property
    def resource_id(self) -> ResourceId:
        """ヘッダーが示すリソースID"""
        return ResourceId(self.resource_type, self.number)

    @classmethod
    def parse(cls, data: bytes) -> ResourceHeader:
        """ヘッダーバイト列を解析する

        Raises:
            FormatError: 長さ不足または未知の種別タグの場合
        """
        if len(data) != HEADER_SIZE:
            raise FormatError(f"ヘッダーの長さが不正です: {len(data)}バイト")
        tag, number, packed_size, unpacked_size, compression = struct.unpack(HEADER_FORMAT, data)
        return cls(
            resource_type=ResourceType.from_tag(tag),
            number=number,
            packed_size=packed_size,
            unpacked_size=unpacked_size,
            compression=compression,
        )


@dataclass(frozen=True)
class RawContents:
    """格納されたままのリソース内容

    Attributes:
        location: 読み込み元の位置
        header_bytes: ヘッダーの生バイト列
        header: 解析済みヘッダー
        payload: 格納されたペイロード（遅延読み込み）
    """

    location: Location
    header_bytes: bytes
    header: ResourceHeader
    payload: Block


@dataclass(frozen=True)
class Contents:
    """展開済みのリソース内容

    Attributes:
        resource_type: ヘッダーが宣言するリソース種別
        number: リソース番号
        data: 展開済みのバイト列
    """

    resource_type: ResourceType
    number: int
    data: bytes

    @property
    def resource_id(self) -> ResourceId:
        return ResourceId(self.resource_type, self.number)


def _decode_stored(payload: bytes, unpacked_size: int) -> bytes:
    return payload


def _decode_dcl(payload: bytes, unpacked_size: int) -> bytes:
    return DCLDecoder().decode(payload, unpacked_size)


_DECODERS: dict[int, Callable[[bytes, int], bytes]] = {
    CompressionMethod.STORED: _decode_stored,
    CompressionMethod.DCL_18: _decode_dcl,
    CompressionMethod.DCL_19: _decode_dcl,
    CompressionMethod.DCL_20: _decode_dcl,
}


def decode_payload(header: ResourceHeader, payload: bytes) -> bytes:
    """ヘッダーの圧縮方式に従ってペイロードを展開する

    同じ入力に対しては常に同じバイト列を返す。

    Args:
        header: レコードヘッダー
        payload: 格納されたペイロード

    Returns:
        展開済みのバイト列

    Raises:
        FormatError: 圧縮方式が未知、展開失敗、またはサイズ不一致の場合
    """
    decoder = _DECODERS.get(header.compression)
    if decoder is None:
        raise FormatError(f"{header.resource_id}: 未知の圧縮方式です: {header.compression}")

    try:
        data = decoder(payload, header.unpacked_size)
    except ValueError as e:
        raise FormatError(f"{header.resource_id}: 展開に失敗しました: {e}") from e

    if len(data) != header.unpacked_size:
        raise FormatError(
            f"{header.resource_id}: 展開後のサイズが一致しません "
            f"(期待値 {header.unpacked_size}, 実際 {len(data)})"
        )
    return data


class DataFile:
    """データファイルからリソースを読み込むクラス"""

    def __init__(self, source: BlockSource) -> None:
        """バイトソースを指定して初期化する

        Args:
            source: データファイルのバイトソース
        """
        self._source = source

    @property
    def source(self) -> BlockSource:
        return self._source

    def read_raw_contents(self, location: Location) -> RawContents:
        """格納されたままのヘッダーとペイロードを読み込む

        ペイロードは遅延ブロックとして返し、この時点では読み込まない。

        Args:
            location: 読み込むリソースの位置

        Returns:
            格納されたままのリソース内容

        Raises:
            FormatError: ヘッダーが不正、またはマップと一致しない場合
            OSError: 読み込みに失敗した場合
        """
        header_bytes = self._source.read_at(location.offset, HEADER_SIZE)
        header = ResourceHeader.parse(header_bytes)
        if header.resource_id != location.resource_id:
            raise FormatError(
                f"ヘッダーがマップと一致しません: "
                f"マップ {location.resource_id}, ヘッダー {header.resource_id} "
                f"(offset={location.offset})"
            )

        payload_offset = location.offset + HEADER_SIZE
        if payload_offset + header.packed_size > self._source.size:
            raise FormatError(
                f"{header.resource_id}: ペイロードがデータファイルの終端を越えています"
            )

        logger.debug(f"読み込み: {header.resource_id} offset={location.offset}")
        return RawContents(
            location=location,
            header_bytes=header_bytes,
            header=header,
            payload=self._source.block(payload_offset, header.packed_size),
        )

    def read_contents(self, location: Location) -> Contents:
        """リソースを読み込み、展開済みの内容を返す

        Args:
            location: 読み込むリソースの位置

        Returns:
            展開済みのリソース内容

        Raises:
            FormatError: ヘッダー不正・未知の圧縮方式・サイズ不一致の場合
            OSError: 読み込みに失敗した場合
        """
        raw = self.read_raw_contents(location)
        data = decode_payload(raw.header, raw.payload.read())
        return Contents(
            resource_type=raw.header.resource_type,
            number=raw.header.number,
            data=data,
        )
