"""テスト共通フィクスチャ

合成したマップファイル・データファイル・メッセージリソースを作成する。
"""

from __future__ import annotations

import struct
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

from scivo.resource.types import ResourceType

# blast.c の例示ストリーム（非符号化リテラル, 辞書4ビット）
DCL_SAMPLE = bytes([0x00, 0x04, 0x82, 0x24, 0x25, 0x8F, 0x80, 0x7F])
DCL_SAMPLE_DECODED = b"AIAIAIAIAIAIA"

# ハフマン符号化リテラルのストリーム（符号化リテラル, 辞書4ビット）
DCL_CODED_SAMPLE = bytes([0x01, 0x04, 0x8A, 0xED, 0x78, 0xD5, 0x56, 0x02, 0xFE, 0x01])
DCL_CODED_SAMPLE_DECODED = b"tea set"


def build_map(locations: dict[ResourceType, list[tuple[int, int]]]) -> bytes:
    """(種別 -> [(番号, バイトオフセット)]) からマップファイルを組み立てる"""
    types = sorted(locations)
    pos = (len(types) + 1) * 3
    directory = bytearray()
    tables = bytearray()
    for resource_type in types:
        directory += struct.pack("<BH", resource_type.tag, pos)
        for number, offset in sorted(locations[resource_type]):
            word = offset >> 1
            tables += struct.pack("<HHB", number, word & 0xFFFF, word >> 16)
            pos += 5
    directory += struct.pack("<BH", 0xFF, pos)
    return bytes(directory + tables)


@dataclass
class _Item:
    resource_type: ResourceType
    number: int
    payload: bytes
    unpacked_size: int | None
    compression: int
    header_type: ResourceType | None
    header_number: int | None


class ArchiveWriter:
    """テスト用のアーカイブ（マップファイル + データファイル）を作成する"""

    def __init__(self) -> None:
        self._items: list[_Item] = []
        self._dangling: list[tuple[ResourceType, int, int]] = []

    def add(
        self,
        resource_type: ResourceType,
        number: int,
        payload: bytes,
        *,
        unpacked_size: int | None = None,
        compression: int = 0,
        header_type: ResourceType | None = None,
        header_number: int | None = None,
    ) -> ArchiveWriter:
        self._items.append(
            _Item(
                resource_type=resource_type,
                number=number,
                payload=payload,
                unpacked_size=unpacked_size,
                compression=compression,
                header_type=header_type,
                header_number=header_number,
            )
        )
        return self

    def add_dangling(self, resource_type: ResourceType, number: int, offset: int) -> ArchiveWriter:
        """データファイル内の任意オフセットを指すマップエントリを追加する"""
        self._dangling.append((resource_type, number, offset))
        return self

    def build(self) -> tuple[bytes, bytes]:
        data = bytearray()
        locations: dict[ResourceType, list[tuple[int, int]]] = {}
        for item in self._items:
            if len(data) % 2:
                data.append(0)
            offset = len(data)
            header_type = item.header_type if item.header_type is not None else item.resource_type
            header_number = item.header_number if item.header_number is not None else item.number
            unpacked = item.unpacked_size if item.unpacked_size is not None else len(item.payload)
            data += struct.pack(
                "<BHHHH",
                header_type.tag,
                header_number,
                len(item.payload),
                unpacked,
                item.compression,
            )
            data += item.payload
            locations.setdefault(item.resource_type, []).append((item.number, offset))
        for resource_type, number, offset in self._dangling:
            locations.setdefault(resource_type, []).append((number, offset))
        return build_map(locations), bytes(data)

    def write(
        self,
        directory: Path,
        map_name: str = "RESOURCE.MAP",
        data_name: str = "RESOURCE.000",
    ) -> tuple[Path, Path]:
        map_bytes, data_bytes = self.build()
        map_path = directory / map_name
        data_path = directory / data_name
        map_path.write_bytes(map_bytes)
        data_path.write_bytes(data_bytes)
        return map_path, data_path


MessageTuple = tuple[int, int, int, int, int, bytes]


def build_message(records: list[MessageTuple], version: int = 4000) -> bytes:
    """(名詞, 動詞, 条件, シーケンス, 話者, テキスト) の一覧からメッセージリソースを組み立てる"""
    if version // 1000 == 3:
        header = struct.pack("<IHH", version, 0, len(records))
        record_size = 10
    else:
        header = struct.pack("<IHHH", version, 0, 0, len(records))
        record_size = 11

    text_offset = len(header) + record_size * len(records)
    table = bytearray()
    texts = bytearray()
    for noun, verb, condition, sequence, talker, text in records:
        offset = text_offset + len(texts)
        table += struct.pack("<BBBBBH", noun, verb, condition, sequence, talker, offset)
        table += bytes(record_size - 7)
        texts += text + b"\x00"
    return header + bytes(table) + bytes(texts)


@pytest.fixture
def archive_writer() -> ArchiveWriter:
    """空のArchiveWriterを作成するフィクスチャ"""
    return ArchiveWriter()


@pytest.fixture
def message_builder() -> Callable[..., bytes]:
    """メッセージリソース組み立て関数を返すフィクスチャ"""
    return build_message


@pytest.fixture
def map_builder() -> Callable[..., bytes]:
    """マップファイル組み立て関数を返すフィクスチャ"""
    return build_map


@pytest.fixture
def dcl_sample() -> tuple[bytes, bytes]:
    """DCL圧縮データと展開結果の組を返すフィクスチャ"""
    return DCL_SAMPLE, DCL_SAMPLE_DECODED


SAMPLE_CONFIG_YAML = """\
encoding: latin-1
roles:
  NARRATOR: {name: Narrator, short_name: NAR}
  HERO: {name: Hero of the Realm, short_name: HERO}
talkers:
  99: NARRATOR
  1: HERO
verbs:
  1: Look
  2: Talk
rooms:
  100:
    name: Town square
    nouns: {1: Fountain, 2: Guard}
    conditions: {3: Fountain is dry, 5: null}
"""

SAMPLE_MESSAGES: dict[int, list[MessageTuple]] = {
    100: [
        (2, 2, 0, 2, 1, b"Nice weather."),
        (1, 1, 0, 1, 99, b"An old stone fountain."),
        (2, 2, 0, 1, 99, b"The guard nods."),
        (1, 1, 3, 1, 99, b"The fountain is dry."),
        (1, 1, 4, 1, 99, b"Something glitters."),
        (1, 0, 0, 1, 1, b"Hmm."),
    ],
    200: [
        (7, 0, 0, 1, 1, b"Hello there."),
    ],
}


@pytest.fixture
def sample_config_path(tmp_path: Path) -> Path:
    """サンプルのブック設定ファイルを作成するフィクスチャ"""
    path = tmp_path / "book.yml"
    path.write_text(SAMPLE_CONFIG_YAML, encoding="utf-8")
    return path


@pytest.fixture
def message_game_dir(tmp_path: Path) -> Path:
    """サンプルのメッセージアーカイブを持つゲームディレクトリを作成するフィクスチャ"""
    game_dir = tmp_path / "game"
    game_dir.mkdir()
    writer = ArchiveWriter()
    for room, records in SAMPLE_MESSAGES.items():
        writer.add(ResourceType.MESSAGE, room, build_message(records))
    writer.write(game_dir, "MESSAGE.MAP", "RESOURCE.MSG")
    return game_dir


@pytest.fixture
def main_game_dir(tmp_path: Path) -> Path:
    """スクリプト・ヒープ・ビューを持つメインアーカイブのゲームディレクトリを作成するフィクスチャ"""
    game_dir = tmp_path / "main"
    game_dir.mkdir()
    (
        ArchiveWriter()
        .add(ResourceType.SCRIPT, 42, b"\x01\x02\x03\x04script")
        .add(ResourceType.HEAP, 42, b"heap-data")
        .add(ResourceType.VIEW, 7, b"view")
        .add(ResourceType.SCRIPT, 43, DCL_SAMPLE, unpacked_size=13, compression=18)
        .write(game_dir)
    )
    return game_dir
