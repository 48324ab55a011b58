"""データファイル読み込みのテスト"""

import struct

import pytest

from conftest import (
    DCL_CODED_SAMPLE,
    DCL_CODED_SAMPLE_DECODED,
    DCL_SAMPLE,
    DCL_SAMPLE_DECODED,
    ArchiveWriter,
)
from scivo.errors import FormatError
from scivo.resource.block import BlockSource
from scivo.resource.datafile import (
    HEADER_SIZE,
    CompressionMethod,
    DataFile,
    ResourceHeader,
    decode_payload,
)
from scivo.resource.mapfile import Location, ResourceLocations
from scivo.resource.types import ResourceId, ResourceType


def _open(writer: ArchiveWriter) -> tuple[ResourceLocations, DataFile]:
    map_bytes, data_bytes = writer.build()
    return ResourceLocations.read_from(map_bytes), DataFile(BlockSource.from_bytes(data_bytes))


def _location(locations: ResourceLocations, resource_type: ResourceType, number: int) -> Location:
    location = locations.get_location(ResourceId(resource_type, number))
    assert location is not None
    return location


class TestResourceHeader:
    """ResourceHeader.parseのテスト"""

    def test_parse(self) -> None:
        data = struct.pack("<BHHHH", 0x91, 42, 10, 20, 18)
        header = ResourceHeader.parse(data)

        assert header.resource_type is ResourceType.HEAP
        assert header.number == 42
        assert header.packed_size == 10
        assert header.unpacked_size == 20
        assert header.compression == CompressionMethod.DCL_18
        assert header.resource_id == ResourceId(ResourceType.HEAP, 42)

    def test_parse_short(self) -> None:
        with pytest.raises(FormatError, match="ヘッダーの長さ"):
            ResourceHeader.parse(b"\x82\x01")

    def test_parse_tag_without_flag(self) -> None:
        """0x80が立っていない種別タグはFormatError"""
        data = struct.pack("<BHHHH", 0x02, 1, 4, 4, 0)
        with pytest.raises(FormatError, match="未知のリソース種別タグ"):
            ResourceHeader.parse(data)


class TestDataFileReadContents:
    """DataFile.read_contentsのテスト"""

    def test_read_stored(self, archive_writer: ArchiveWriter) -> None:
        """非圧縮リソースはペイロードがそのまま返る"""
        locations, data_file = _open(archive_writer.add(ResourceType.SCRIPT, 1, b"hello"))

        contents = data_file.read_contents(_location(locations, ResourceType.SCRIPT, 1))

        assert contents.resource_id == ResourceId(ResourceType.SCRIPT, 1)
        assert contents.data == b"hello"

    @pytest.mark.parametrize(
        "compression",
        [
            pytest.param(18, id="正常系: 圧縮方式18"),
            pytest.param(19, id="正常系: 圧縮方式19"),
            pytest.param(20, id="正常系: 圧縮方式20"),
        ],
    )
    def test_read_dcl(self, archive_writer: ArchiveWriter, compression: int) -> None:
        """DCL圧縮リソースは展開して返る"""
        archive_writer.add(
            ResourceType.SCRIPT,
            3,
            DCL_SAMPLE,
            unpacked_size=len(DCL_SAMPLE_DECODED),
            compression=compression,
        )
        locations, data_file = _open(archive_writer)

        contents = data_file.read_contents(_location(locations, ResourceType.SCRIPT, 3))

        assert contents.data == DCL_SAMPLE_DECODED

    def test_read_dcl_coded_literals(self, archive_writer: ArchiveWriter) -> None:
        archive_writer.add(
            ResourceType.HEAP,
            5,
            DCL_CODED_SAMPLE,
            unpacked_size=len(DCL_CODED_SAMPLE_DECODED),
            compression=20,
        )
        locations, data_file = _open(archive_writer)

        contents = data_file.read_contents(_location(locations, ResourceType.HEAP, 5))

        assert contents.data == DCL_CODED_SAMPLE_DECODED

    def test_read_raw_keeps_compressed_payload(self, archive_writer: ArchiveWriter) -> None:
        """生データ読み込みは展開せず、ヘッダーのバイト列も保持する"""
        archive_writer.add(
            ResourceType.SCRIPT, 3, DCL_SAMPLE, unpacked_size=13, compression=18
        )
        locations, data_file = _open(archive_writer)
        location = _location(locations, ResourceType.SCRIPT, 3)

        raw = data_file.read_raw_contents(location)

        assert raw.location == location
        assert len(raw.header_bytes) == HEADER_SIZE
        assert raw.header.packed_size == len(DCL_SAMPLE)
        assert raw.header.unpacked_size == 13
        assert raw.payload.read() == DCL_SAMPLE

    def test_read_raw_with_unknown_compression(self, archive_writer: ArchiveWriter) -> None:
        """未知の圧縮方式でも生データは読み込める"""
        locations, data_file = _open(
            archive_writer.add(ResourceType.VIEW, 1, b"data", compression=7)
        )
        location = _location(locations, ResourceType.VIEW, 1)

        raw = data_file.read_raw_contents(location)
        assert raw.payload.read() == b"data"

        with pytest.raises(FormatError, match="未知の圧縮方式"):
            data_file.read_contents(location)

    @pytest.mark.parametrize(
        "payload, unpacked_size, compression",
        [
            pytest.param(b"abcd", 5, 0, id="異常系: 非圧縮でサイズ不一致"),
            pytest.param(DCL_SAMPLE, 20, 18, id="異常系: 展開後サイズが宣言より小さい"),
        ],
    )
    def test_size_mismatch(
        self,
        archive_writer: ArchiveWriter,
        payload: bytes,
        unpacked_size: int,
        compression: int,
    ) -> None:
        locations, data_file = _open(
            archive_writer.add(
                ResourceType.SCRIPT,
                1,
                payload,
                unpacked_size=unpacked_size,
                compression=compression,
            )
        )
        with pytest.raises(FormatError, match="サイズが一致しません"):
            data_file.read_contents(_location(locations, ResourceType.SCRIPT, 1))

    def test_broken_dcl_stream(self, archive_writer: ArchiveWriter) -> None:
        locations, data_file = _open(
            archive_writer.add(
                ResourceType.SCRIPT, 1, bytes([0, 9, 0]), unpacked_size=4, compression=18
            )
        )
        with pytest.raises(FormatError, match="展開に失敗しました"):
            data_file.read_contents(_location(locations, ResourceType.SCRIPT, 1))

    def test_header_mismatch(self, archive_writer: ArchiveWriter) -> None:
        """ヘッダーのIDがマップと異なればFormatError"""
        locations, data_file = _open(
            archive_writer.add(ResourceType.SCRIPT, 1, b"data", header_number=2)
        )
        with pytest.raises(FormatError, match="マップと一致しません"):
            data_file.read_raw_contents(_location(locations, ResourceType.SCRIPT, 1))

    def test_payload_beyond_end(self) -> None:
        """宣言された格納サイズがファイル終端を越えればFormatError"""
        data = struct.pack("<BHHHH", 0x82, 1, 100, 100, 0) + b"short"
        data_file = DataFile(BlockSource.from_bytes(data))
        location = Location(ResourceId(ResourceType.SCRIPT, 1), 0)

        with pytest.raises(FormatError, match="終端を越えています"):
            data_file.read_raw_contents(location)

    def test_header_beyond_end(self) -> None:
        data_file = DataFile(BlockSource.from_bytes(b"\x82\x01"))
        location = Location(ResourceId(ResourceType.SCRIPT, 1), 0)

        with pytest.raises(FormatError, match="範囲外"):
            data_file.read_raw_contents(location)


class TestDecodePayload:
    """decode_payloadのテスト"""

    def test_idempotent(self) -> None:
        """同じ入力は常に同じ出力になる"""
        header = ResourceHeader(ResourceType.SCRIPT, 1, len(DCL_SAMPLE), 13, 18)
        assert decode_payload(header, DCL_SAMPLE) == decode_payload(header, DCL_SAMPLE)
        assert decode_payload(header, DCL_SAMPLE) == DCL_SAMPLE_DECODED
