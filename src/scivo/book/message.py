"""メッセージリソースの解析モジュール

部屋ごとのメッセージリソースを (名詞, 動詞, 条件, シーケンス) で
識別されるレコードの一覧に変換する。

メッセージリソースの構造（リトルエンディアン）:
    [u32 バージョン] 形式番号はバージョン // 1000
    形式4/5: ヘッダー10バイト、件数はオフセット8のu16、レコード11バイト
        [名詞][動詞][条件][シーケンス][話者][u16 テキストオフセット]
        [参照名詞][参照動詞][参照条件][参照シーケンス]
    形式3: ヘッダー8バイト、件数はオフセット6のu16、レコード10バイト（参照シーケンスなし）
    テキストはテキストオフセットから始まるNUL終端文字列。
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

from scivo.errors import FormatError


@dataclass(frozen=True)
class _Layout:
    header_size: int
    count_offset: int
    record_size: int
    has_ref_sequence: bool


_LAYOUTS: dict[int, _Layout] = {
    3: _Layout(header_size=8, count_offset=6, record_size=10, has_ref_sequence=False),
    4: _Layout(header_size=10, count_offset=8, record_size=11, has_ref_sequence=True),
    5: _Layout(header_size=10, count_offset=8, record_size=11, has_ref_sequence=True),
}


@dataclass(frozen=True)
class MessageRef:
    """別のメッセージへの参照"""

    noun: int
    verb: int
    condition: int
    sequence: int


@dataclass(frozen=True)
class MessageRecord:
    """メッセージリソース内の1レコード

    Attributes:
        noun: 生の名詞ID
        verb: 生の動詞ID（0は指定なし）
        condition: 生の条件ID（0は条件なし）
        sequence: 会話内のシーケンス番号
        talker: 生の話者ID
        text: デコード前のテキストバイト列
        ref: 参照先メッセージ（参照がない場合None）
    """

    noun: int
    verb: int
    condition: int
    sequence: int
    talker: int
    text: bytes
    ref: MessageRef | None = None


@dataclass(frozen=True)
class MessageResource:
    """解析済みメッセージリソース

    Attributes:
        version: ヘッダーのバージョン値
        records: レコードの一覧（格納順）
    """

    version: int
    records: tuple[MessageRecord, ...]

    @property
    def format(self) -> int:
        return self.version // 1000


def parse_message_resource(data: bytes) -> MessageResource:
    """メッセージリソースを解析する

    Args:
        data: 展開済みのメッセージリソース

    Returns:
        解析済みメッセージリソース

    Raises:
        FormatError: 未対応の形式、または構造が不正な場合
    """
    if len(data) < 4:
        raise FormatError("メッセージリソースが短すぎます")

    version = struct.unpack_from("<I", data, 0)[0]
    layout = _LAYOUTS.get(version // 1000)
    if layout is None:
        raise FormatError(f"未対応のメッセージ形式です: バージョン {version}")
    if len(data) < layout.header_size:
        raise FormatError("メッセージリソースのヘッダーが途中で切れています")

    count = struct.unpack_from("<H", data, layout.count_offset)[0]
    table_end = layout.header_size + count * layout.record_size
    if table_end > len(data):
        raise FormatError(f"メッセージ表が途中で切れています: {count}件")

    records = []
    for index in range(count):
        pos = layout.header_size + index * layout.record_size
        records.append(_parse_record(data, pos, layout))

    return MessageResource(version=version, records=tuple(records))


def _parse_record(data: bytes, pos: int, layout: _Layout) -> MessageRecord:
    noun, verb, condition, sequence, talker, text_offset = struct.unpack_from("<BBBBBH", data, pos)
    ref_noun, ref_verb, ref_condition = data[pos + 7 : pos + 10]
    ref_sequence = data[pos + 10] if layout.has_ref_sequence else 0

    if text_offset >= len(data):
        raise FormatError(
            f"テキストオフセットが範囲外です: 名詞{noun} 動詞{verb} 条件{condition} "
            f"シーケンス{sequence} (offset={text_offset})"
        )
    text_end = data.find(b"\x00", text_offset)
    if text_end < 0:
        raise FormatError(f"テキストがNUL終端されていません (offset={text_offset})")

    ref = None
    if ref_noun:
        ref = MessageRef(
            noun=ref_noun, verb=ref_verb, condition=ref_condition, sequence=ref_sequence
        )

    return MessageRecord(
        noun=noun,
        verb=verb,
        condition=condition,
        sequence=sequence,
        talker=talker,
        text=data[text_offset:text_end],
        ref=ref,
    )
