"""リソース種別とリソースIDの定義

マップファイル・データファイル・パッチファイルで共通に使用する
リソース種別タグと (種別, 番号) の組を定義する。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from scivo.errors import FormatError

# 種別タグの上位ビット。マップ/データ/パッチの各ファイルでタグはこのビットを立てて格納される
TYPE_TAG_FLAG = 0x80


class ResourceType(IntEnum):
    """リソース種別

    値は種別インデックス。ファイル上のタグは ``0x80 | index`` で表される。
    """

    VIEW = 0
    PIC = 1
    SCRIPT = 2
    TEXT = 3
    SOUND = 4
    MEMORY = 5
    VOCAB = 6
    FONT = 7
    CURSOR = 8
    PATCH = 9
    BITMAP = 10
    PALETTE = 11
    CD_AUDIO = 12
    AUDIO = 13
    SYNC = 14
    MESSAGE = 15
    MAP = 16
    HEAP = 17
    AUDIO36 = 18
    SYNC36 = 19
    TRANSLATION = 20

    @property
    def tag(self) -> int:
        """ファイル上に格納される種別タグを返す"""
        return TYPE_TAG_FLAG | self.value

    @classmethod
    def from_tag(cls, tag: int) -> ResourceType:
        """種別タグからリソース種別を取得する

        Args:
            tag: ファイル上の種別タグ

        Returns:
            対応するリソース種別

        Raises:
            FormatError: 未知の種別タグの場合
        """
        if not tag & TYPE_TAG_FLAG:
            raise FormatError(f"未知のリソース種別タグです: 0x{tag:02X}")
        try:
            return cls(tag & ~TYPE_TAG_FLAG)
        except ValueError:
            raise FormatError(f"未知のリソース種別タグです: 0x{tag:02X}") from None

    @classmethod
    def parse(cls, value: str) -> ResourceType:
        """コマンドライン表記からリソース種別を取得する

        名前（大文字小文字を区別しない）または数値インデックスを受け付ける。

        Args:
            value: "script", "HEAP", "2" などの文字列

        Returns:
            対応するリソース種別

        Raises:
            ValueError: 解釈できない文字列の場合
        """
        normalized = value.strip().upper().replace("-", "_")
        if normalized in cls.__members__:
            return cls[normalized]
        if normalized.isdigit():
            return cls(int(normalized))
        raise ValueError(f"不明なリソース種別です: {value}")


@dataclass(frozen=True, order=True)
class ResourceId:
    """リソースID（種別と番号の組）

    Attributes:
        resource_type: リソース種別
        number: リソース番号（16ビット）
    """

    resource_type: ResourceType
    number: int

    def __str__(self) -> str:
        return f"{self.resource_type.name}:{self.number}"
