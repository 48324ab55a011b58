"""ブックに格納されるエントリ定義

エントリはブックが所有するデータ本体で、木構造を成す。
外部からは handles モジュールのハンドル経由でのみ参照される。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TypeVar

from scivo.book.ids import (
    ConversationKey,
    RawConditionId,
    RawNounId,
    RawRoleId,
    RawSequenceId,
    RawTalkerId,
)

K = TypeVar("K")
V = TypeVar("V")


def frozen_mapping(items: Mapping[K, V]) -> Mapping[K, V]:
    """キー昇順に並べた読み込み専用マッピングを作成する"""
    return MappingProxyType({key: items[key] for key in sorted(items)})  # type: ignore[type-var]


def _empty() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class RoleEntry:
    name: str
    short_name: str


@dataclass(frozen=True)
class TalkerEntry:
    role_id: RawRoleId


@dataclass(frozen=True)
class VerbEntry:
    name: str


@dataclass(frozen=True)
class ConditionEntry:
    """条件エントリ

    Attributes:
        desc: 設定ファイルで説明が与えられた場合のみ値を持つ
    """

    desc: str | None = None


@dataclass(frozen=True)
class LineEntry:
    text: str
    talker: RawTalkerId


@dataclass(frozen=True)
class ConversationEntry:
    lines: Mapping[RawSequenceId, LineEntry] = field(default_factory=_empty)


@dataclass(frozen=True)
class NounEntry:
    desc: str | None = None
    conversations: Mapping[ConversationKey, ConversationEntry] = field(default_factory=_empty)


@dataclass(frozen=True)
class RoomEntry:
    name: str | None = None
    conditions: Mapping[RawConditionId, ConditionEntry] = field(default_factory=_empty)
    nouns: Mapping[RawNounId, NounEntry] = field(default_factory=_empty)
