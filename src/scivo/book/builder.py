"""ブック構築モジュール

メッセージストアの全メッセージリソースと設定ファイルの説明データから
ブックのエントリ表を構築する。構築は全か無かで、途中まで構築された
ブックを返すことはない。
"""

from __future__ import annotations

import codecs
import logging
from collections.abc import Mapping

import chardet

from scivo.book.book import Book
from scivo.book.entries import (
    ConditionEntry,
    ConversationEntry,
    LineEntry,
    NounEntry,
    RoleEntry,
    RoomEntry,
    TalkerEntry,
    VerbEntry,
    frozen_mapping,
)
from scivo.book.ids import ConversationKey, RawNounId, RawSequenceId
from scivo.book.message import MessageRecord, MessageResource, parse_message_resource
from scivo.config import BookConfig, RoomConfig
from scivo.errors import BookBuildError, FormatError
from scivo.resource.store import ResourceStore
from scivo.resource.types import ResourceType

logger = logging.getLogger(__name__)

FALLBACK_ENCODING = "latin-1"

# chardetが返すエンコーディング名の正規化マッピング
_ENCODING_ALIASES: dict[str, str] = {
    "ascii": "latin-1",  # ASCIIはLatin-1のサブセット
    "utf-8-sig": "utf-8",
}


def detect_encoding(data: bytes) -> str:
    """テキストのバイト列から文字コードを推定する

    Args:
        data: 推定対象のバイト列

    Returns:
        推定された文字コード名（推定できない場合は FALLBACK_ENCODING）
    """
    if not data:
        return FALLBACK_ENCODING
    encoding = chardet.detect(data).get("encoding")
    if encoding is None:
        return FALLBACK_ENCODING
    lower = encoding.lower()
    return _ENCODING_ALIASES.get(lower, lower)


class BookBuilder:
    """メッセージリソースからブックを構築するクラス

    同じ入力バイト列と設定に対しては常に同じブックを構築する。
    """

    def __init__(self, config: BookConfig) -> None:
        """設定を指定して初期化する

        Args:
            config: ブックの説明データ
        """
        self._config = config

    def build(self, store: ResourceStore) -> Book:
        """メッセージストアからブックを構築する

        メッセージリソースの番号を部屋番号として扱う。

        Args:
            store: メッセージストア

        Returns:
            構築されたブック

        Raises:
            FormatError: メッセージリソースが不正な場合
            BookBuildError: 設定に存在しない話者・動詞が参照されている場合
            OSError: 読み込みに失敗した場合
        """
        messages: dict[int, MessageResource] = {}
        for resource_id in store.resource_ids(ResourceType.MESSAGE):
            contents = store.read_resource(ResourceType.MESSAGE, resource_id.number)
            try:
                messages[resource_id.number] = parse_message_resource(contents.data)
            except FormatError as e:
                raise FormatError(f"{resource_id}: {e}") from e
        return self.build_from_messages(messages)

    def build_from_messages(self, messages: Mapping[int, MessageResource]) -> Book:
        """解析済みメッセージリソースからブックを構築する

        Args:
            messages: 部屋番号から解析済みメッセージリソースへのマッピング

        Returns:
            構築されたブック

        Raises:
            BookBuildError: 構築に失敗した場合
        """
        encoding = self._resolve_encoding(messages)
        logger.debug(f"メッセージの文字コード: {encoding}")

        rooms: dict[int, RoomEntry] = {}
        for room_number in sorted(messages):
            room_config = self._config.rooms.get(room_number, RoomConfig())
            rooms[room_number] = self._build_room(
                room_number, messages[room_number], room_config, encoding
            )

        for room_number in sorted(set(self._config.rooms) - set(messages)):
            logger.warning(f"部屋 {room_number} は設定にありますがメッセージリソースがありません")

        return Book(
            roles={
                role_id: RoleEntry(name=role.name, short_name=role.short_name)
                for role_id, role in self._config.roles.items()
            },
            talkers={
                talker_id: TalkerEntry(role_id=role_id)
                for talker_id, role_id in self._config.talkers.items()
            },
            verbs={verb_id: VerbEntry(name=name) for verb_id, name in self._config.verbs.items()},
            rooms=rooms,
        )

    def _resolve_encoding(self, messages: Mapping[int, MessageResource]) -> str:
        encoding = self._config.encoding.source
        if encoding is None:
            sample = b"\n".join(
                record.text for message in messages.values() for record in message.records
            )
            encoding = detect_encoding(sample)
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise BookBuildError(f"未知の文字コードです: {encoding}") from e
        return encoding

    def _build_room(
        self,
        room_number: int,
        message: MessageResource,
        room_config: RoomConfig,
        encoding: str,
    ) -> RoomEntry:
        nouns: dict[RawNounId, dict[ConversationKey, dict[RawSequenceId, LineEntry]]] = {}

        for record in message.records:
            self._validate_record(room_number, record)
            key = ConversationKey(verb=record.verb, condition=record.condition)
            lines = nouns.setdefault(record.noun, {}).setdefault(key, {})
            if record.sequence in lines:
                raise BookBuildError(
                    f"部屋 {room_number}: メッセージが重複しています "
                    f"(名詞{record.noun} 動詞{record.verb} 条件{record.condition} "
                    f"シーケンス{record.sequence})"
                )
            lines[record.sequence] = LineEntry(
                text=self._decode_text(room_number, record, encoding),
                talker=record.talker,
            )

        for noun in sorted(set(room_config.nouns) - set(nouns)):
            logger.warning(f"部屋 {room_number}: 名詞 {noun} は設定にありますがメッセージがありません")

        noun_entries = {
            noun: NounEntry(
                desc=room_config.nouns.get(noun),
                conversations=frozen_mapping(
                    {
                        key: ConversationEntry(lines=frozen_mapping(lines))
                        for key, lines in conversations.items()
                    }
                ),
            )
            for noun, conversations in nouns.items()
        }
        condition_entries = {
            condition: ConditionEntry(desc=desc)
            for condition, desc in room_config.conditions.items()
        }

        return RoomEntry(
            name=room_config.name,
            conditions=frozen_mapping(condition_entries),
            nouns=frozen_mapping(noun_entries),
        )

    def _validate_record(self, room_number: int, record: MessageRecord) -> None:
        if record.talker not in self._config.talkers:
            raise BookBuildError(
                f"部屋 {room_number}: 話者 {record.talker} が設定に定義されていません "
                f"(名詞{record.noun} シーケンス{record.sequence})"
            )
        if record.verb != 0 and record.verb not in self._config.verbs:
            raise BookBuildError(
                f"部屋 {room_number}: 動詞 {record.verb} が設定に定義されていません "
                f"(名詞{record.noun})"
            )

    def _decode_text(self, room_number: int, record: MessageRecord, encoding: str) -> str:
        try:
            return record.text.decode(encoding)
        except UnicodeDecodeError as e:
            raise BookBuildError(
                f"部屋 {room_number}: テキストをデコードできません ({encoding}): {e}"
            ) from e
