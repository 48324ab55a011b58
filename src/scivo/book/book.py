"""ブック本体

ボイス収録用の台本（リソースのスクリプトと区別するため「ブック」と呼ぶ）を
読み込み専用のエンティティ表として保持する。
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from scivo.book.entries import RoleEntry, RoomEntry, TalkerEntry, VerbEntry, frozen_mapping
from scivo.book.handles import (
    Condition,
    Conversation,
    Line,
    Noun,
    Role,
    Room,
    Talker,
    Verb,
)
from scivo.book.ids import (
    ConditionId,
    ConversationId,
    LineId,
    NounId,
    RawRoleId,
    RawRoomId,
    RawTalkerId,
    RawVerbId,
    RoleId,
    RoomId,
    TalkerId,
    VerbId,
)


class Book:
    """構築済みの読み込み専用ブック

    エントリ表は構築時に一度だけ与えられ、以後変更されない。
    エンティティにはハンドル経由でのみアクセスする。

    使用例:
        >>> book = BookBuilder(config).build(message_store)
        >>> for room in book.rooms():
        ...     for noun in room.nouns():
        ...         print(noun.id(), noun.desc)
    """

    def __init__(
        self,
        roles: Mapping[RawRoleId, RoleEntry],
        talkers: Mapping[RawTalkerId, TalkerEntry],
        verbs: Mapping[RawVerbId, VerbEntry],
        rooms: Mapping[RawRoomId, RoomEntry],
    ) -> None:
        self._roles = frozen_mapping(roles)
        self._talkers = frozen_mapping(talkers)
        self._verbs = frozen_mapping(verbs)
        self._rooms = frozen_mapping(rooms)

    def rooms(self) -> Iterator[Room]:
        for raw_id, entry in self._rooms.items():
            yield Room(parent=self, raw_id=raw_id, entry=entry)

    def roles(self) -> Iterator[Role]:
        for raw_id, entry in self._roles.items():
            yield Role(parent=self, raw_id=raw_id, entry=entry)

    def verbs(self) -> Iterator[Verb]:
        for raw_id, entry in self._verbs.items():
            yield Verb(parent=self, raw_id=raw_id, entry=entry)

    def talkers(self) -> Iterator[Talker]:
        for raw_id, entry in self._talkers.items():
            yield Talker(parent=self, raw_id=raw_id, entry=entry)

    def nouns(self) -> Iterator[Noun]:
        """全部屋の名詞を (部屋, 名詞) の昇順で返す"""
        for room in self.rooms():
            yield from room.nouns()

    def conversations(self) -> Iterator[Conversation]:
        for noun in self.nouns():
            yield from noun.conversations()

    def lines(self) -> Iterator[Line]:
        for conversation in self.conversations():
            yield from conversation.lines()

    def conditions(self) -> Iterator[Condition]:
        for room in self.rooms():
            yield from room.conditions()

    def get_room(self, id: RoomId) -> Room | None:
        entry = self._rooms.get(id.room)
        if entry is None:
            return None
        return Room(parent=self, raw_id=id.room, entry=entry)

    def get_role(self, id: RoleId) -> Role | None:
        entry = self._roles.get(id.role)
        if entry is None:
            return None
        return Role(parent=self, raw_id=id.role, entry=entry)

    def get_verb(self, id: VerbId) -> Verb | None:
        entry = self._verbs.get(id.verb)
        if entry is None:
            return None
        return Verb(parent=self, raw_id=id.verb, entry=entry)

    def get_talker(self, id: TalkerId) -> Talker | None:
        entry = self._talkers.get(id.talker)
        if entry is None:
            return None
        return Talker(parent=self, raw_id=id.talker, entry=entry)

    def get_condition(self, id: ConditionId) -> Condition | None:
        room = self.get_room(id.room_id)
        return room.get_condition(id.condition) if room is not None else None

    def get_noun(self, id: NounId) -> Noun | None:
        room = self.get_room(id.room_id)
        return room.get_noun(id.noun) if room is not None else None

    def get_conversation(self, id: ConversationId) -> Conversation | None:
        noun = self.get_noun(id.noun_id)
        return noun.get_conversation(id.key) if noun is not None else None

    def get_line(self, id: LineId) -> Line | None:
        conversation = self.get_conversation(id.conversation_id)
        return conversation.get_line(id.sequence) if conversation is not None else None
