"""ブックのナビゲーションハンドル

ハンドルはブックが所有するエントリへの読み込み専用ビューで、
ブックへの参照と直近の親ハンドルを保持する。
所有権を持たないため、自由に複製・破棄できる。

子の列挙メソッドは呼び出すたびに新しいイテレータを返し、
常に生IDの昇順で要素を返す。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from scivo.book.entries import (
    ConditionEntry,
    ConversationEntry,
    LineEntry,
    NounEntry,
    RoleEntry,
    RoomEntry,
    TalkerEntry,
    VerbEntry,
)
from scivo.book.ids import (
    ConditionId,
    ConversationId,
    ConversationKey,
    LineId,
    NounId,
    RawConditionId,
    RawNounId,
    RawRoleId,
    RawRoomId,
    RawSequenceId,
    RawTalkerId,
    RawVerbId,
    RoleId,
    RoomId,
    TalkerId,
    VerbId,
)
from scivo.errors import BookConsistencyError

if TYPE_CHECKING:
    from scivo.book.book import Book

# 名前が設定されていない部屋の表示名
NO_NAME = "*NO NAME*"


class _Handle:
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id()})"  # type: ignore[attr-defined]


@dataclass(frozen=True, repr=False)
class Role(_Handle):
    """話者が演じる役割"""

    parent: Book
    raw_id: RawRoleId
    entry: RoleEntry = field(compare=False)

    def id(self) -> RoleId:
        return RoleId(self.raw_id)

    @property
    def name(self) -> str:
        """役割の正式名"""
        return self.entry.name

    @property
    def short_name(self) -> str:
        """役割の短縮名"""
        return self.entry.short_name

    def book(self) -> Book:
        return self.parent


@dataclass(frozen=True, repr=False)
class Talker(_Handle):
    """メッセージの話者"""

    parent: Book
    raw_id: RawTalkerId
    entry: TalkerEntry = field(compare=False)

    def id(self) -> TalkerId:
        return TalkerId(self.raw_id)

    def role(self) -> Role:
        """話者が演じる役割を返す

        Raises:
            BookConsistencyError: 役割がブックに存在しない場合
        """
        role = self.parent.get_role(RoleId(self.entry.role_id))
        if role is None:
            raise BookConsistencyError(
                f"話者 {self.raw_id} の役割 {self.entry.role_id} がブックに存在しません"
            )
        return role

    def book(self) -> Book:
        return self.parent


@dataclass(frozen=True, repr=False)
class Verb(_Handle):
    parent: Book
    raw_id: RawVerbId
    entry: VerbEntry = field(compare=False)

    def id(self) -> VerbId:
        return VerbId(self.raw_id)

    @property
    def name(self) -> str:
        return self.entry.name

    def book(self) -> Book:
        return self.parent


@dataclass(frozen=True, repr=False)
class Room(_Handle):
    """部屋（メッセージリソース1件に対応する）"""

    parent: Book
    raw_id: RawRoomId
    entry: RoomEntry = field(compare=False)

    def id(self) -> RoomId:
        return RoomId(self.raw_id)

    @property
    def name(self) -> str:
        """部屋の表示名（未設定の場合は NO_NAME）"""
        return self.entry.name if self.entry.name is not None else NO_NAME

    @property
    def has_name(self) -> bool:
        return self.entry.name is not None

    def nouns(self) -> Iterator[Noun]:
        """部屋に属する名詞を返す"""
        for raw_id, entry in self.entry.nouns.items():
            yield Noun(parent=self, raw_id=raw_id, entry=entry)

    def conditions(self) -> Iterator[Condition]:
        """部屋に属する条件を返す"""
        for raw_id, entry in self.entry.conditions.items():
            yield Condition(parent=self, raw_id=raw_id, entry=entry)

    def get_noun(self, raw_id: RawNounId) -> Noun | None:
        entry = self.entry.nouns.get(raw_id)
        if entry is None:
            return None
        return Noun(parent=self, raw_id=raw_id, entry=entry)

    def get_condition(self, raw_id: RawConditionId) -> Condition | None:
        entry = self.entry.conditions.get(raw_id)
        if entry is None:
            return None
        return Condition(parent=self, raw_id=raw_id, entry=entry)

    def book(self) -> Book:
        return self.parent


@dataclass(frozen=True, repr=False)
class Condition(_Handle):
    """部屋ごとの会話条件"""

    parent: Room
    raw_id: RawConditionId
    entry: ConditionEntry = field(compare=False)

    def id(self) -> ConditionId:
        return ConditionId(self.parent.id(), self.raw_id)

    @property
    def desc(self) -> str | None:
        """条件の説明（設定されている場合のみ）"""
        return self.entry.desc

    def room(self) -> Room:
        return self.parent

    def book(self) -> Book:
        return self.parent.book()


@dataclass(frozen=True, repr=False)
class Noun(_Handle):
    """会話の対象となるゲーム内の物・人物"""

    parent: Room
    raw_id: RawNounId
    entry: NounEntry = field(compare=False)

    def id(self) -> NounId:
        return NounId(self.parent.id(), self.raw_id)

    @property
    def desc(self) -> str | None:
        return self.entry.desc

    def room(self) -> Room:
        return self.parent

    def conversations(self) -> Iterator[Conversation]:
        """名詞に属する会話を会話キーの昇順で返す"""
        for raw_id, entry in self.entry.conversations.items():
            yield Conversation(parent=self, raw_id=raw_id, entry=entry)

    def get_conversation(self, key: ConversationKey) -> Conversation | None:
        entry = self.entry.conversations.get(key)
        if entry is None:
            return None
        return Conversation(parent=self, raw_id=key, entry=entry)

    def book(self) -> Book:
        return self.parent.book()


@dataclass(frozen=True, repr=False)
class Conversation(_Handle):
    """名詞と会話キーで識別される一連のセリフ"""

    parent: Noun
    raw_id: ConversationKey
    entry: ConversationEntry = field(compare=False)

    def id(self) -> ConversationId:
        return ConversationId(self.parent.id(), self.raw_id)

    @property
    def key(self) -> ConversationKey:
        return self.raw_id

    def noun(self) -> Noun:
        """この会話が属する名詞を返す"""
        return self.parent

    def lines(self) -> Iterator[Line]:
        """会話のセリフをシーケンス番号の昇順で返す"""
        for raw_id, entry in self.entry.lines.items():
            yield Line(parent=self, raw_id=raw_id, entry=entry)

    def get_line(self, raw_id: RawSequenceId) -> Line | None:
        entry = self.entry.lines.get(raw_id)
        if entry is None:
            return None
        return Line(parent=self, raw_id=raw_id, entry=entry)

    def verb(self) -> Verb | None:
        """この会話に使われる動詞を返す（動詞の指定がない場合None）

        Raises:
            BookConsistencyError: 動詞がブックに存在しない場合
        """
        if not self.raw_id.has_verb:
            return None
        verb = self.book().get_verb(VerbId(self.raw_id.verb))
        if verb is None:
            raise BookConsistencyError(f"{self.id()}: 動詞 {self.raw_id.verb} がブックに存在しません")
        return verb

    def condition(self) -> Condition | None:
        """この会話に必要な条件を返す

        条件がない場合、または条件が部屋の条件表に含まれない場合
        （解除済みとして扱う）はNoneを返す。
        """
        if not self.raw_id.has_condition:
            return None
        return self.parent.room().get_condition(self.raw_id.condition)

    def book(self) -> Book:
        return self.parent.book()


@dataclass(frozen=True, repr=False)
class Line(_Handle):
    """会話中の1セリフ"""

    parent: Conversation
    raw_id: RawSequenceId
    entry: LineEntry = field(compare=False)

    def id(self) -> LineId:
        return LineId(self.parent.id(), self.raw_id)

    @property
    def text(self) -> str:
        return self.entry.text

    def talker(self) -> Talker:
        """セリフの話者を返す

        Raises:
            BookConsistencyError: 話者がブックに存在しない場合
        """
        talker = self.book().get_talker(TalkerId(self.entry.talker))
        if talker is None:
            raise BookConsistencyError(f"{self.id()}: 話者 {self.entry.talker} がブックに存在しません")
        return talker

    def role(self) -> Role:
        """セリフの話者が演じる役割を返す"""
        return self.talker().role()

    def conversation(self) -> Conversation:
        return self.parent

    def book(self) -> Book:
        return self.parent.book()
