"""ブックの識別子定義

生ID（メッセージリソースから取り出したままの値）は int / str で表し、
公開IDはすべての祖先の生IDを含む複合値として定義する。
公開IDはフィールド順に全順序を持つ不変の値オブジェクトである。
"""

from __future__ import annotations

from dataclasses import dataclass

# 生ID。メッセージリソースの値そのもので、所属する文脈の外では意味を持たない
RawRoomId = int
RawNounId = int
RawVerbId = int
RawConditionId = int
RawSequenceId = int
RawTalkerId = int
RawRoleId = str

# 会話キーで「指定なし」を表す値
NO_VERB: RawVerbId = 0
NO_CONDITION: RawConditionId = 0


@dataclass(frozen=True, order=True)
class ConversationKey:
    """同じ名詞に属する会話を区別するキー

    verb=0 は動詞の指定なし、condition=0 は条件なしを表す。

    Attributes:
        verb: 生の動詞ID
        condition: 生の条件ID
    """

    verb: RawVerbId = NO_VERB
    condition: RawConditionId = NO_CONDITION

    @property
    def has_verb(self) -> bool:
        return self.verb != NO_VERB

    @property
    def has_condition(self) -> bool:
        return self.condition != NO_CONDITION


@dataclass(frozen=True, order=True)
class RoomId:
    room: RawRoomId

    def __str__(self) -> str:
        return f"R{self.room}"


@dataclass(frozen=True, order=True)
class NounId:
    room_id: RoomId
    noun: RawNounId

    def __str__(self) -> str:
        return f"{self.room_id}/N{self.noun}"


@dataclass(frozen=True, order=True)
class ConditionId:
    room_id: RoomId
    condition: RawConditionId

    def __str__(self) -> str:
        return f"{self.room_id}/C{self.condition}"


@dataclass(frozen=True, order=True)
class ConversationId:
    noun_id: NounId
    key: ConversationKey

    def __str__(self) -> str:
        return f"{self.noun_id}/V{self.key.verb}C{self.key.condition}"


@dataclass(frozen=True, order=True)
class LineId:
    conversation_id: ConversationId
    sequence: RawSequenceId

    def __str__(self) -> str:
        return f"{self.conversation_id}/S{self.sequence}"


@dataclass(frozen=True, order=True)
class VerbId:
    verb: RawVerbId


@dataclass(frozen=True, order=True)
class TalkerId:
    talker: RawTalkerId


@dataclass(frozen=True, order=True)
class RoleId:
    role: RawRoleId
