"""Book module for scivo.

メッセージリソースから構築するボイス収録用の台本（ブック）を扱うモジュール。
部屋・名詞・会話・セリフ・話者・役割を相互参照可能な形で提供する。
"""

from scivo.book.book import Book
from scivo.book.builder import BookBuilder
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
    ConversationKey,
    LineId,
    NounId,
    RoleId,
    RoomId,
    TalkerId,
    VerbId,
)
from scivo.book.message import MessageRecord, MessageResource, parse_message_resource

__all__ = [
    "Book",
    "BookBuilder",
    "Condition",
    "ConditionId",
    "Conversation",
    "ConversationId",
    "ConversationKey",
    "Line",
    "LineId",
    "MessageRecord",
    "MessageResource",
    "Noun",
    "NounId",
    "Role",
    "RoleId",
    "Room",
    "RoomId",
    "Talker",
    "TalkerId",
    "Verb",
    "VerbId",
    "parse_message_resource",
]
