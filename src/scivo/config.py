"""Configuration module for scivo.

ブック構築に使用する説明データ（部屋名・名詞・条件・動詞・話者・役割）を
YAML設定ファイルから読み込む。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


@dataclass(frozen=True)
class EncodingConfig:
    """文字コード設定"""

    source: str | None = None


@dataclass(frozen=True)
class RoleConfig:
    """役割設定"""

    name: str
    short_name: str


@dataclass(frozen=True)
class RoomConfig:
    """部屋ごとの説明設定"""

    name: str | None = None
    nouns: dict[int, str] = field(default_factory=dict)
    conditions: dict[int, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class BookConfig:
    """ルート設定"""

    encoding: EncodingConfig = field(default_factory=EncodingConfig)
    roles: dict[str, RoleConfig] = field(default_factory=dict)
    talkers: dict[int, str] = field(default_factory=dict)
    verbs: dict[int, str] = field(default_factory=dict)
    rooms: dict[int, RoomConfig] = field(default_factory=dict)


def load_config(path: Path) -> BookConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        BookConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    return parse_config(data)


def parse_config(data: Any) -> BookConfig:
    """読み込み済みのYAMLデータを設定に変換する

    Raises:
        ConfigError: 構造が不正な場合
    """
    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()
    roles = _parse_roles(data.get("roles", {}))
    talkers = _parse_talkers(data.get("talkers", {}), roles)

    return BookConfig(
        encoding=_parse_encoding(data.get("encoding"), default.encoding),
        roles=roles,
        talkers=talkers,
        verbs=_parse_id_mapping(data.get("verbs", {}), "verbs"),
        rooms=_parse_rooms(data.get("rooms", {})),
    )


def get_default_config() -> BookConfig:
    """デフォルト設定を取得する"""
    return BookConfig()


def _parse_id(value: Any, section: str) -> int:
    """数値IDを解釈する"""
    if isinstance(value, bool):
        raise ConfigError(f"{section}: IDは整数である必要があります: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ConfigError(f"{section}: IDは整数である必要があります: {value!r}")


def _require_mapping(data: Any, section: str) -> dict[Any, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{section}はマッピング形式である必要があります")
    return data


def _parse_encoding(data: Any, default: EncodingConfig) -> EncodingConfig:
    """エンコーディング設定をマージする

    文字列のみの指定 (``encoding: cp437``) も受け付ける。
    """
    if data is None:
        return default
    if isinstance(data, str):
        return EncodingConfig(source=data)
    if isinstance(data, dict):
        return EncodingConfig(source=data.get("source", default.source))
    raise ConfigError("encodingは文字列またはマッピング形式である必要があります")


def _parse_id_mapping(data: Any, section: str) -> dict[int, str]:
    return {
        _parse_id(key, section): str(value)
        for key, value in _require_mapping(data, section).items()
    }


def _parse_roles(data: Any) -> dict[str, RoleConfig]:
    roles: dict[str, RoleConfig] = {}
    for role_id, item in _require_mapping(data, "roles").items():
        if isinstance(item, str):
            roles[str(role_id)] = RoleConfig(name=item, short_name=item)
            continue
        if not isinstance(item, dict) or "name" not in item:
            raise ConfigError(f"roles: {role_id} には name が必要です")
        name = str(item["name"])
        roles[str(role_id)] = RoleConfig(name=name, short_name=str(item.get("short_name", name)))
    return roles


def _parse_talkers(data: Any, roles: dict[str, RoleConfig]) -> dict[int, str]:
    talkers = _parse_id_mapping(data, "talkers")
    for talker_id, role_id in talkers.items():
        if role_id not in roles:
            raise ConfigError(f"talkers: 話者 {talker_id} の役割 {role_id} が roles に定義されていません")
    return talkers


def _parse_rooms(data: Any) -> dict[int, RoomConfig]:
    rooms: dict[int, RoomConfig] = {}
    for room_id, item in _require_mapping(data, "rooms").items():
        section = f"rooms.{room_id}"
        item = _require_mapping(item, section)
        name = item.get("name")
        conditions_section = f"{section}.conditions"
        conditions = {
            _parse_id(key, conditions_section): (None if value is None else str(value))
            for key, value in _require_mapping(item.get("conditions"), conditions_section).items()
        }
        rooms[_parse_id(room_id, "rooms")] = RoomConfig(
            name=None if name is None else str(name),
            nouns=_parse_id_mapping(item.get("nouns"), f"{section}.nouns"),
            conditions=conditions,
        )
    return rooms
