"""パッチファイル出力モジュール

アーカイブ内の単一リソースを、実行時にアーカイブを上書きする
パッチファイルとして書き出す。

パッチファイルの構造:
    [u8 種別タグ][u8 ヘッダーサイズ (常に0)][データファイルに格納されたままのペイロード]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from scivo.errors import UnsupportedResourceError
from scivo.resource.store import ResourceStore
from scivo.resource.types import ResourceId, ResourceType

logger = logging.getLogger(__name__)

PATCH_EXTENSIONS: dict[ResourceType, str] = {
    ResourceType.SCRIPT: "SCR",
    ResourceType.HEAP: "HEP",
}


@dataclass(frozen=True)
class PatchResult:
    """パッチ出力結果

    Attributes:
        resource_id: 出力したリソースID
        path: パッチファイルのパス
        size: パッチファイルのサイズ（バイト）
        dry_run: ドライランだったかどうか（Trueの場合ファイルは作成されていない）
    """

    resource_id: ResourceId
    path: Path
    size: int
    dry_run: bool = False


def patch_filename(resource_type: ResourceType, number: int) -> str:
    """パッチファイル名を返す

    Args:
        resource_type: リソース種別
        number: リソース番号

    Returns:
        "{番号}.{拡張子}" 形式のファイル名

    Raises:
        UnsupportedResourceError: パッチ出力に対応していない種別の場合
    """
    extension = PATCH_EXTENSIONS.get(resource_type)
    if extension is None:
        raise UnsupportedResourceError(
            f"パッチ出力に対応していないリソース種別です: {resource_type.name}"
        )
    return f"{number}.{extension}"


def build_patch(resource_type: ResourceType, payload: bytes) -> bytes:
    """パッチファイルのバイト列を組み立てる"""
    return bytes([resource_type.tag, 0]) + payload


def extract_as_patch(
    store: ResourceStore,
    resource_type: ResourceType,
    number: int,
    output_dir: Path,
    dry_run: bool = False,
) -> PatchResult:
    """リソースをパッチファイルとして書き出す

    ペイロードは展開せず、データファイルに格納されたままのバイト列を使用する。
    既存のファイルは上書きしない。

    Args:
        store: 読み込み元のリソースストア
        resource_type: リソース種別
        number: リソース番号
        output_dir: 出力先ディレクトリ
        dry_run: Trueの場合はファイルを作成しない

    Returns:
        パッチ出力結果

    Raises:
        UnsupportedResourceError: パッチ出力に対応していない種別の場合（I/O前に判定）
        ResourceNotFoundError: リソースがインデックスに存在しない場合
        FileExistsError: 同名のファイルが既に存在する場合
    """
    filename = patch_filename(resource_type, number)
    path = output_dir / filename
    resource_id = ResourceId(resource_type, number)

    if path.exists():
        raise FileExistsError(f"パッチファイルが既に存在します: {path}")

    raw = store.read_raw_resource(resource_type, number)
    patch = build_patch(resource_type, raw.payload.read())

    if dry_run:
        logger.info(f"DRY_RUN: {resource_id} を {path} に書き出します")
        return PatchResult(resource_id=resource_id, path=path, size=len(patch), dry_run=True)

    logger.info(f"{resource_id} を {path} に書き出します")
    # "x" モードで開き、既存ファイルを切り詰めない
    with open(path, "xb") as f:
        f.write(patch)

    return PatchResult(resource_id=resource_id, path=path, size=len(patch))
