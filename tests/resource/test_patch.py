"""パッチファイル出力のテスト"""

from pathlib import Path

import pytest

from conftest import DCL_SAMPLE
from scivo.errors import ResourceNotFoundError, UnsupportedResourceError
from scivo.resource.patch import build_patch, extract_as_patch, patch_filename
from scivo.resource.store import open_main_store
from scivo.resource.types import ResourceId, ResourceType


class TestPatchFilename:
    """patch_filenameのテスト"""

    @pytest.mark.parametrize(
        "resource_type, number, expected",
        [
            pytest.param(ResourceType.SCRIPT, 42, "42.SCR", id="正常系: スクリプト"),
            pytest.param(ResourceType.HEAP, 0, "0.HEP", id="正常系: ヒープ"),
        ],
    )
    def test_filename(self, resource_type: ResourceType, number: int, expected: str) -> None:
        assert patch_filename(resource_type, number) == expected

    @pytest.mark.parametrize(
        "resource_type",
        [
            pytest.param(ResourceType.VIEW, id="異常系: ビュー"),
            pytest.param(ResourceType.MESSAGE, id="異常系: メッセージ"),
        ],
    )
    def test_unsupported(self, resource_type: ResourceType) -> None:
        with pytest.raises(UnsupportedResourceError):
            patch_filename(resource_type, 1)


def test_build_patch() -> None:
    """パッチは [種別タグ][0][ペイロード] で構成される"""
    assert build_patch(ResourceType.HEAP, b"abc") == b"\x91\x00abc"


class TestExtractAsPatch:
    """extract_as_patchのテスト"""

    def test_extract_script(self, main_game_dir: Path, tmp_path: Path) -> None:
        store = open_main_store(main_game_dir)
        output_dir = tmp_path / "out"
        output_dir.mkdir()

        result = extract_as_patch(store, ResourceType.SCRIPT, 42, output_dir)

        path = output_dir / "42.SCR"
        assert result.path == path
        assert result.resource_id == ResourceId(ResourceType.SCRIPT, 42)
        assert result.dry_run is False
        assert path.read_bytes() == b"\x82\x00" + b"\x01\x02\x03\x04script"
        assert result.size == path.stat().st_size

    def test_extract_heap(self, main_game_dir: Path) -> None:
        store = open_main_store(main_game_dir)

        extract_as_patch(store, ResourceType.HEAP, 42, main_game_dir)

        assert (main_game_dir / "42.HEP").read_bytes() == b"\x91\x00heap-data"

    def test_compressed_payload_is_kept(self, main_game_dir: Path) -> None:
        """圧縮されたリソースは展開せずに格納されたバイト列をそのまま書き出す"""
        store = open_main_store(main_game_dir)

        extract_as_patch(store, ResourceType.SCRIPT, 43, main_game_dir)

        assert (main_game_dir / "43.SCR").read_bytes() == b"\x82\x00" + DCL_SAMPLE

    def test_unsupported_type_writes_nothing(self, main_game_dir: Path) -> None:
        """未対応の種別はファイルを作成する前に失敗する"""
        store = open_main_store(main_game_dir)
        before = sorted(p.name for p in main_game_dir.iterdir())

        with pytest.raises(UnsupportedResourceError):
            extract_as_patch(store, ResourceType.VIEW, 7, main_game_dir)

        assert sorted(p.name for p in main_game_dir.iterdir()) == before

    def test_not_found(self, main_game_dir: Path) -> None:
        store = open_main_store(main_game_dir)

        with pytest.raises(ResourceNotFoundError):
            extract_as_patch(store, ResourceType.SCRIPT, 999, main_game_dir)

        assert not (main_game_dir / "999.SCR").exists()

    def test_existing_file_is_not_overwritten(self, main_game_dir: Path) -> None:
        """既存ファイルがある場合は失敗し、内容は変更されない"""
        store = open_main_store(main_game_dir)
        existing = main_game_dir / "42.SCR"
        existing.write_bytes(b"original")

        with pytest.raises(FileExistsError):
            extract_as_patch(store, ResourceType.SCRIPT, 42, main_game_dir)

        assert existing.read_bytes() == b"original"

    def test_dry_run(self, main_game_dir: Path) -> None:
        """ドライランではファイルを作成しない"""
        store = open_main_store(main_game_dir)

        result = extract_as_patch(store, ResourceType.SCRIPT, 42, main_game_dir, dry_run=True)

        assert result.dry_run is True
        assert result.size == 2 + len(b"\x01\x02\x03\x04script")
        assert not (main_game_dir / "42.SCR").exists()
