"""シーク可能なバイトソース

データファイル全体をメモリに読み込まずに、任意のオフセットから
バイト列を取り出すための抽象を提供する。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from scivo.errors import FormatError


class ByteReader(Protocol):
    """オフセット指定読み込みのインターフェース"""

    def read_at(self, offset: int, size: int) -> bytes:
        """指定オフセットからバイト列を読み込む"""
        ...

    @property
    def size(self) -> int:
        """ソース全体のサイズ（バイト）"""
        ...


class _FileReader:
    """ファイルを読み込みごとに開くリーダー

    読み込みは互いに独立しており、順序に依存しない。
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._size = path.stat().st_size

    @property
    def size(self) -> int:
        return self._size

    def read_at(self, offset: int, size: int) -> bytes:
        with open(self._path, "rb") as f:
            f.seek(offset)
            return f.read(size)


class _MemoryReader:
    """メモリ上のバイト列に対するリーダー"""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    @property
    def size(self) -> int:
        return len(self._data)

    def read_at(self, offset: int, size: int) -> bytes:
        return self._data[offset : offset + size]


class BlockSource:
    """シーク可能なバイトソース

    パスから開く場合はファイルを保持せず、読み込みのたびに開き直す。
    """

    def __init__(self, reader: ByteReader, name: str) -> None:
        """リーダーを指定して初期化する

        Args:
            reader: オフセット指定読み込みを行うリーダー
            name: エラーメッセージに使用するソース名
        """
        self._reader = reader
        self._name = name

    @classmethod
    def from_path(cls, path: Path) -> BlockSource:
        """ファイルパスからバイトソースを作成する

        Args:
            path: 対象ファイルのパス

        Returns:
            作成されたバイトソース

        Raises:
            FileNotFoundError: ファイルが存在しない場合
            OSError: ファイル情報の取得に失敗した場合
        """
        if not path.exists():
            raise FileNotFoundError(f"ファイルが見つかりません: {path}")
        return cls(_FileReader(path), str(path))

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<memory>") -> BlockSource:
        """メモリ上のバイト列からバイトソースを作成する"""
        return cls(_MemoryReader(data), name)

    @property
    def name(self) -> str:
        """ソース名"""
        return self._name

    @property
    def size(self) -> int:
        """ソース全体のサイズ（バイト）"""
        return self._reader.size

    def read_at(self, offset: int, size: int) -> bytes:
        """指定オフセットから正確にsizeバイトを読み込む

        Args:
            offset: 読み込み開始オフセット
            size: 読み込むバイト数

        Returns:
            読み込んだバイト列

        Raises:
            FormatError: ソースの終端を越える読み込みの場合
            OSError: 読み込みに失敗した場合
        """
        if offset < 0 or size < 0 or offset + size > self.size:
            raise FormatError(
                f"{self._name}: 範囲外の読み込みです "
                f"(offset={offset}, size={size}, total={self.size})"
            )
        data = self._reader.read_at(offset, size)
        if len(data) != size:
            raise FormatError(f"{self._name}: 読み込みが途中で終了しました (offset={offset})")
        return data

    def read_all(self) -> bytes:
        """ソース全体を読み込む"""
        return self.read_at(0, self.size)

    def block(self, offset: int, size: int) -> Block:
        """ソースの一部を指す遅延ブロックを作成する

        Args:
            offset: ブロックの開始オフセット
            size: ブロックのサイズ

        Returns:
            読み込みを遅延したブロック
        """
        return Block(source=self, offset=offset, size=size)


@dataclass(frozen=True)
class Block:
    """バイトソースの一部を指す遅延ブロック

    ``read()`` を呼ぶまでデータは読み込まれない。

    Attributes:
        source: 読み込み元のバイトソース
        offset: ソース内の開始オフセット
        size: ブロックのサイズ（バイト）
    """

    source: BlockSource
    offset: int
    size: int

    def read(self) -> bytes:
        """ブロックの内容を読み込む"""
        return self.source.read_at(self.offset, self.size)
