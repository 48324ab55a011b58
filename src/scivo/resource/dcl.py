"""DCL (PKWARE Data Compression Library) 解凍アルゴリズムモジュール

データファイルの圧縮方式 18〜20 で使用される DCL implode 形式の
圧縮データを解凍する機能を提供する。

ストリーム形式:
    先頭2バイト: リテラル符号化フラグ (0=生バイト, 1=ハフマン符号), 辞書サイズビット数 (4〜6)
    以降はLSBファーストのビット列。1ビット目が1なら長さ/距離ペア、0ならリテラル。
    長さ519は終端符号。
"""

from __future__ import annotations

from dataclasses import dataclass

MAX_BITS = 13
END_OF_STREAM_LENGTH = 519

# 各表はランレングス圧縮された符号長 (下位4ビット=符号長, 上位4ビット+1=繰り返し数)
_LITERAL_LENGTHS = bytes(
    [
        11, 124, 8, 7, 28, 7, 188, 13, 76, 4, 10, 8, 12, 10, 12, 10, 8, 23, 8,
        9, 7, 6, 7, 8, 7, 6, 55, 8, 23, 24, 12, 11, 7, 9, 11, 12, 6, 7, 22, 5,
        7, 24, 6, 11, 9, 6, 7, 22, 7, 11, 38, 7, 9, 8, 25, 11, 8, 11, 9, 12,
        8, 12, 5, 38, 5, 38, 5, 11, 7, 5, 6, 21, 6, 10, 53, 8, 7, 24, 10, 27,
        44, 253, 253, 253, 252, 252, 252, 13, 12, 45, 12, 45, 12, 61, 12, 45,
        44, 173,
    ]
)  # fmt: skip
_LENGTH_LENGTHS = bytes([2, 35, 36, 53, 38, 23])
_DISTANCE_LENGTHS = bytes([2, 20, 53, 230, 247, 151, 248])

_LENGTH_BASE = (3, 2, 4, 5, 6, 7, 8, 9, 10, 12, 16, 24, 40, 72, 136, 264)
_LENGTH_EXTRA = (0, 0, 0, 0, 0, 0, 0, 0, 1, 2, 3, 4, 5, 6, 7, 8)


@dataclass(frozen=True)
class _Huffman:
    """符号長ごとの符号数と、符号順に並べたシンボル"""

    counts: tuple[int, ...]
    symbols: tuple[int, ...]

    @classmethod
    def from_compact(cls, compact: bytes, symbol_count: int) -> _Huffman:
        lengths: list[int] = []
        for item in compact:
            repeat = (item >> 4) + 1
            lengths.extend([item & 0x0F] * repeat)
        if len(lengths) != symbol_count:
            raise ValueError(f"符号長表のシンボル数が不正です: {len(lengths)}")

        counts = [0] * (MAX_BITS + 1)
        for length in lengths:
            counts[length] += 1

        offsets = [0] * (MAX_BITS + 2)
        for length in range(1, MAX_BITS + 1):
            offsets[length + 1] = offsets[length] + counts[length]

        symbols = [0] * symbol_count
        for symbol, length in enumerate(lengths):
            if length:
                symbols[offsets[length]] = symbol
                offsets[length] += 1

        return cls(counts=tuple(counts), symbols=tuple(symbols))


_LITERAL_CODE = _Huffman.from_compact(_LITERAL_LENGTHS, 256)
_LENGTH_CODE = _Huffman.from_compact(_LENGTH_LENGTHS, 16)
_DISTANCE_CODE = _Huffman.from_compact(_DISTANCE_LENGTHS, 64)


class _BitReader:
    """LSBファーストのビットリーダー"""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0
        self._buffer = 0
        self._count = 0

    def bits(self, need: int) -> int:
        value = self._buffer
        while self._count < need:
            if self._pos >= len(self._data):
                raise ValueError("不完全な圧縮データ: 入力が途中で終了しました")
            value |= self._data[self._pos] << self._count
            self._pos += 1
            self._count += 8
        self._buffer = value >> need
        self._count -= need
        return value & ((1 << need) - 1)

    def decode(self, code_table: _Huffman) -> int:
        # 符号はビット反転して格納されている
        code = first = index = 0
        for length in range(1, MAX_BITS + 1):
            code |= self.bits(1) ^ 1
            count = code_table.counts[length]
            if code < first + count:
                return code_table.symbols[index + (code - first)]
            index += count
            first += count
            first <<= 1
            code <<= 1
        raise ValueError("不正な圧縮データ: ハフマン符号が範囲外です")


class DCLDecoder:
    """DCL implode 解凍クラス"""

    def decode(self, data: bytes, output_size: int) -> bytes:
        """DCL圧縮データを解凍する

        終端符号に到達するか、出力が期待サイズに達した時点で終了する。

        Args:
            data: DCL圧縮されたバイト列
            output_size: 解凍後の期待サイズ（バイト）

        Returns:
            解凍されたバイト列

        Raises:
            ValueError: 不完全または不正な圧縮データの場合
        """
        reader = _BitReader(data)

        coded_literals = reader.bits(8)
        if coded_literals > 1:
            raise ValueError(f"不正な圧縮データ: リテラル符号化フラグ {coded_literals}")
        dictionary_bits = reader.bits(8)
        if not 4 <= dictionary_bits <= 6:
            raise ValueError(f"不正な圧縮データ: 辞書サイズ {dictionary_bits}")

        output = bytearray()
        while len(output) < output_size:
            if reader.bits(1):
                symbol = reader.decode(_LENGTH_CODE)
                length = _LENGTH_BASE[symbol] + reader.bits(_LENGTH_EXTRA[symbol])
                if length == END_OF_STREAM_LENGTH:
                    break

                low_bits = 2 if length == 2 else dictionary_bits
                distance = (reader.decode(_DISTANCE_CODE) << low_bits) + reader.bits(low_bits) + 1
                if distance > len(output):
                    raise ValueError(f"不正な圧縮データ: 参照距離 {distance} が出力を超えています")

                # 重なりのあるコピーに対応するため1バイトずつ複製する
                start = len(output) - distance
                for i in range(length):
                    output.append(output[start + i])
            else:
                symbol = reader.decode(_LITERAL_CODE) if coded_literals else reader.bits(8)
                output.append(symbol)

        return bytes(output)
