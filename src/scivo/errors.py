"""例外定義

アーカイブ読み込みとブック構築で発生する例外を定義する。
ファイルI/Oの失敗は組み込みのOSError系をそのまま伝播させる。
"""


class FormatError(ValueError):
    """アーカイブのバイト列が想定した構造と一致しない場合の例外"""


class ResourceNotFoundError(LookupError):
    """指定されたリソースがインデックスに存在しない場合の例外

    Attributes:
        resource_id: 見つからなかったリソースID
    """

    def __init__(self, resource_id: object) -> None:
        """見つからなかったリソースIDを指定して初期化する

        Args:
            resource_id: 見つからなかったリソースID
        """
        self.resource_id = resource_id
        super().__init__(f"リソースが見つかりません: {resource_id}")


class UnsupportedResourceError(ValueError):
    """パッチ出力が対応していないリソース種別の場合の例外"""


class BookBuildError(FormatError):
    """メッセージリソースからブックを構築できない場合の例外"""


class BookConsistencyError(RuntimeError):
    """構築済みブックの内部整合性が壊れている場合の例外"""
