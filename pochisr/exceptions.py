"""超解像デモの致命的エラー定義.

各ステージは失敗時に対応する例外を送出し, CLI が一括で捕捉して
終了コード 1 に変換する. 画像単位のスキップは例外ではなく
``ImageLoadResult`` で表現する.
"""


class SuperResolutionError(Exception):
    """超解像デモの致命的エラーの基底クラス."""


class ParameterError(SuperResolutionError):
    """コマンドライン引数が不正."""


class BackendError(SuperResolutionError):
    """推論ランタイム/デバイス/拡張の取得またはコンパイルに失敗."""


class ModelLoadError(SuperResolutionError):
    """モデル記述ファイルまたは重みファイルの読み込みに失敗."""


class UnsupportedTopologyError(SuperResolutionError):
    """ネットワークの入力構成がデモの対象外."""


class NoValidImagesError(SuperResolutionError):
    """入力形状に一致する画像が1枚も無い."""


class InputBindingError(SuperResolutionError):
    """画像を入力テンソルへ書き込めない."""


class OutputMetadataError(SuperResolutionError):
    """出力テンソルのメタデータが不正."""
