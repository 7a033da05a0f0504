"""出力テンソルの精度設定を行うサービス."""

from pochisr.exceptions import OutputMetadataError
from pochisr.inference.types.backend_protocol import INetwork

OUTPUT_PRECISION = "FP32"


class OutputBindingService:
    """全出力を FP32 に設定し, 読み出す出力名を決定する."""

    def configure(self, network: INetwork) -> str:
        """全出力の精度を FP32 に設定する.

        Args:
            network: コンパイル前のネットワーク.

        Returns:
            最初の出力の名前.

        Raises:
            OutputMetadataError: 出力が無い, または出力情報が不正な場合.
        """
        outputs = network.outputs
        if not outputs:
            raise OutputMetadataError("ネットワークに出力がありません")

        for info in outputs:
            if not info.name or not info.shape:
                raise OutputMetadataError(f"出力データが不正です: {info}")
            network.set_output_precision(info.name, OUTPUT_PRECISION)

        return outputs[0].name
