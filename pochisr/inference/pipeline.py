"""超解像デモのパイプライン.

引数検証済みの設定を受け取り, バックエンド取得からモデル読み込み, 入出力設定,
コンパイル, 推論, 画像保存までを一方向に実行する. いずれかのステージが失敗した
時点で例外を送出し, 途中結果の復旧は行わない.
"""

import logging
from typing import Callable, Optional

from pochisr.config import SuperResolutionConfig
from pochisr.exceptions import ParameterError
from pochisr.imaging import OpenCvImageCodec
from pochisr.inference.adapters import create_backend
from pochisr.inference.services import (
    ExecutionService,
    InputBindingService,
    OutputBindingService,
    OutputService,
    ReportService,
)
from pochisr.inference.types.backend_protocol import IInferenceBackend
from pochisr.inference.types.codec_protocol import IImageCodec
from pochisr.inference.types.execution_types import ExecutionRequest
from pochisr.inference.types.orchestration_types import SuperResolutionResult
from pochisr.logging import LoggerManager
from pochisr.utils import collect_image_paths

BackendFactory = Callable[[SuperResolutionConfig], IInferenceBackend]


class SuperResolutionPipeline:
    """超解像推論を一通り実行するパイプライン.

    Attributes:
        codec: 画像コーデック.
        backend_factory: 設定からバックエンドを作成する関数.
        execution_service: 推論反復と計測を行うサービス.
    """

    def __init__(
        self,
        codec: Optional[IImageCodec] = None,
        backend_factory: BackendFactory = create_backend,
        execution_service: Optional[ExecutionService] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """パイプラインを初期化する.

        Args:
            codec: 画像コーデック. 未指定時は OpenCV を使用する.
            backend_factory: バックエンド作成関数.
            execution_service: 推論実行サービス.
            logger: ロガー. 未指定時はモジュールロガーを利用する.
        """
        self.codec = codec or OpenCvImageCodec()
        self.backend_factory = backend_factory
        self.execution_service = execution_service or ExecutionService()
        self.logger = logger or LoggerManager().get_logger(__name__)

        self.input_binding = InputBindingService(self.codec, logger=self.logger)
        self.output_binding = OutputBindingService()
        self.output_service = OutputService(self.codec, logger=self.logger)
        self.report_service = ReportService(logger=self.logger)

    def _acquire_backend(self, config: SuperResolutionConfig) -> IInferenceBackend:
        """バックエンドを作成し, 拡張を登録する."""
        self.logger.info("推論ランタイムを読み込んでいます")
        backend = self.backend_factory(config)
        self.logger.info(f"バックエンド: {backend.name} (デバイス: {backend.device})")
        for component, version in backend.get_version_info().items():
            self.logger.info(f"    {component}: {version}")

        if config.cpu_extension is not None:
            backend.add_extension(config.cpu_extension)
            self.logger.info(f"CPU拡張を読み込みました: {config.cpu_extension}")
        if config.gpu_extension_config is not None:
            backend.set_device_config_file(config.gpu_extension_config)
            self.logger.info(f"GPU拡張を読み込みました: {config.gpu_extension_config}")
        return backend

    def run(self, config: SuperResolutionConfig) -> SuperResolutionResult:
        """超解像推論を実行して結果画像を保存する.

        Args:
            config: 検証済みの設定.

        Returns:
            実行結果.
        """
        assert config.model_path is not None

        image_paths = collect_image_paths(config.inputs, log=self.logger)
        if not image_paths:
            raise ParameterError("適切な画像が見つかりません")

        backend = self._acquire_backend(config)

        self.logger.info("ネットワークファイルを読み込んでいます")
        network = backend.load_network(config.model_path)

        self.logger.info("入力を準備しています")
        bound = self.input_binding.bind(network, image_paths)
        network.set_batch_size(bound.batch_size)
        self.logger.info(f"バッチサイズ: {network.batch_size}")

        self.logger.info("出力を準備しています")
        output_name = self.output_binding.configure(network)

        self.logger.info("モデルをデバイスへ読み込んでいます")
        compiled = backend.compile(network, perf_counts=config.perf_counts)

        self.logger.info("推論リクエストを作成しています")
        request = compiled.create_infer_request()
        self.input_binding.fill(request, bound)

        self.logger.info(f"推論を開始します ({config.iterations} 回)")
        execution = self.execution_service.run(
            request,
            ExecutionRequest(
                iterations=config.iterations,
                collect_perf_counts=config.perf_counts,
            ),
        )
        self.report_service.log_execution(execution)
        if config.perf_counts:
            self.report_service.log_perf_counts(execution.perf_counts)

        output = request.get_output(output_name)
        output_paths = self.output_service.materialize(
            output, config.output_dir, show=config.show
        )

        result = SuperResolutionResult(
            backend=backend.name,
            device=backend.device,
            model_path=config.model_path,
            batch_size=bound.batch_size,
            output_shape=tuple(output.shape),
            output_paths=output_paths,
            execution=execution,
            skipped_images=[skip.path for skip in bound.skipped],
        )
        if config.benchmark_json:
            self.report_service.export_benchmark_json(result, config.output_dir)
        return result
