"""推論層で共有する型定義."""

from .backend_protocol import (
    DYNAMIC_DIM,
    ICompiledNetwork,
    IInferenceBackend,
    IInferRequest,
    INetwork,
    PerfCounter,
    TensorInfo,
)
from .codec_protocol import IImageCodec
from .execution_types import ExecutionRequest, ExecutionResult
from .orchestration_types import BoundInputs, ImageLoadResult, SuperResolutionResult

__all__ = [
    "DYNAMIC_DIM",
    "BoundInputs",
    "ExecutionRequest",
    "ExecutionResult",
    "ICompiledNetwork",
    "IImageCodec",
    "IInferRequest",
    "IInferenceBackend",
    "INetwork",
    "ImageLoadResult",
    "PerfCounter",
    "SuperResolutionResult",
    "TensorInfo",
]
