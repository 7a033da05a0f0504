"""pochisr.imaging: 画像コーデック."""

from .opencv_codec import OpenCvImageCodec

__all__ = ["OpenCvImageCodec"]
