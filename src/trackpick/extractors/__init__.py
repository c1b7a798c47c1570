"""External media toolkits for trackpick."""

from trackpick.extractors.base import BaseToolkit, RetryPolicy
from trackpick.extractors.ffmpeg import FFmpegToolkit

__all__ = [
    "BaseToolkit",
    "FFmpegToolkit",
    "RetryPolicy",
]
