"""
服务模块
========

包含遥测记录服务、上传调度和原始字节记录功能。
"""

from .uploader import UploadScheduler
from .telemetry_service import TelemetryService
from .byte_recorder import ByteRecorder, replay_file

__all__ = [
    "UploadScheduler",
    "TelemetryService",
    "ByteRecorder",
    "replay_file",
]
