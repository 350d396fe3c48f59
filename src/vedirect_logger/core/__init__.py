"""
核心模块
========

包含VE.Direct帧解析、校验算法、串口管理和IO线程等核心功能。
"""

from .checksum import calculate_checksum, is_valid_frame
from .frame_handler import VEDirectParser, TelemetryRecord, decode_frame, encode_frame
from .serial_manager import SerialManager
from .io_thread import IoThread, IoRecord

__all__ = [
    "calculate_checksum",
    "is_valid_frame",
    "VEDirectParser",
    "TelemetryRecord",
    "decode_frame",
    "encode_frame",
    "SerialManager",
    "IoThread",
    "IoRecord",
]
