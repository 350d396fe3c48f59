"""
配置模块
=======

包含系统常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "CHECKSUM_LABEL",
    "FRAME_SEPARATOR",
    "MAX_BUFFER_SIZE",
    "DEFAULT_BAUDRATE",
    "DEFAULT_TIMEOUT",
    "DEFAULT_UPLOAD_INTERVAL",
    "NUMERIC_FIELDS",
    "TAG_FIELDS",
    # 配置
    "ConfigError",
    "SerialConfig",
    "InfluxConfig",
    "LoggerConfig",
    "load_env_file",
]
