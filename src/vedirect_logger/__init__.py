"""
VE.Direct 遥测记录工具
======================

从串口读取 VE.Direct 文本协议数据流，切分并校验数据帧，
将解析出的遥测记录写入 InfluxDB。

主要功能：
- 流式帧切分与校验和验证
- 帧解码为键值记录
- InfluxDB 周期上传
- 原始字节记录与回放

版本: 1.0.0
"""

__version__ = "1.0.0"
__description__ = "VE.Direct 串口遥测记录工具"

# 导出主要类
from .core.frame_handler import VEDirectParser, TelemetryRecord, decode_frame
from .core.checksum import calculate_checksum

__all__ = [
    "VEDirectParser",
    "TelemetryRecord",
    "decode_frame",
    "calculate_checksum",
]
