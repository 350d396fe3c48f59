"""
系统常量定义
============

定义VE.Direct文本协议、串口参数及上传相关的各种常量。
"""

from typing import Final, Dict

# VE.Direct 文本协议帧格式定义
CHECKSUM_LABEL: Final[bytes] = b"Checksum\t"  # 校验行标签（帧尾标记）
FRAME_SEPARATOR: Final[bytes] = b"\r\n"  # 行结束符
CHECKSUM_PREFIX: Final[bytes] = b"Checksum"  # 解码时跳过的校验行前缀
HEX_MESSAGE_PREFIX: Final[bytes] = b":"  # 异步HEX协议消息前缀
FIELD_SEPARATOR: Final[str] = "\t"  # 键值分隔符
FRAME_ENCODING: Final[str] = "ascii"  # 帧文本编码

# 缓冲区安全上限：超过此长度仍无法解析出帧时清空缓冲区
MAX_BUFFER_SIZE: Final[int] = 10240

# 串口配置默认值（VE.Direct 固定为 19200 8N1）
DEFAULT_BAUDRATE: Final[int] = 19200  # 默认波特率
DEFAULT_TIMEOUT: Final[float] = 0.1  # 默认超时时间(秒)
DEFAULT_READ_SIZE: Final[int] = 1024  # 单次最大读取字节数
DEFAULT_QUEUE_SIZE: Final[int] = 100  # IO线程记录队列大小
RECONNECT_INTERVAL: Final[float] = 1.0  # 串口读取失败后的重连间隔(秒)

# 上传配置默认值
DEFAULT_UPLOAD_INTERVAL: Final[float] = 60.0  # 周期上传间隔(秒)
DEFAULT_INFLUX_URL: Final[str] = "http://localhost:8086"
MEASUREMENT_NAME: Final[str] = "vedirect"
DEFAULT_SOURCE_TAG: Final[str] = "vedirect-logger"
UNKNOWN_TAG_VALUE: Final[str] = "unknown"

# 原始字节记录默认值
DEFAULT_RECORD_DIR: Final[str] = "victron_logs"
RECORD_FILE_PREFIX: Final[str] = "victron_bytes_"

# 数值字段映射：VE.Direct 键 -> InfluxDB 字段名
NUMERIC_FIELDS: Final[Dict[str, str]] = {
    "V": "voltage",  # 电池电压 (mV)
    "I": "current",  # 电池电流 (mA)
    "VPV": "pv_voltage",  # 光伏板电压 (mV)
    "PPV": "pv_power",  # 光伏板功率 (W)
    "H20": "yield_today",  # 今日发电量 (0.01kWh)
    "H19": "yield_total",  # 累计发电量 (0.01kWh)
    "H21": "max_power_today",  # 今日最大功率 (W)
}

# 标签字段映射：VE.Direct 键 -> InfluxDB 标签名
TAG_FIELDS: Final[Dict[str, str]] = {
    "CS": "state",  # 充电状态
    "MPPT": "MPPT",  # MPPT 跟踪状态
}
