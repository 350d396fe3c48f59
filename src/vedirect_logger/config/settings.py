"""
配置管理
========

提供串口、InfluxDB 和日志服务相关的配置类。

配置既可以直接构造，也可以通过 ``from_env`` 从环境变量（以及可选的 .env 文件）加载。
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

import serial
from dotenv import load_dotenv

from .constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_TIMEOUT,
    DEFAULT_INFLUX_URL,
    DEFAULT_SOURCE_TAG,
    DEFAULT_UPLOAD_INTERVAL,
    DEFAULT_QUEUE_SIZE,
    MAX_BUFFER_SIZE,
)


class ConfigError(ValueError):
    """缺少必需配置或配置值非法"""


def load_env_file(env_file: Optional[Union[str, Path]] = None) -> bool:
    """
    加载 .env 文件到进程环境变量

    已存在的环境变量不会被覆盖。

    Args:
        env_file: .env 文件路径，None 表示在当前目录向上查找

    Returns:
        找到并加载了文件返回True
    """
    if env_file is None:
        return load_dotenv()
    return load_dotenv(dotenv_path=env_file)


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"环境变量 {name} 必须是整数: {raw!r}")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"环境变量 {name} 必须是数值: {raw!r}")


@dataclass
class SerialConfig:
    """串口配置类"""

    port: str  # 串口号
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_TIMEOUT  # 超时时间

    def __post_init__(self):
        """参数验证"""
        if not self.port:
            raise ConfigError("串口号不能为空")
        if self.baudrate <= 0:
            raise ValueError("baudrate必须大于0")

    def to_serial_kwargs(self) -> dict:
        """转换为serial.Serial的参数字典"""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "SerialConfig":
        """
        从环境变量创建串口配置

        读取 PORT（必需）和 BAUD_RATE（可选）。

        Raises:
            ConfigError: 缺少 PORT 时抛出
        """
        env = os.environ if env is None else env
        port = env.get("PORT")
        if not port:
            raise ConfigError("缺少环境变量: PORT")
        return cls(port=port, baudrate=_env_int(env, "BAUD_RATE", DEFAULT_BAUDRATE))


@dataclass
class InfluxConfig:
    """InfluxDB 连接配置类"""

    url: str = DEFAULT_INFLUX_URL
    token: Optional[str] = None
    org: Optional[str] = None
    bucket: Optional[str] = None
    source_tag: str = DEFAULT_SOURCE_TAG  # 默认 source 标签

    @property
    def masked_token(self) -> str:
        """用于日志输出的脱敏令牌"""
        if not self.token:
            return "<未设置>"
        return self.token[:8] + "****"

    def describe(self) -> dict:
        """返回可安全写入日志的配置摘要"""
        return {
            "url": self.url,
            "org": self.org,
            "bucket": self.bucket,
            "token": self.masked_token,
        }

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "InfluxConfig":
        """从 INFLUX_URL / INFLUX_TOKEN / INFLUX_ORG / INFLUX_BUCKET 创建配置"""
        env = os.environ if env is None else env
        return cls(
            url=env.get("INFLUX_URL") or DEFAULT_INFLUX_URL,
            token=env.get("INFLUX_TOKEN"),
            org=env.get("INFLUX_ORG"),
            bucket=env.get("INFLUX_BUCKET"),
        )


@dataclass
class LoggerConfig:
    """遥测记录服务配置类"""

    serial: SerialConfig
    influx: InfluxConfig = field(default_factory=InfluxConfig)
    upload_interval: float = DEFAULT_UPLOAD_INTERVAL  # 周期上传间隔(秒)
    max_buffer_size: int = MAX_BUFFER_SIZE  # 解析缓冲区安全上限(字节)
    queue_size: int = DEFAULT_QUEUE_SIZE  # IO线程记录队列大小
    log_level: int = logging.INFO

    def __post_init__(self):
        """参数验证"""
        if self.upload_interval <= 0:
            raise ValueError("upload_interval必须大于0")
        if self.max_buffer_size <= 0:
            raise ValueError("max_buffer_size必须大于0")
        if self.queue_size <= 0:
            raise ValueError("queue_size必须大于0")

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        env_file: Optional[Union[str, Path]] = None,
    ) -> "LoggerConfig":
        """
        从环境变量创建完整的服务配置

        当 env 为 None 时先加载 .env 文件再读取 os.environ。

        Args:
            env: 环境变量映射，默认使用 os.environ
            env_file: .env 文件路径

        Returns:
            服务配置

        Raises:
            ConfigError: 缺少必需配置或数值非法时抛出
        """
        if env is None:
            load_env_file(env_file)
            env = os.environ

        level_name = (env.get("LOG_LEVEL") or "INFO").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigError(f"未知的日志级别: {level_name}")

        return cls(
            serial=SerialConfig.from_env(env),
            influx=InfluxConfig.from_env(env),
            upload_interval=_env_float(env, "UPLOAD_INTERVAL", DEFAULT_UPLOAD_INTERVAL),
            max_buffer_size=_env_int(env, "MAX_BUFFER_SIZE", MAX_BUFFER_SIZE),
            log_level=level,
        )
