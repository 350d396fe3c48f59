"""
命令行接口
==========

实现 run / record / replay / ports 四个子命令。
"""

import argparse
import json
import os
from typing import Dict

from ..config.settings import ConfigError, LoggerConfig, SerialConfig, load_env_file
from ..core.serial_manager import SerialManager
from ..service.byte_recorder import ByteRecorder, replay_file
from ..service.telemetry_service import TelemetryService
from ..utils.logger import get_logger, set_level
from ..utils.shutdown import install_stop_handlers

logger = get_logger(__name__)


def _collect_env(args: argparse.Namespace) -> Dict[str, str]:
    """加载 .env 后用命令行参数覆盖环境变量"""
    load_env_file(getattr(args, "env_file", None))
    env = dict(os.environ)

    if getattr(args, "port", None):
        env["PORT"] = args.port
    if getattr(args, "baudrate", None):
        env["BAUD_RATE"] = str(args.baudrate)
    if getattr(args, "interval", None):
        env["UPLOAD_INTERVAL"] = str(args.interval)
    if getattr(args, "log_level", None):
        env["LOG_LEVEL"] = args.log_level
    return env


class VEDirectCLI:
    """VE.Direct 命令行接口"""

    @staticmethod
    def run_logger(args: argparse.Namespace) -> bool:
        """读取串口并把数据上传到 InfluxDB"""
        try:
            config = LoggerConfig.from_env(_collect_env(args))
        except ConfigError as e:
            logger.error(f"配置错误: {e}")
            return False

        set_level(config.log_level)
        logger.info(
            f"串口: {config.serial.port} @ {config.serial.baudrate}，"
            f"上传间隔: {config.upload_interval}秒"
        )

        service = TelemetryService(config, stop_event=install_stop_handlers())
        return service.run()

    @staticmethod
    def record(args: argparse.Namespace) -> bool:
        """把串口原始字节记录到文件"""
        env = _collect_env(args)
        try:
            serial_config = SerialConfig.from_env(env)
        except ConfigError as e:
            logger.error(f"配置错误: {e}")
            return False

        recorder = ByteRecorder(
            SerialManager(serial_config),
            output_dir=args.output_dir,
            stop_event=install_stop_handlers(),
        )
        return recorder.run(duration=args.duration)

    @staticmethod
    def replay(args: argparse.Namespace) -> bool:
        """回放记录文件并以JSON逐行输出解析结果"""
        try:
            count = 0
            for record in replay_file(args.file):
                print(json.dumps(record, ensure_ascii=False))
                count += 1
        except OSError as e:
            logger.error(f"读取记录文件失败: {e}")
            return False

        logger.info(f"回放完成，共解析出{count}条记录")
        return True

    @staticmethod
    def list_ports(args: argparse.Namespace) -> bool:
        """显示可用的串口"""
        SerialManager.print_available_ports()
        return True
