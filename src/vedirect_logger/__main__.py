#!/usr/bin/env python3
"""
VE.Direct 遥测记录工具 - 模块CLI入口
===================================

支持通过 python -m vedirect_logger 调用
"""

import sys
import argparse

from . import __version__
from .cli.commands import VEDirectCLI
from .config.constants import DEFAULT_RECORD_DIR
from .utils.logger import get_logger

logger = get_logger(__name__)

PROGRAM_NAME = "VE.Direct 遥测记录工具"

COMMANDS = {
    "run": VEDirectCLI.run_logger,
    "record": VEDirectCLI.record,
    "replay": VEDirectCLI.replay,
    "ports": VEDirectCLI.list_ports,
}


def _add_serial_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--port", help="串口号（如 /dev/ttyUSB0），默认读取环境变量 PORT")
    parser.add_argument("--baudrate", type=int, help="波特率（默认19200）")
    parser.add_argument("--env-file", dest="env_file", help=".env 文件路径")


def create_parser():
    """创建命令行参数解析器"""
    parser = argparse.ArgumentParser(
        prog="vedirect-logger",
        description=f"{PROGRAM_NAME} v{__version__}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
使用示例：
  # 读取串口并上传到 InfluxDB
  python -m vedirect_logger run --port /dev/ttyUSB0

  # 记录串口原始字节
  python -m vedirect_logger record --port /dev/ttyUSB0 --output-dir ./victron_logs

  # 回放记录文件
  python -m vedirect_logger replay ./victron_logs/victron_bytes_xxx.txt
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"{PROGRAM_NAME} v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="可用命令")

    run_parser = subparsers.add_parser("run", help="读取串口并上传到 InfluxDB")
    _add_serial_arguments(run_parser)
    run_parser.add_argument("--interval", type=float, help="周期上传间隔(秒)，默认60")
    run_parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="日志级别，默认读取环境变量 LOG_LEVEL",
    )

    record_parser = subparsers.add_parser("record", help="记录串口原始字节")
    _add_serial_arguments(record_parser)
    record_parser.add_argument(
        "--output-dir", dest="output_dir", default=DEFAULT_RECORD_DIR, help="输出目录"
    )
    record_parser.add_argument(
        "--duration", type=float, default=None, help="记录时长(秒)，默认直到 Ctrl+C"
    )

    replay_parser = subparsers.add_parser("replay", help="回放原始字节记录文件")
    replay_parser.add_argument("file", help="record 命令生成的记录文件")

    subparsers.add_parser("ports", help="列出可用串口")

    return parser


def main(argv=None):
    """主函数"""
    try:
        parser = create_parser()
        args = parser.parse_args(argv)

        if not args.command:
            parser.print_help()
            return

        success = COMMANDS[args.command](args)
        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n用户中断程序，退出")
        sys.exit(1)
    except Exception as e:
        logger.error(f"程序异常: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
