"""
日志记录模块
============

提供统一的日志记录功能，支持彩色输出和调用位置追踪。
"""

import datetime
import inspect
import logging
import sys
from typing import Optional, TextIO, Union
from pathlib import Path

DEFAULT_LOGGER_NAME = "vedirect_logger"


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',    # 青色
        'INFO': '\033[0m',      # 默认色
        'WARNING': '\033[33m',  # 黄色
        'ERROR': '\033[31m',    # 红色
        'CRITICAL': '\033[35m', # 紫色
        'RESET': '\033[0m'      # 重置
    }

    def format(self, record):
        """格式化日志记录"""
        # 跳过 logging 模块自身的栈帧，找到真正的调用者
        frame = inspect.currentframe()
        caller_filename = "unknown"
        caller_function = "unknown"
        caller_line = 0
        try:
            while frame:
                filename = frame.f_code.co_filename
                if filename != __file__ and filename != logging.__file__:
                    caller_filename = Path(filename).name
                    caller_function = frame.f_code.co_name
                    caller_line = frame.f_lineno
                    break
                frame = frame.f_back
        finally:
            del frame

        # 添加毫秒精度的时间戳
        now = datetime.datetime.fromtimestamp(record.created)
        milliseconds = now.microsecond // 1000
        timestamp = now.strftime(f"%Y-%m-%d %H:%M:%S.{milliseconds:03d}")

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        formatted_message = (
            f"{color}[{timestamp}] {record.levelname:<7} {record.getMessage()} "
            f"[{caller_filename}.{caller_function}():{caller_line}]{reset}"
        )

        if record.exc_info:
            formatted_message += "\n" + self.formatException(record.exc_info)

        return formatted_message


# 全局日志器字典
_loggers = {}


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    console_output: bool = True,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    设置日志器

    控制台日志默认写入 stderr，stdout 只留给命令输出（如 replay 的JSON行）。

    Args:
        name: 日志器名称
        level: 日志级别
        log_file: 日志文件路径，None表示不写入文件
        console_output: 是否输出到控制台
        stream: 控制台输出流，None表示 sys.stderr

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 清除已有的处理器
    logger.handlers.clear()

    # 控制台处理器
    if console_output:
        console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        console_handler.setFormatter(ColoredFormatter())
        logger.addHandler(console_handler)

    # 文件处理器
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # 防止重复输出
    logger.propagate = False

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    获取日志器实例

    Args:
        name: 日志器名称

    Returns:
        日志器实例
    """
    if name not in _loggers:
        _loggers[name] = setup_logger(name)
    return _loggers[name]


def set_level(level: int) -> None:
    """
    统一调整所有已创建日志器的级别

    Args:
        level: 日志级别，如 logging.DEBUG
    """
    for logger in _loggers.values():
        logger.setLevel(level)
