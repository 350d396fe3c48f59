"""
工具模块
========

包含日志记录和进程退出处理等工具功能。
"""

from .logger import get_logger, setup_logger, set_level
from .shutdown import install_stop_handlers

__all__ = [
    "get_logger",
    "setup_logger",
    "set_level",
    "install_stop_handlers",
]
