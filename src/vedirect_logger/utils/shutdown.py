"""
进程退出处理
============

把 SIGINT / SIGTERM 转换为 threading.Event，主循环据此优雅退出。
"""

import signal
import threading
from typing import Optional

from .logger import get_logger

logger = get_logger(__name__)


def install_stop_handlers(stop_event: Optional[threading.Event] = None) -> threading.Event:
    """
    注册 SIGINT / SIGTERM 处理函数

    只能在主线程中调用；在其他线程中调用时仅返回事件对象，不注册处理函数。

    Args:
        stop_event: 收到信号时要设置的事件，None时新建

    Returns:
        停止事件
    """
    event = stop_event if stop_event is not None else threading.Event()

    def shutdown(signum, _frame):
        logger.info(f"收到信号 {signal.Signals(signum).name}，准备退出...")
        event.set()

    if threading.current_thread() is not threading.main_thread():
        logger.debug("非主线程，跳过信号处理注册")
        return event

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)
    return event
