"""
遥测记录服务
============

串口 -> IO线程(解析) -> 上传调度 -> InfluxDB 的完整数据链路。
"""

import threading
from typing import Optional

from ..config.settings import LoggerConfig
from ..core.frame_handler import VEDirectParser
from ..core.io_thread import IoThread
from ..core.serial_manager import SerialManager
from ..sink.influx_writer import InfluxWriter
from .uploader import UploadScheduler
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 主循环等待记录的最长时间(秒)，保证能及时响应停止事件
POLL_INTERVAL = 0.5


class TelemetryService:
    """VE.Direct 遥测记录服务"""

    def __init__(
        self,
        config: LoggerConfig,
        serial_manager: Optional[SerialManager] = None,
        writer: Optional[InfluxWriter] = None,
        stop_event: Optional[threading.Event] = None,
    ):
        """
        初始化服务

        Args:
            config: 服务配置
            serial_manager: 串口管理器，None时按配置创建
            writer: InfluxDB写入器，None时按配置创建
            stop_event: 停止事件，None时新建
        """
        self.config = config
        self.serial_manager = serial_manager or SerialManager(config.serial)
        self.writer = writer or InfluxWriter(config.influx)
        self.stop_event = stop_event or threading.Event()
        self.scheduler = UploadScheduler(self.writer.write_record, config.upload_interval)
        self.io_thread: Optional[IoThread] = None

    def request_stop(self) -> None:
        """请求服务退出"""
        self.stop_event.set()

    def run(self) -> bool:
        """
        运行服务直到停止事件被设置

        Returns:
            正常退出返回True，初始化失败返回False
        """
        if not self.writer.open():
            return False

        if not self.serial_manager.open():
            self.writer.close()
            return False

        self.io_thread = IoThread(
            self.serial_manager,
            VEDirectParser(self.config.max_buffer_size),
            record_queue_size=self.config.queue_size,
        )
        if not self.io_thread.start():
            self._cleanup()
            return False

        logger.info("VE.Direct logger已启动，等待数据...")
        try:
            while not self.stop_event.is_set():
                timeout = min(POLL_INTERVAL, self.scheduler.seconds_until_next())
                item = self.io_thread.get_record(timeout=timeout)
                if item is not None:
                    self.scheduler.on_record(item.record)
                self.scheduler.poll()
        finally:
            self._cleanup()

        return True

    def _cleanup(self) -> None:
        """停止IO线程并关闭所有资源"""
        if self.io_thread is not None:
            self.io_thread.stop()
            logger.info(f"IO统计: {self.io_thread.get_statistics()}")

        self.serial_manager.close()
        self.writer.close()
        logger.info("清理完成")
