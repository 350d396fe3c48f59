"""
IO线程模块
==========

将串口读取与上传业务逻辑解耦：IO线程独占一个 VEDirectParser，
把解析出的遥测记录投递到队列中，主线程从队列取出记录进行处理。
"""

import threading
import queue
import time
from typing import Optional
from dataclasses import dataclass

from ..config.constants import DEFAULT_QUEUE_SIZE, DEFAULT_READ_SIZE, RECONNECT_INTERVAL
from ..core.serial_manager import SerialManager
from ..core.frame_handler import VEDirectParser, TelemetryRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class IoRecord:
    """IO线程解析出的遥测记录"""

    record: TelemetryRecord
    timestamp: float = 0.0

    def __post_init__(self):
        """添加接收时间戳"""
        if self.timestamp == 0.0:
            self.timestamp = time.time()


class IoThread:
    """
    IO线程类

    负责独立的串口数据读取和帧解析，解析器只在本线程内被访问。
    """

    def __init__(
        self,
        serial_manager: SerialManager,
        parser: Optional[VEDirectParser] = None,
        record_queue_size: int = DEFAULT_QUEUE_SIZE,
        read_size: int = DEFAULT_READ_SIZE,
        reconnect_interval: float = RECONNECT_INTERVAL,
    ):
        """
        初始化IO线程

        Args:
            serial_manager: 串口管理器
            parser: 帧解析器，None时创建默认解析器
            record_queue_size: 记录队列大小
            read_size: 单次最大读取字节数
            reconnect_interval: 串口读取失败后的重连间隔(秒)
        """
        self.serial_manager = serial_manager
        self.parser = parser if parser is not None else VEDirectParser()
        self.record_queue: queue.Queue[IoRecord] = queue.Queue(maxsize=record_queue_size)
        self.read_size = read_size
        self.reconnect_interval = reconnect_interval

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._running = False

        # 统计信息
        self.bytes_received = 0
        self.records_received = 0
        self.records_dropped = 0
        self.read_errors = 0
        self.reconnects = 0

    def start(self) -> bool:
        """
        启动IO线程

        Returns:
            启动成功返回True，失败返回False
        """
        if self._running:
            logger.warning("IO线程已经在运行")
            return True

        if not self.serial_manager.is_open:
            logger.error("串口未打开，无法启动IO线程")
            return False

        try:
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._io_loop, name="vedirect-io", daemon=True
            )
            self._thread.start()
            self._running = True

            logger.info("IO线程已启动")
            return True

        except Exception as e:
            logger.error(f"启动IO线程失败: {e}")
            return False

    def stop(self, timeout: float = 2.0) -> bool:
        """
        停止IO线程

        Args:
            timeout: 等待线程结束的超时时间(秒)

        Returns:
            停止成功返回True，超时返回False
        """
        if not self._running:
            return True

        logger.info("正在停止IO线程...")
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout)

            if self._thread.is_alive():
                logger.warning(f"IO线程未在{timeout}秒内结束")
                return False

        self._running = False
        logger.info("IO线程已停止")
        return True

    def get_record(self, timeout: Optional[float] = None) -> Optional[IoRecord]:
        """
        从队列获取一条记录

        Args:
            timeout: 超时时间(秒)，None表示阻塞等待

        Returns:
            成功返回IoRecord，超时返回None
        """
        try:
            return self.record_queue.get(timeout=timeout)
        except queue.Empty:
            return None

    @property
    def is_running(self) -> bool:
        """检查IO线程是否在运行"""
        return self._running and self._thread is not None and self._thread.is_alive()

    @property
    def queue_size(self) -> int:
        """获取当前队列大小"""
        return self.record_queue.qsize()

    def get_statistics(self) -> dict:
        """
        获取IO线程及解析器统计信息

        Returns:
            包含统计信息的字典
        """
        return {
            "running": self.is_running,
            "queue_size": self.queue_size,
            "bytes_received": self.bytes_received,
            "records_received": self.records_received,
            "records_dropped": self.records_dropped,
            "read_errors": self.read_errors,
            "reconnects": self.reconnects,
            "parser": self.parser.stats.to_dict(),
        }

    def feed(self, chunk: bytes) -> int:
        """
        解析一块数据并把得到的记录放入队列

        Args:
            chunk: 串口读取到的字节

        Returns:
            本次解析出的记录数
        """
        self.bytes_received += len(chunk)
        records = self.parser.process(chunk)
        for record in records:
            self._queue_record(IoRecord(record=record))
        return len(records)

    def _io_loop(self) -> None:
        """IO线程主循环"""
        logger.debug("IO线程开始运行")

        while not self._stop_event.is_set():
            try:
                # 串口超时保证循环能及时响应停止事件
                chunk = self.serial_manager.read_available(self.read_size)
            except Exception as e:
                self.read_errors += 1
                logger.error(f"串口读取失败: {e}，{self.reconnect_interval}秒后尝试重连")
                self._reconnect()
                continue

            if chunk:
                self.feed(chunk)
            else:
                time.sleep(0.001)

        logger.debug("IO线程已结束")

    def _reconnect(self) -> None:
        """
        关闭串口并按固定间隔重新打开，直到成功或收到停止请求

        重连成功后清空解析器缓冲区，断线前残留的半帧不会与新数据拼接。
        """
        self.serial_manager.close()

        while not self._stop_event.wait(self.reconnect_interval):
            if self.serial_manager.open():
                self.parser.reset()
                self.reconnects += 1
                logger.info(f"串口已重新连接（第{self.reconnects}次）")
                return

    def _queue_record(self, item: IoRecord) -> None:
        """
        将记录加入队列，队列满时丢弃最旧的记录

        Args:
            item: 要加入的记录
        """
        try:
            self.record_queue.put_nowait(item)
            self.records_received += 1

        except queue.Full:
            try:
                self.record_queue.get_nowait()
            except queue.Empty:
                pass
            self.record_queue.put_nowait(item)
            self.records_received += 1
            self.records_dropped += 1
            logger.warning("记录队列满，丢弃旧记录")
