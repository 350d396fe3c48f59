"""
原始字节记录模块
================

把串口收到的原始字节按 ``<ISO时间戳>\\t<十六进制>`` 逐行写入日志文件，
并支持把记录文件重新送入解析器回放。
"""

import datetime
import threading
import time
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

import serial

from ..config.constants import DEFAULT_READ_SIZE, DEFAULT_RECORD_DIR, RECORD_FILE_PREFIX
from ..core.frame_handler import TelemetryRecord, VEDirectParser
from ..core.serial_manager import SerialManager
from ..utils.logger import get_logger

logger = get_logger(__name__)


def iso_timestamp(when: Optional[datetime.datetime] = None) -> str:
    """返回毫秒精度的UTC时间戳，如 2024-05-01T12:00:00.000Z"""
    when = when or datetime.datetime.now(datetime.timezone.utc)
    when = when.astimezone(datetime.timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%S.") + f"{when.microsecond // 1000:03d}Z"


def make_record_path(
    output_dir: Union[str, Path], when: Optional[datetime.datetime] = None
) -> Path:
    """生成记录文件路径，文件名中的 ':' 和 '.' 替换为 '-'"""
    stamp = iso_timestamp(when).replace(":", "-").replace(".", "-")
    return Path(output_dir) / f"{RECORD_FILE_PREFIX}{stamp}.txt"


def format_record_line(chunk: bytes, when: Optional[datetime.datetime] = None) -> str:
    """格式化一行记录"""
    return f"{iso_timestamp(when)}\t{chunk.hex()}\n"


def parse_record_line(line: str) -> Optional[Tuple[str, bytes]]:
    """
    解析一行记录

    Args:
        line: 记录文件中的一行

    Returns:
        (时间戳, 原始字节)，格式不正确时返回None
    """
    timestamp, sep, hex_data = line.strip().partition("\t")
    if not sep:
        return None
    try:
        return timestamp, bytes.fromhex(hex_data)
    except ValueError:
        return None


def replay_file(
    path: Union[str, Path], parser: Optional[VEDirectParser] = None
) -> Iterator[TelemetryRecord]:
    """
    按原始分块顺序把记录文件送入解析器

    Args:
        path: 记录文件路径
        parser: 解析器，None时新建

    Yields:
        解析出的遥测记录
    """
    parser = parser if parser is not None else VEDirectParser()
    with open(path, "r", encoding="ascii") as f:
        for line_no, line in enumerate(f, 1):
            if not line.strip():
                continue
            parsed = parse_record_line(line)
            if parsed is None:
                logger.warning(f"第{line_no}行格式错误，已跳过")
                continue
            _, chunk = parsed
            yield from parser.process(chunk)


class ByteRecorder:
    """串口原始字节记录器"""

    def __init__(
        self,
        serial_manager: SerialManager,
        output_dir: Union[str, Path] = DEFAULT_RECORD_DIR,
        stop_event: Optional[threading.Event] = None,
    ):
        self.serial_manager = serial_manager
        self.output_dir = Path(output_dir)
        self.output_file = make_record_path(self.output_dir)
        self.stop_event = stop_event or threading.Event()
        self.bytes_recorded = 0
        self.chunks_recorded = 0

    def run(self, duration: Optional[float] = None) -> bool:
        """
        记录直到停止事件被设置或到达指定时长

        Args:
            duration: 记录时长(秒)，None表示一直记录

        Returns:
            正常结束返回True，串口打开或读取失败返回False
        """
        if not self.output_dir.exists():
            self.output_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f"已创建输出目录: {self.output_dir}")

        if not self.serial_manager.open():
            return False

        start = time.monotonic()
        completed = True
        try:
            # 行缓冲，中断时已写入的数据不会丢失
            with open(self.output_file, "a", encoding="ascii", buffering=1) as f:
                logger.info(f"原始字节记录到: {self.output_file}")
                logger.info("VE.Direct字节记录器已启动，等待数据...")

                while not self.stop_event.is_set():
                    if duration is not None and time.monotonic() - start >= duration:
                        break

                    try:
                        chunk = self.serial_manager.read_available(DEFAULT_READ_SIZE)
                    except serial.SerialException as e:
                        logger.error(f"串口读取失败，停止记录: {e}")
                        completed = False
                        break

                    if chunk:
                        self.record_chunk(f, chunk)
        finally:
            self.serial_manager.close()
            logger.info(
                f"记录文件已关闭: {self.output_file}，"
                f"共{self.chunks_recorded}块/{self.bytes_recorded}字节"
            )

        return completed

    def record_chunk(self, stream, chunk: bytes) -> None:
        """写入一块数据"""
        line = format_record_line(chunk)
        logger.debug(f"收到{len(chunk)}字节: {chunk.hex()}")
        stream.write(line)
        self.chunks_recorded += 1
        self.bytes_recorded += len(chunk)
