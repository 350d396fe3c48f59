"""
数据帧处理模块
==============

负责从串口字节流中切分、校验并解码 VE.Direct 文本帧。

帧格式（每行以 \\r\\n 结束）::

    KEY1\\tVALUE1\\r\\n
    KEY2\\tVALUE2\\r\\n
    ...
    Checksum\\t<X>\\r\\n

串口读取的分块边界是任意的，因此解析器维护一个累积缓冲区，
每次调用 ``process`` 追加新数据并尽可能切出完整帧。
"""

from dataclasses import dataclass, asdict
from typing import Callable, Dict, List, Mapping, Optional

from ..config.constants import (
    CHECKSUM_LABEL,
    CHECKSUM_PREFIX,
    FIELD_SEPARATOR,
    FRAME_ENCODING,
    FRAME_SEPARATOR,
    HEX_MESSAGE_PREFIX,
    MAX_BUFFER_SIZE,
)
from .checksum import is_valid_frame, make_checksum_byte
from ..utils.logger import get_logger

logger = get_logger(__name__)

TelemetryRecord = Dict[str, str]


def _decode_lines(frame: bytes, record: TelemetryRecord) -> None:
    """逐行解码并填充 record，遇到非ASCII行时抛出 UnicodeDecodeError"""
    for line in bytes(frame).split(FRAME_SEPARATOR):
        if not line:
            continue
        if line.startswith(CHECKSUM_PREFIX) or line.startswith(HEX_MESSAGE_PREFIX):
            continue

        key, _, value = line.decode(FRAME_ENCODING).partition(FIELD_SEPARATOR)
        if key:
            record[key] = value


def decode_frame(
    frame: bytes, on_error: Optional[Callable[[UnicodeDecodeError], None]] = None
) -> TelemetryRecord:
    """
    将一个完整帧解码为键值记录

    跳过空行、校验行以及以 ``:`` 开头的异步HEX消息行。每行按第一个制表符
    拆分为键和值，值中多余的制表符原样保留。键为空的行被忽略。

    遇到无法按ASCII解码的行时记录错误并返回此前已解析的部分记录。

    Args:
        frame: 完整帧字节
        on_error: 解码失败时的回调，参数为捕获到的异常

    Returns:
        键值记录，可能为空
    """
    record: TelemetryRecord = {}
    try:
        _decode_lines(frame, record)
    except UnicodeDecodeError as e:
        logger.error(f"解码VE.Direct帧失败: {e}, 帧={bytes(frame)!r}")
        if on_error is not None:
            on_error(e)
    return record


def encode_frame(fields: Mapping[str, str]) -> bytes:
    """
    将键值字段编码为带正确校验字节的完整帧

    Args:
        fields: 字段映射，键值均为ASCII且不含 \\r\\n

    Returns:
        完整帧字节，可直接送入 ``VEDirectParser.process``
    """
    body = b"".join(
        f"{key}{FIELD_SEPARATOR}{value}".encode(FRAME_ENCODING) + FRAME_SEPARATOR
        for key, value in fields.items()
    )
    body += CHECKSUM_LABEL
    checksum_byte = make_checksum_byte(body + FRAME_SEPARATOR)
    return body + bytes([checksum_byte]) + FRAME_SEPARATOR


@dataclass
class ParserStatistics:
    """解析器统计信息"""

    bytes_received: int = 0
    frames_valid: int = 0  # 校验通过且产出记录的帧
    frames_invalid: int = 0  # 校验失败被丢弃的帧
    frames_empty: int = 0  # 校验通过但没有任何字段的帧
    decode_errors: int = 0
    buffer_resets: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class VEDirectParser:
    """
    VE.Direct 流式帧解析器

    每个实例对应一条有序字节流，缓冲区只由本实例持有，不是线程安全的；
    多条数据流需要各自创建实例。
    """

    def __init__(self, max_buffer_size: int = MAX_BUFFER_SIZE):
        """
        初始化解析器

        Args:
            max_buffer_size: 缓冲区安全上限(字节)，超过后清空缓冲区
        """
        if max_buffer_size <= 0:
            raise ValueError("max_buffer_size必须大于0")

        self.max_buffer_size = max_buffer_size
        self.stats = ParserStatistics()
        self._buffer = bytearray()

    @property
    def buffered(self) -> int:
        """当前缓冲区中尚未解析的字节数"""
        return len(self._buffer)

    def reset(self) -> None:
        """清空缓冲区（例如串口重连后）"""
        self._buffer.clear()

    def process(self, chunk: bytes) -> List[TelemetryRecord]:
        """
        追加一块数据并返回本次解析出的全部记录

        Args:
            chunk: 串口读取到的任意长度字节

        Returns:
            按流顺序排列的记录列表，可能为空
        """
        self._buffer.extend(chunk)
        self.stats.bytes_received += len(chunk)
        records: List[TelemetryRecord] = []

        while True:
            frame = self._take_frame()
            if frame is None:
                break

            # 校验失败的帧静默丢弃
            if not is_valid_frame(frame):
                self.stats.frames_invalid += 1
                logger.debug(f"校验和错误，丢弃帧: {len(frame)}字节")
                continue

            record = decode_frame(frame, on_error=self._count_decode_error)
            if record:
                self.stats.frames_valid += 1
                records.append(record)
            else:
                self.stats.frames_empty += 1

        if len(self._buffer) > self.max_buffer_size:
            logger.warning(
                f"缓冲区超过上限({len(self._buffer)} > {self.max_buffer_size}字节)，清空缓冲区"
            )
            self._buffer.clear()
            self.stats.buffer_resets += 1

        return records

    def _take_frame(self) -> Optional[bytes]:
        """
        从缓冲区头部切出一个候选帧

        Returns:
            候选帧（含之前的任何垃圾数据），没有完整帧时返回None
        """
        checksum_pos = self._buffer.find(CHECKSUM_LABEL)
        if checksum_pos == -1:
            return None

        # 已收到校验标签但校验值/行尾尚未到达，保留数据等待下一次调用
        separator_pos = self._buffer.find(FRAME_SEPARATOR, checksum_pos + len(CHECKSUM_LABEL))
        if separator_pos == -1:
            return None

        frame_end = separator_pos + len(FRAME_SEPARATOR)
        frame = bytes(self._buffer[:frame_end])
        del self._buffer[:frame_end]
        return frame

    def _count_decode_error(self, error: UnicodeDecodeError) -> None:
        self.stats.decode_errors += 1
