"""
上传调度模块
============

收到第一条有效记录时立即上传一次，之后每隔固定间隔上传最新的一条记录。
"""

import time
from typing import Callable, Optional

from ..config.constants import DEFAULT_UPLOAD_INTERVAL
from ..core.frame_handler import TelemetryRecord
from ..utils.logger import get_logger

logger = get_logger(__name__)


class UploadScheduler:
    """上传调度器"""

    def __init__(
        self,
        upload: Callable[[TelemetryRecord], bool],
        interval: float = DEFAULT_UPLOAD_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        初始化上传调度器

        Args:
            upload: 上传函数，接收一条记录
            interval: 周期上传间隔(秒)
            clock: 单调时钟，测试时可替换
        """
        if interval <= 0:
            raise ValueError("interval必须大于0")

        self._upload = upload
        self.interval = interval
        self._clock = clock
        self._next_upload = clock() + interval
        self._first_upload = True

        self.latest: Optional[TelemetryRecord] = None
        self.uploads = 0

    def on_record(self, record: TelemetryRecord) -> None:
        """
        接收一条新记录

        Args:
            record: 解析得到的遥测记录
        """
        self.latest = record
        if self._first_upload:
            self._first_upload = False
            logger.info("收到首条有效VE.Direct数据，立即上传")
            self._do_upload()

    def poll(self) -> bool:
        """
        检查周期上传是否到期，到期则上传最新记录

        Returns:
            本次执行了上传返回True
        """
        now = self._clock()
        if now < self._next_upload:
            return False

        self._next_upload = now + self.interval
        if self.latest is None:
            logger.debug("周期上传到期，但尚未收到数据")
            return False

        logger.info("周期上传: 上传VE.Direct数据...")
        self._do_upload()
        return True

    def seconds_until_next(self) -> float:
        """距离下一次周期上传的秒数"""
        return max(0.0, self._next_upload - self._clock())

    def _do_upload(self) -> None:
        if self._upload(self.latest):
            self.uploads += 1
