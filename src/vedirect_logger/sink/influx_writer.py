"""
InfluxDB写入模块
================

把遥测记录写入 InfluxDB。写入失败只记录日志，不做重试。
"""

from typing import Mapping, Optional

from influxdb_client import InfluxDBClient, Point
from influxdb_client.client.write_api import SYNCHRONOUS, PointSettings

from ..config.settings import InfluxConfig
from .record_mapper import PointData, map_record
from ..utils.logger import get_logger

logger = get_logger(__name__)


def build_point(data: PointData) -> Point:
    """把数据点转换为 influxdb_client 的 Point 对象"""
    point = Point(data.measurement)
    for name, value in data.tags.items():
        point.tag(name, value)
    for name, value in data.fields.items():
        point.field(name, value)
    return point


class InfluxWriter:
    """InfluxDB写入器"""

    def __init__(self, config: InfluxConfig, client: Optional[InfluxDBClient] = None):
        """
        初始化写入器

        Args:
            config: InfluxDB配置
            client: 已创建的客户端，None时在open()中创建
        """
        self.config = config
        self._client = client
        self._write_api = None
        self.points_written = 0
        self.write_errors = 0

    @property
    def is_open(self) -> bool:
        return self._write_api is not None

    def open(self) -> bool:
        """
        创建客户端和写入接口

        Returns:
            成功返回True，失败返回False
        """
        if self.is_open:
            return True

        try:
            if self._client is None:
                self._client = InfluxDBClient(
                    url=self.config.url, token=self.config.token, org=self.config.org
                )
            self._write_api = self._client.write_api(
                write_options=SYNCHRONOUS,
                point_settings=PointSettings(source=self.config.source_tag),
            )
            logger.info(f"InfluxDB配置: {self.config.describe()}")
            return True

        except Exception as e:
            logger.error(f"创建InfluxDB客户端失败: {e}")
            self._write_api = None
            return False

    def write_record(self, record: Mapping[str, str]) -> bool:
        """
        写入一条遥测记录

        Args:
            record: 解析得到的遥测记录

        Returns:
            写入成功返回True，记录无可用字段或写入失败返回False
        """
        if not self.is_open:
            logger.error("InfluxDB写入器未打开")
            return False

        data = map_record(record)
        if data is None:
            logger.warning("记录中没有可写入的数值字段，跳过")
            return False

        try:
            self._write_api.write(
                bucket=self.config.bucket, org=self.config.org, record=build_point(data)
            )
            self.points_written += 1
            logger.info("InfluxDB: VE.Direct数据已写入")
            return True

        except Exception as e:
            self.write_errors += 1
            logger.error(f"InfluxDB VE.Direct写入失败: {e}")
            return False

    def close(self) -> None:
        """关闭写入接口和客户端"""
        try:
            if self._write_api is not None:
                self._write_api.close()
            if self._client is not None:
                self._client.close()
                logger.info("InfluxDB客户端已关闭")
        except Exception as e:
            logger.error(f"关闭InfluxDB客户端失败: {e}")
        finally:
            self._write_api = None
            self._client = None
