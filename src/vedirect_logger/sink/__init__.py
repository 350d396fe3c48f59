"""
数据输出模块
============

负责把遥测记录映射为数据点并写入 InfluxDB。
"""

from .record_mapper import PointData, map_record, parse_number
from .influx_writer import InfluxWriter, build_point

__all__ = [
    "PointData",
    "map_record",
    "parse_number",
    "InfluxWriter",
    "build_point",
]
