"""
记录映射模块
============

从遥测记录中挑选已知的数值字段和标签字段，并把数值字符串转换为浮点数。
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from ..config.constants import (
    MEASUREMENT_NAME,
    NUMERIC_FIELDS,
    TAG_FIELDS,
    UNKNOWN_TAG_VALUE,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PointData:
    """一个待写入时序数据库的数据点"""

    measurement: str = MEASUREMENT_NAME
    fields: Dict[str, float] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)


def parse_number(value: Optional[str]) -> Optional[float]:
    """
    把字段值转换为浮点数

    Args:
        value: 字段原始字符串

    Returns:
        有限浮点数；缺失、非数值或非有限值返回None

    Examples:
        >>> parse_number("12800")
        12800.0
        >>> parse_number("ON") is None
        True
    """
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def map_record(
    record: Mapping[str, str],
    numeric_fields: Mapping[str, str] = NUMERIC_FIELDS,
    tag_fields: Mapping[str, str] = TAG_FIELDS,
) -> Optional[PointData]:
    """
    将遥测记录映射为数据点

    缺失或无法转换的数值字段被跳过，缺失的标签取值为 ``unknown``。

    Args:
        record: 解析得到的遥测记录
        numeric_fields: VE.Direct键 -> 字段名
        tag_fields: VE.Direct键 -> 标签名

    Returns:
        数据点；没有任何可用数值字段时返回None
    """
    point = PointData()

    for key, name in numeric_fields.items():
        number = parse_number(record.get(key))
        if number is None:
            if key in record:
                logger.debug(f"字段 {key} 不是数值: {record[key]!r}")
            continue
        point.fields[name] = number

    for key, name in tag_fields.items():
        point.tags[name] = record.get(key) or UNKNOWN_TAG_VALUE

    if not point.fields:
        return None
    return point
