"""
校验算法模块
============

提供VE.Direct文本帧的校验算法实现。

VE.Direct 帧的最后一行为 ``Checksum\\t<X>``，其中校验字节 X 由设备选取，
使整帧（含校验字节本身）所有字节之和对256取模为0。
"""

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


def _ensure_bytes(data: BytesLike) -> None:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("输入数据必须是bytes类型")


def calculate_checksum(data: BytesLike) -> int:
    """
    计算数据的校验和

    采用逐字节累加并在每一步取低8位的算法。

    Args:
        data: 需要计算校验和的字节数据

    Returns:
        校验和值，8位无符号整数

    Raises:
        TypeError: 当输入不是bytes类型时抛出

    Examples:
        >>> calculate_checksum(b'hello')
        20
        >>> calculate_checksum(b'')
        0
    """
    _ensure_bytes(data)

    checksum = 0
    for byte in bytes(data):
        checksum = (checksum + byte) & 0xFF

    return checksum


def is_valid_frame(frame: BytesLike) -> bool:
    """
    判断帧的校验和是否为0

    Args:
        frame: 完整帧（包含校验行）

    Returns:
        校验通过返回True
    """
    return calculate_checksum(frame) == 0


def make_checksum_byte(body: BytesLike) -> int:
    """
    计算使 ``body + 校验字节`` 总和为0的校验字节

    body 通常为 ``...\\r\\nChecksum\\t``，帧末尾的 ``\\r\\n`` 会额外贡献
    0x0D + 0x0A，调用方需要自行把它们计入 body。

    Args:
        body: 校验字节之外的全部字节

    Returns:
        校验字节值 (0-255)
    """
    return (256 - calculate_checksum(body)) & 0xFF
