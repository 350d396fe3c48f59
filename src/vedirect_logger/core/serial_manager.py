"""
串口管理模块
============

提供VE.Direct串口的打开、关闭、读取和枚举接口。
"""

import serial
from serial.tools import list_ports
from typing import List, Optional, Dict

from ..config.constants import DEFAULT_READ_SIZE
from ..config.settings import SerialConfig
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SerialManager:
    """串口管理器"""

    def __init__(self, config: SerialConfig):
        """
        初始化串口管理器

        Args:
            config: 串口配置对象
        """
        self.config = config
        self._port: Optional[serial.Serial] = None

    @property
    def port(self) -> Optional[serial.Serial]:
        """获取串口对象"""
        return self._port

    @property
    def is_open(self) -> bool:
        """检查串口是否已打开"""
        return self._port is not None and self._port.is_open

    def open(self) -> bool:
        """
        打开串口连接

        Returns:
            成功返回True，失败返回False
        """
        try:
            if self.is_open:
                logger.warning(f"串口 {self.config.port} 已经打开")
                return True

            self._port = serial.Serial(**self.config.to_serial_kwargs())

            logger.info(f"成功打开串口 {self.config.port}，波特率 {self.config.baudrate}")
            return True

        except Exception as e:
            logger.error(f"打开串口 {self.config.port} 失败: {e}")
            self._port = None
            return False

    def close(self) -> None:
        """关闭串口连接"""
        try:
            if self._port and self._port.is_open:
                self._port.close()
                logger.info(f"已关闭串口 {self.config.port}")
        except Exception as e:
            logger.error(f"关闭串口失败: {e}")
        finally:
            self._port = None

    def read_available(self, max_size: int = DEFAULT_READ_SIZE) -> bytes:
        """
        读取当前接收缓冲区中的全部数据

        缓冲区为空时阻塞等待至少1个字节，直到串口超时。

        Args:
            max_size: 单次读取上限

        Returns:
            读取到的数据，超时返回空bytes

        Raises:
            serial.SerialException: 串口未打开或设备读取失败（如设备被拔出）
        """
        if not self.is_open:
            raise serial.SerialException(f"串口 {self.config.port} 未打开")

        try:
            waiting = self._port.in_waiting
            return self._port.read(max(1, min(waiting, max_size)))
        except serial.SerialException:
            raise
        except OSError as e:
            raise serial.SerialException(f"读取串口 {self.config.port} 失败: {e}") from e

    @staticmethod
    def list_available_ports() -> List[Dict[str, str]]:
        """
        获取系统可用的串口列表

        Returns:
            串口信息列表，每个元素包含device、description等字段
        """
        try:
            ports = []
            for port_info in list_ports.comports():
                ports.append({
                    'device': port_info.device,
                    'description': port_info.description or '未知设备',
                    'hwid': port_info.hwid or '未知硬件ID'
                })
            return ports
        except Exception as e:
            logger.error(f"获取串口列表失败: {e}")
            return []

    @staticmethod
    def print_available_ports() -> None:
        """打印系统可用的串口信息"""
        ports = SerialManager.list_available_ports()

        if not ports:
            print("没有找到可用的串口。")
            return

        print("可用的串口：")
        for port in ports:
            print(f"  {port['device']} - {port['description']} [{port['hwid']}]")
