#!/usr/bin/env python3
"""
VE.Direct 遥测记录工具 - 主程序入口
==================================

使用方法：
    python main.py run --port /dev/ttyUSB0     # 读取串口并上传到 InfluxDB
    python main.py record --port /dev/ttyUSB0  # 记录原始字节
    python main.py replay <记录文件>            # 回放记录文件
    python main.py --help                      # 显示帮助信息
"""

import sys
from pathlib import Path

# 添加src路径到Python路径
sys.path.insert(0, str(Path(__file__).parent / "src"))

from vedirect_logger.__main__ import main


if __name__ == "__main__":
    main()
