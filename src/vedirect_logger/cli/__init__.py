"""
命令行接口模块
==============

提供遥测记录、原始字节记录和回放的命令行接口。
"""

from .commands import VEDirectCLI

__all__ = [
    "VEDirectCLI"
]
