"""clibpm - C 包管理客户端核心"""

__version__ = "0.1.0"
