"""多用户 Todo 列表 HTTP API"""

__version__ = "0.1.0"
