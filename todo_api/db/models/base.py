"""
SQLAlchemy 声明基类：所有模型继承此 Base
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """声明基类"""

    __abstract__ = True
