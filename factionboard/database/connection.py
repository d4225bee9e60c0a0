from typing import Optional
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine
from factionboard.config.settings import settings


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """根据数据库URL创建引擎，内存 SQLite 共享同一个连接"""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
    )


engine = make_engine(settings.database_url, echo=settings.database_echo)


def create_db_and_tables(target: Optional[Engine] = None):
    """创建数据库表"""
    from loguru import logger

    # 导入所有表模型以确保SQLModel能创建表
    from factionboard.models.storage_entry import StorageEntry

    logger.info("开始创建数据库表...")
    SQLModel.metadata.create_all(target or engine)
    logger.info("数据库表创建完成")

