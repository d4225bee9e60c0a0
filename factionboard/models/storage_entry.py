from datetime import datetime, UTC
from sqlmodel import Field, SQLModel, Column, Text


class StorageEntry(SQLModel, table=True):
    """键值存储表，每个键保存一个完整的 JSON 集合"""

    __tablename__ = "storage_entries"

    key: str = Field(primary_key=True, max_length=100)
    value: str = Field(sa_column=Column(Text, nullable=False))

    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
