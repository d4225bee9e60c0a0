"""
账号在线时长统计模型

与派系成员/系统用户相互独立，持久化在键值存储中（JSON 序列化）。
"""

from datetime import datetime, UTC
from typing import Optional
from pydantic import field_validator
from sqlmodel import Field, SQLModel

from factionboard.models.faction import ActivityStatus, as_utc


class SavedAccount(SQLModel):
    """保存的账号"""

    id: str
    name: str
    password: str = ""
    faction: Optional[str] = None
    rank: Optional[str] = None
    status: ActivityStatus = ActivityStatus.OFFLINE
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: Optional[str] = None
    is_active: bool = True

    @field_validator("last_updated")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class AccountStatus(SQLModel):
    """账号当前状态（每个账号一条，upsert）"""

    account_id: str
    status: ActivityStatus
    last_seen: datetime = Field(default_factory=lambda: datetime.now(UTC))
    session_duration: Optional[int] = None  # 毫秒
    location: Optional[str] = None

    @field_validator("last_seen")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class AccountSession(SQLModel):
    """账号会话，end_time 为空表示会话仍在进行"""

    account_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # 毫秒
    status: ActivityStatus = ActivityStatus.ONLINE

    @field_validator("start_time", "end_time")
    @classmethod
    def ensure_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def is_open(self) -> bool:
        return self.end_time is None


class PlayTimeStats(SQLModel):
    """时间窗口内的在线时长统计"""

    total_time: int = 0  # 毫秒
    average_session: float = 0
    sessions_count: int = 0
    time_by_day: dict[str, int] = Field(default_factory=dict)  # ISO 日期 -> 毫秒


class StorageStats(SQLModel):
    """存储统计"""

    total_accounts: int = 0
    active_accounts: int = 0
    online_accounts: int = 0
    total_sessions: int = 0
    active_sessions: int = 0
    storage_size: int = 0


class AccountDataExport(SQLModel):
    """导出/导入用的完整数据"""

    accounts: Optional[list[SavedAccount]] = None
    statuses: Optional[list[AccountStatus]] = None
    sessions: Optional[list[AccountSession]] = None
    export_date: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ImportResult(SQLModel):
    """导入结果"""

    imported: int = 0
    errors: list[str] = Field(default_factory=list)
