from datetime import datetime, UTC
from enum import Enum
from typing import Optional
from pydantic import field_validator
from sqlmodel import Field, SQLModel


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """没有时区信息的时间按 UTC 处理"""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ActivityStatus(str, Enum):
    """成员活跃状态"""
    ONLINE = "online"
    AFK = "afk"
    OFFLINE = "offline"


class WarningType(str, Enum):
    """警告类型"""
    VERBAL = "verbal"  # 口头警告
    WRITTEN = "written"  # 书面警告


class MemberWarning(SQLModel):
    """成员警告（只做软删除，保留历史）"""

    id: str = ""
    type: WarningType = WarningType.VERBAL
    reason: str
    admin_id: int
    admin_name: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    is_active: bool = True

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class Member(SQLModel):
    """派系成员（游戏内角色）"""

    id: int = 0
    name: str
    rank: str = ""

    # 活跃状态
    status: ActivityStatus = ActivityStatus.OFFLINE
    last_seen: str = ""
    total_hours: float = 0
    weekly_hours: float = 0

    # 警告历史
    warnings: list[MemberWarning] = Field(default_factory=list)

    join_date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    notes: Optional[str] = None
    password: str = ""

    # 关联的系统用户
    user_id: Optional[int] = None

    # 所属派系，由存储层在加入时设置
    faction_id: Optional[int] = None

    @property
    def active_warnings(self) -> list[MemberWarning]:
        """仍然生效的警告"""
        return [warning for warning in self.warnings if warning.is_active]

    @property
    def is_online(self) -> bool:
        return self.status == ActivityStatus.ONLINE


class Faction(SQLModel):
    """派系，拥有成员名单及缓存的聚合计数"""

    id: int = 0
    name: str
    color: str = ""
    type: str = ""
    description: str = ""

    members: list[Member] = Field(default_factory=list)

    # 派生字段，只由存储层重新计算
    total_members: int = 0
    online_members: int = 0


class MemberWithFaction(Member):
    """带派系名称的成员视图"""

    faction_name: str = ""
