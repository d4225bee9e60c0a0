from datetime import datetime, UTC
from sqlmodel import Field, SQLModel

from factionboard.models.faction import Faction, Member, MemberWithFaction
from factionboard.models.user import User


class GlobalStats(SQLModel):
    """全局统计（每次按需计算，不缓存）"""

    total_members: int = 0
    online_members: int = 0
    afk_members: int = 0
    offline_members: int = 0
    online_percentage: int = 0
    total_warnings: int = 0  # 生效中的警告
    active_users: int = 0  # 未封禁的用户
    total_users: int = 0


class FactionStats(SQLModel):
    """单个派系的统计"""

    total_members: int = 0
    online_members: int = 0
    online_percentage: int = 0
    total_hours: float = 0
    average_hours: int = 0
    total_warnings: int = 0


class StoreSnapshot(SQLModel):
    """存储导出快照"""

    members: list[Member] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    factions: list[Faction] = Field(default_factory=list)
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())


class UserManagementData(SQLModel):
    """用户管理页面需要的数据"""

    members: list[MemberWithFaction] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    stats: GlobalStats = Field(default_factory=GlobalStats)
