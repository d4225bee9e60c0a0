from datetime import datetime, UTC
from typing import Optional
from sqlmodel import Field, SQLModel


class User(SQLModel):
    """系统用户（操作员），与游戏内成员相互独立"""

    id: int = 0  # 为 0 时由存储层分配
    username: str
    name: str = ""

    # 角色与权限（角色是普通字符串: super_admin, admin, moderator, viewer, observer ...）
    role: str = "user"
    permissions: list[str] = Field(default_factory=list)

    is_blocked: bool = False

    # 关联派系（可选）
    faction_id: Optional[int] = None

    # 时间戳
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_login: Optional[datetime] = None
    last_activity: Optional[datetime] = None
