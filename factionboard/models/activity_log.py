"""
活动日志模型

action 字段是开放的字符串，存储层不做任何校验。
ActivityAction 只列出已知的动作，额外的动作可以通过
settings.extra_activity_actions 配置显示名称。
"""

from datetime import datetime, UTC
from enum import Enum
from pydantic import field_validator
from sqlmodel import Field, SQLModel

from factionboard.config.settings import settings
from factionboard.models.faction import as_utc


class ActivityAction(str, Enum):
    """已知的活动动作"""
    LOGIN = "login"
    LOGOUT = "logout"
    REGISTER = "register"
    STATUS_CHANGE = "status_change"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    WARNING_ISSUED = "warning_issued"
    WARNING_REVOKED = "warning_revoked"
    FACTION_CREATED = "faction_created"
    FACTION_REMOVED = "faction_removed"
    PERMISSIONS_CHANGED = "permissions_changed"


ACTION_LABELS: dict[str, str] = {
    ActivityAction.LOGIN.value: "Вход в систему",
    ActivityAction.LOGOUT.value: "Выход из системы",
    ActivityAction.REGISTER.value: "Регистрация",
    ActivityAction.STATUS_CHANGE.value: "Смена статуса",
    ActivityAction.MEMBER_ADDED.value: "Добавление участника",
    ActivityAction.MEMBER_REMOVED.value: "Удаление участника",
    ActivityAction.WARNING_ISSUED.value: "Выдача предупреждения",
    ActivityAction.WARNING_REVOKED.value: "Снятие предупреждения",
    ActivityAction.FACTION_CREATED.value: "Создание фракции",
    ActivityAction.FACTION_REMOVED.value: "Удаление фракции",
    ActivityAction.PERMISSIONS_CHANGED.value: "Изменение прав",
}


def get_action_label(action: str) -> str:
    """
    获取动作的显示名称

    Args:
        action: 动作字符串（已知或自定义）

    Returns:
        显示名称，未知动作原样返回
    """
    if isinstance(action, ActivityAction):
        action = action.value

    extra = settings.extra_activity_action_labels
    if action in extra:
        return extra[action]
    return ACTION_LABELS.get(action, action)


class ActivityLog(SQLModel):
    """活动日志条目（只追加）"""

    user_id: int
    action: str
    details: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def label(self) -> str:
        return get_action_label(self.action)
