"""显示用的格式化工具"""
import math
from datetime import datetime, UTC
from typing import Optional

from factionboard.config.settings import settings
from factionboard.models.faction import ActivityStatus

STATUS_TEXT = {
    ActivityStatus.ONLINE.value: "Онлайн",
    ActivityStatus.AFK.value: "АФК",
    ActivityStatus.OFFLINE.value: "Не в сети",
}


def get_status_text(status: ActivityStatus) -> str:
    """状态的显示名称"""
    return STATUS_TEXT[ActivityStatus(status).value]


def format_last_seen(status: ActivityStatus, now: Optional[datetime] = None) -> str:
    """
    成员的 "最后在线" 标签

    上线时返回 settings.online_label，否则返回格式化的当前时间
    """
    if ActivityStatus(status) == ActivityStatus.ONLINE:
        return settings.online_label
    now = now or datetime.now(UTC)
    return now.strftime(settings.last_seen_format)


def format_time_ago(then: datetime, now: Optional[datetime] = None) -> str:
    """把时间格式化为 "多久之前" """
    now = now or datetime.now(UTC)
    seconds = int((now - then).total_seconds())

    if seconds < 60:
        return "только что"
    if seconds < 3600:
        return f"{seconds // 60} мин назад"
    if seconds < 86400:
        return f"{seconds // 3600} ч назад"
    return f"{seconds // 86400} дн назад"


def format_duration(milliseconds: float) -> str:
    """把毫秒时长格式化为 "Xч Yм" """
    total_minutes = int(milliseconds // 60000)
    hours, minutes = divmod(total_minutes, 60)
    if hours:
        return f"{hours}ч {minutes}м"
    return f"{minutes}м"


def percentage(part: float, total: float) -> int:
    """百分比，四舍五入（.5 向上），total 为 0 时返回 0"""
    if not total:
        return 0
    return math.floor(part / total * 100 + 0.5)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
