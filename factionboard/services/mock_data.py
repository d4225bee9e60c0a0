"""
演示数据

三个派系及其成员，加上一个超级管理员用户。
加载到 FactionStore 时聚合计数会按成员重新计算。
"""
from datetime import datetime, UTC

from factionboard.models import (
    ActivityStatus,
    Faction,
    Member,
    MemberWarning,
    User,
    WarningType,
)

SUPER_ADMIN_ID = 1
SUPER_ADMIN_NAME = "super_admin"


def _warning(warning_id: str, warning_type: WarningType, reason: str, timestamp: datetime) -> MemberWarning:
    return MemberWarning(
        id=warning_id,
        type=warning_type,
        reason=reason,
        admin_id=SUPER_ADMIN_ID,
        admin_name=SUPER_ADMIN_NAME,
        timestamp=timestamp,
    )


def build_mock_factions() -> list[Faction]:
    """演示派系"""
    return [
        Faction(
            id=1,
            name="Полиция ЛС",
            color="bg-blue-500",
            type="state",
            members=[
                Member(
                    id=1, name="Джон Смит", rank="Шериф",
                    status=ActivityStatus.ONLINE, last_seen="Сейчас",
                    total_hours=245, weekly_hours=28,
                    join_date=datetime(2024, 6, 15, tzinfo=UTC),
                    notes="Опытный лидер, отличная репутация",
                ),
                Member(
                    id=2, name="Майк Джонсон", rank="Лейтенант",
                    status=ActivityStatus.AFK, last_seen="15 мин назад",
                    total_hours=180, weekly_hours=22,
                    warnings=[
                        _warning("w1", WarningType.VERBAL, "Опоздание на службу",
                                 datetime(2024, 8, 1, tzinfo=UTC)),
                    ],
                    join_date=datetime(2024, 7, 20, tzinfo=UTC),
                ),
                Member(
                    id=3, name="Сара Коннор", rank="Сержант",
                    status=ActivityStatus.OFFLINE, last_seen="2 часа назад",
                    total_hours=156, weekly_hours=18,
                    join_date=datetime(2024, 8, 5, tzinfo=UTC),
                ),
            ],
        ),
        Faction(
            id=2,
            name="Мафия",
            color="bg-red-500",
            type="crime",
            members=[
                Member(
                    id=4, name="Винченцо Корлеоне", rank="Дон",
                    status=ActivityStatus.ONLINE, last_seen="Сейчас",
                    total_hours=320, weekly_hours=35,
                    warnings=[
                        _warning("w2", WarningType.WRITTEN, "Нарушение кодекса чести",
                                 datetime(2024, 7, 25, tzinfo=UTC)),
                    ],
                    join_date=datetime(2024, 5, 10, tzinfo=UTC),
                ),
                Member(
                    id=5, name="Тони Сопрано", rank="Капо",
                    status=ActivityStatus.ONLINE, last_seen="Сейчас",
                    total_hours=280, weekly_hours=30,
                    join_date=datetime(2024, 6, 1, tzinfo=UTC),
                ),
            ],
        ),
        Faction(
            id=3,
            name="Байкеры",
            color="bg-orange-500",
            type="gang",
            members=[
                Member(
                    id=6, name="Рэй Томпсон", rank="Президент",
                    status=ActivityStatus.AFK, last_seen="30 мин назад",
                    total_hours=190, weekly_hours=25,
                    warnings=[
                        _warning("w3", WarningType.VERBAL, "Неподобающее поведение в чате",
                                 datetime(2024, 8, 10, tzinfo=UTC)),
                        _warning("w4", WarningType.VERBAL, "Пропуск собрания",
                                 datetime(2024, 8, 20, tzinfo=UTC)),
                    ],
                    join_date=datetime(2024, 7, 15, tzinfo=UTC),
                ),
            ],
        ),
    ]


def build_mock_users() -> list[User]:
    """演示系统用户"""
    return [
        User(
            id=SUPER_ADMIN_ID,
            username=SUPER_ADMIN_NAME,
            name="Главный администратор",
            role="super_admin",
            permissions=["manage_users", "manage_factions", "manage_permissions", "view_logs"],
        ),
    ]
