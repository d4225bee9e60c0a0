"""
派系存储的只读查询

这些函数只读取 FactionStore 的快照，不做任何修改。
"""
from factionboard.models import (
    ActivityStatus,
    FactionStats,
    Member,
    UserManagementData,
)
from factionboard.services.faction_store import FactionStore
from factionboard.utils.formatting import percentage, round_half_up


def get_members_with_warnings(store: FactionStore) -> list[Member]:
    """有生效中警告的成员"""
    return [member for member in store.get_all_members() if member.active_warnings]


def get_top_active_members(store: FactionStore, limit: int = 10) -> list[Member]:
    """按本周在线时长排序的前 N 名成员"""
    members = sorted(store.get_all_members(), key=lambda m: m.weekly_hours, reverse=True)
    return members[:limit]


def get_members_by_status(store: FactionStore, status: ActivityStatus) -> list[Member]:
    status = ActivityStatus(status)
    return [member for member in store.get_all_members() if member.status == status]


def get_faction_stats(store: FactionStore, faction_id: int) -> FactionStats:
    """
    派系统计

    Args:
        store: 派系存储
        faction_id: 派系ID

    Returns:
        FactionStats，派系不存在或没有成员时各项为 0
    """
    members = store.get_members_by_faction(faction_id)
    online = sum(1 for m in members if m.is_online)
    total_hours = sum(m.total_hours for m in members)

    return FactionStats(
        total_members=len(members),
        online_members=online,
        online_percentage=percentage(online, len(members)),
        total_hours=total_hours,
        average_hours=round_half_up(total_hours / len(members)) if members else 0,
        total_warnings=sum(len(m.active_warnings) for m in members),
    )


def load_user_management_data(store: FactionStore) -> UserManagementData:
    """用户管理页面的数据：带派系名的成员、用户和全局统计"""
    return UserManagementData(
        members=store.get_members_with_faction_names(),
        users=store.get_all_users(),
        stats=store.get_global_stats(),
    )
