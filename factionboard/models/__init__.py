from factionboard.models.faction import (
    ActivityStatus,
    WarningType,
    MemberWarning,
    Member,
    MemberWithFaction,
    Faction,
)
from factionboard.models.user import User
from factionboard.models.activity_log import ActivityLog, ActivityAction, get_action_label
from factionboard.models.stats import GlobalStats, FactionStats, StoreSnapshot, UserManagementData
from factionboard.models.account import (
    SavedAccount,
    AccountStatus,
    AccountSession,
    PlayTimeStats,
    StorageStats,
    AccountDataExport,
    ImportResult,
)
from factionboard.models.storage_entry import StorageEntry

__all__ = [
    "ActivityStatus",
    "WarningType",
    "MemberWarning",
    "Member",
    "MemberWithFaction",
    "Faction",
    "User",
    "ActivityLog",
    "ActivityAction",
    "get_action_label",
    "GlobalStats",
    "FactionStats",
    "StoreSnapshot",
    "UserManagementData",
    # 账号统计模型
    "SavedAccount",
    "AccountStatus",
    "AccountSession",
    "PlayTimeStats",
    "StorageStats",
    "AccountDataExport",
    "ImportResult",
    # 键值存储表
    "StorageEntry",
]
