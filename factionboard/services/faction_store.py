"""
派系数据存储

内存中的派系、成员、系统用户和活动日志的唯一数据源。

规则：
    1. 成员同时存在于扁平的成员列表和所属派系的成员列表中（同一对象）
    2. 派系的 total_members / online_members 是派生字段，只在这里重新计算
    3. 每次成功的修改在完全生效后同步通知所有订阅者一次
    4. 目标不存在的修改返回 False/None，不修改也不通知
    5. 读取操作返回深拷贝，外部修改不会影响内部状态
"""
from datetime import datetime, UTC
from typing import Any, Callable, Optional

from loguru import logger

from factionboard.config.settings import settings
from factionboard.models import (
    ActivityLog,
    ActivityStatus,
    Faction,
    GlobalStats,
    Member,
    MemberWarning,
    MemberWithFaction,
    StoreSnapshot,
    User,
)
from factionboard.utils.change_notifier import ChangeNotifier, Listener
from factionboard.utils.formatting import format_last_seen, percentage
from factionboard.utils.ids import generate_warning_id, next_id

# 派系上不允许通过 update_faction 修改的字段
PROTECTED_FACTION_FIELDS = {"id", "members", "total_members", "online_members"}
# 成员上不允许通过 update_member 修改的字段
PROTECTED_MEMBER_FIELDS = {"id", "faction_id", "warnings"}

UNKNOWN_FACTION_NAME = "Неизвестная фракция"


class FactionStore:
    """可订阅的派系数据存储"""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            clock: 返回当前时间的函数，默认 datetime.now(UTC)
        """
        self._clock = clock or (lambda: datetime.now(UTC))
        self._notifier = ChangeNotifier()

        self._factions: list[Faction] = []
        self._members: list[Member] = []
        self._users: list[User] = []
        self._activity_logs: list[ActivityLog] = []

    # ---------- 初始化与订阅 ----------

    def init(self, factions: list[Faction], users: list[User]):
        """
        一次性替换全部数据

        派系内嵌的成员会被展开到扁平成员列表，并标记 faction_id；
        派系的聚合计数按成员重新计算。
        """
        new_factions = [faction.model_copy(deep=True) for faction in factions]
        new_members: list[Member] = []
        for faction in new_factions:
            for member in faction.members:
                member.faction_id = faction.id
                new_members.append(member)
            self._recount(faction)

        self._factions = new_factions
        self._members = new_members
        self._users = [user.model_copy(deep=True) for user in users]

        logger.info(
            f"存储已初始化: {len(self._factions)} 个派系, "
            f"{len(self._members)} 名成员, {len(self._users)} 个用户"
        )
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """订阅变更通知，返回取消订阅函数"""
        return self._notifier.subscribe(listener)

    def _notify(self):
        self._notifier.notify()

    # ---------- 内部查找 ----------

    def _find_faction(self, faction_id: int) -> Optional[Faction]:
        return next((f for f in self._factions if f.id == faction_id), None)

    def _find_member(self, member_id: int) -> Optional[Member]:
        return next((m for m in self._members if m.id == member_id), None)

    def _find_user(self, user_id: int) -> Optional[User]:
        return next((u for u in self._users if u.id == user_id), None)

    @staticmethod
    def _recount(faction: Faction):
        """从成员重新计算派系聚合字段"""
        faction.total_members = len(faction.members)
        faction.online_members = sum(1 for m in faction.members if m.is_online)

    # ---------- 成员 ----------

    def get_all_members(self) -> list[Member]:
        return [member.model_copy(deep=True) for member in self._members]

    def get_members_by_faction(self, faction_id: int) -> list[Member]:
        return [
            member.model_copy(deep=True)
            for member in self._members
            if member.faction_id == faction_id
        ]

    def get_member_by_id(self, member_id: int) -> Optional[Member]:
        member = self._find_member(member_id)
        return member.model_copy(deep=True) if member else None

    def add_member(self, member: Member, faction_id: int) -> Optional[Member]:
        """
        添加成员到派系

        Args:
            member: 成员数据（id 会被重新分配）
            faction_id: 派系ID

        Returns:
            新成员的拷贝，派系不存在时返回 None
        """
        faction = self._find_faction(faction_id)
        if not faction:
            logger.warning(f"添加成员失败，派系不存在: faction_id={faction_id}")
            return None

        new_member = member.model_copy(
            deep=True,
            update={
                "id": next_id(m.id for m in self._members),
                "faction_id": faction_id,
            },
        )
        self._members.append(new_member)
        faction.members.append(new_member)
        faction.total_members += 1
        if new_member.is_online:
            faction.online_members += 1

        logger.debug(f"成员已添加: id={new_member.id}, faction_id={faction_id}")
        self._notify()
        return new_member.model_copy(deep=True)

    def update_member_status(self, member_id: int, status: ActivityStatus) -> bool:
        """
        修改成员状态

        在线人数通过重新统计派系成员得到，而不是增减计数。
        """
        member = self._find_member(member_id)
        if not member:
            return False

        status = ActivityStatus(status)
        member.status = status
        member.last_seen = format_last_seen(status, self._clock())

        faction = self._find_faction(member.faction_id)
        if faction:
            faction.online_members = sum(1 for m in faction.members if m.is_online)

        self._notify()
        return True

    def update_member(self, member_id: int, updates: dict[str, Any]) -> bool:
        """
        浅合并成员字段（id、所属派系、警告不可修改）

        Raises:
            ValidationError: 任一字段无效，此时成员保持不变
        """
        member = self._find_member(member_id)
        if not member:
            return False

        changes = {
            field: value
            for field, value in updates.items()
            if field not in PROTECTED_MEMBER_FIELDS and field in Member.model_fields
        }
        validated = Member.model_validate({**member.model_dump(), **changes})
        for field in changes:
            setattr(member, field, getattr(validated, field))

        faction = self._find_faction(member.faction_id)
        if faction:
            self._recount(faction)

        self._notify()
        return True

    def remove_member(self, member_id: int) -> bool:
        member = self._find_member(member_id)
        if not member:
            return False

        self._members.remove(member)

        faction = self._find_faction(member.faction_id)
        if faction:
            faction.members = [m for m in faction.members if m.id != member_id]
            faction.total_members = max(0, faction.total_members - 1)
            if member.is_online:
                faction.online_members = max(0, faction.online_members - 1)

        logger.debug(f"成员已删除: id={member_id}")
        self._notify()
        return True

    def search_members(self, query: str) -> list[MemberWithFaction]:
        """按名字或职级搜索成员（不区分大小写）"""
        lower_query = query.lower()
        results = []
        for member in self._members:
            if lower_query in member.name.lower() or lower_query in member.rank.lower():
                results.append(self._with_faction_name(member))
        return results

    def _with_faction_name(self, member: Member) -> MemberWithFaction:
        faction = self._find_faction(member.faction_id)
        return MemberWithFaction(
            **member.model_dump(),
            faction_name=faction.name if faction else UNKNOWN_FACTION_NAME,
        )

    def get_members_with_faction_names(self) -> list[MemberWithFaction]:
        return [self._with_faction_name(member) for member in self._members]

    # ---------- 警告 ----------

    def add_warning(self, member_id: int, warning: MemberWarning) -> bool:
        """给成员添加警告，ID 和时间戳由存储层生成"""
        member = self._find_member(member_id)
        if not member:
            return False

        warning_id = generate_warning_id()
        existing_ids = {w.id for w in member.warnings}
        suffix = 1
        while warning_id in existing_ids:
            warning_id = f"{generate_warning_id()}-{suffix}"
            suffix += 1

        member.warnings.append(
            warning.model_copy(
                deep=True,
                update={"id": warning_id, "timestamp": self._clock()},
            )
        )

        logger.info(f"成员 {member_id} 收到警告: {warning.reason}")
        self._notify()
        return True

    def remove_warning(self, member_id: int, warning_id: str) -> bool:
        """撤销警告（软删除，只把 is_active 置为 False）"""
        member = self._find_member(member_id)
        if not member:
            return False

        warning = next((w for w in member.warnings if w.id == warning_id), None)
        if not warning:
            return False

        warning.is_active = False
        self._notify()
        return True

    # ---------- 系统用户 ----------

    def get_all_users(self) -> list[User]:
        return [user.model_copy(deep=True) for user in self._users]

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        user = self._find_user(user_id)
        return user.model_copy(deep=True) if user else None

    def add_user(self, user: User) -> bool:
        """添加用户，用户名已存在时返回 False（区分大小写）"""
        if any(u.username == user.username for u in self._users):
            logger.warning(f"用户名已存在: {user.username}")
            return False

        new_user = user.model_copy(deep=True)
        if not new_user.id:
            new_user.id = next_id(u.id for u in self._users)

        self._users.append(new_user)
        self._notify()
        return True

    def update_user(self, user_id: int, updates: dict[str, Any]) -> bool:
        """浅合并用户字段"""
        user = self._find_user(user_id)
        if not user:
            return False

        for field, value in updates.items():
            if field == "id" or field not in User.model_fields:
                continue
            setattr(user, field, value)

        self._notify()
        return True

    def remove_user(self, user_id: int) -> bool:
        user = self._find_user(user_id)
        if not user:
            return False

        self._users.remove(user)
        self._notify()
        return True

    # ---------- 派系 ----------

    def get_all_factions(self) -> list[Faction]:
        return [faction.model_copy(deep=True) for faction in self._factions]

    def get_faction_by_id(self, faction_id: int) -> Optional[Faction]:
        faction = self._find_faction(faction_id)
        return faction.model_copy(deep=True) if faction else None

    def add_faction(self, data: Faction) -> Faction:
        """创建派系，成员为空，聚合计数为 0"""
        faction = data.model_copy(
            deep=True,
            update={
                "id": next_id(f.id for f in self._factions),
                "members": [],
                "total_members": 0,
                "online_members": 0,
            },
        )
        self._factions.append(faction)

        logger.info(f"派系已创建: id={faction.id}, name={faction.name}")
        self._notify()
        return faction.model_copy(deep=True)

    def update_faction(self, faction_id: int, updates: dict[str, Any]) -> bool:
        """浅合并派系字段（成员和聚合计数不可直接修改）"""
        faction = self._find_faction(faction_id)
        if not faction:
            return False

        for field, value in updates.items():
            if field in PROTECTED_FACTION_FIELDS or field not in Faction.model_fields:
                continue
            setattr(faction, field, value)

        self._notify()
        return True

    def remove_faction(self, faction_id: int) -> bool:
        """删除派系及其所有成员"""
        faction = self._find_faction(faction_id)
        if not faction:
            return False

        removed = sum(1 for m in self._members if m.faction_id == faction_id)
        self._members = [m for m in self._members if m.faction_id != faction_id]
        self._factions.remove(faction)

        logger.info(f"派系已删除: id={faction_id}, 同时删除 {removed} 名成员")
        self._notify()
        return True

    # ---------- 活动日志 ----------

    def get_all_activity_logs(self) -> list[ActivityLog]:
        """全部活动日志，按时间倒序"""
        return sorted(
            (log.model_copy(deep=True) for log in self._activity_logs),
            key=lambda log: log.timestamp,
            reverse=True,
        )

    def get_activity_logs(
        self,
        user_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> list[ActivityLog]:
        """按用户过滤的最新活动日志"""
        logs = self.get_all_activity_logs()
        if user_id is not None:
            logs = [log for log in logs if log.user_id == user_id]
        if limit is None:
            limit = settings.activity_log_limit
        return logs[:limit]

    def add_activity_log(self, entry: ActivityLog):
        """追加活动日志，不校验 action"""
        self._activity_logs.append(entry.model_copy(deep=True))
        self._notify()

    def clear_activity_logs(self):
        self._activity_logs = []
        self._notify()

    # ---------- 统计与导出 ----------

    def get_global_stats(self) -> GlobalStats:
        """按当前数据计算全局统计"""
        total_members = len(self._members)
        online_members = sum(1 for m in self._members if m.status == ActivityStatus.ONLINE)
        afk_members = sum(1 for m in self._members if m.status == ActivityStatus.AFK)
        offline_members = sum(1 for m in self._members if m.status == ActivityStatus.OFFLINE)

        return GlobalStats(
            total_members=total_members,
            online_members=online_members,
            afk_members=afk_members,
            offline_members=offline_members,
            online_percentage=percentage(online_members, total_members),
            total_warnings=sum(len(m.active_warnings) for m in self._members),
            active_users=sum(1 for u in self._users if not u.is_blocked),
            total_users=len(self._users),
        )

    def export_data(self) -> StoreSnapshot:
        return StoreSnapshot(
            members=self.get_all_members(),
            users=self.get_all_users(),
            factions=self.get_all_factions(),
            timestamp=self._clock().isoformat(),
        )
