"""
账号在线时长统计服务

管理保存的账号、账号当前状态和会话记录，三个集合分别以 JSON
保存在键值存储中。每次读取都会重新解析整个集合（不缓存），
数据损坏时记录错误并当作空集合处理。

会话状态机（每个账号）：
    无会话 --start_session--> 进行中
    进行中 --start_session--> 先结束旧会话，再开始新会话
    进行中 --end_session----> 无会话（记录 end_time 和 duration）
    无会话 --end_session----> 返回 False
"""
from datetime import datetime, timedelta, UTC
from typing import Any, Callable, Optional

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from factionboard.config.settings import settings
from factionboard.database.kv_storage import KeyValueStorage
from factionboard.models import (
    AccountDataExport,
    AccountSession,
    AccountStatus,
    ActivityStatus,
    ImportResult,
    Member,
    PlayTimeStats,
    SavedAccount,
    StorageStats,
)
from factionboard.utils.ids import generate_account_id

_accounts_adapter = TypeAdapter(list[SavedAccount])
_statuses_adapter = TypeAdapter(list[AccountStatus])
_sessions_adapter = TypeAdapter(list[AccountSession])


def _duration_ms(start: datetime, end: datetime) -> int:
    return int((end - start) / timedelta(milliseconds=1))


class AccountStorageService:
    """账号、状态与会话的存储和统计"""

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Args:
            storage: 键值存储，默认使用应用数据库
            clock: 返回当前时间的函数，默认 datetime.now(UTC)
        """
        self.storage = storage or KeyValueStorage()
        self._clock = clock or (lambda: datetime.now(UTC))

        self.accounts_key = settings.accounts_storage_key
        self.statuses_key = settings.statuses_storage_key
        self.sessions_key = settings.sessions_storage_key

    # === 账号管理 ===

    def get_all_accounts(self) -> list[SavedAccount]:
        return self._load(self.accounts_key, _accounts_adapter, "账号")

    def save_account(
        self,
        name: str,
        password: str = "",
        faction: Optional[str] = None,
        rank: Optional[str] = None,
        status: ActivityStatus = ActivityStatus.OFFLINE,
        notes: Optional[str] = None,
    ) -> Optional[SavedAccount]:
        """
        保存新账号

        Returns:
            新账号；同名账号（不区分大小写）已存在时返回 None
        """
        if self.find_account_by_name(name):
            logger.warning(f"账号已存在: {name}")
            return None

        accounts = self.get_all_accounts()
        account = SavedAccount(
            id=generate_account_id(),
            name=name,
            password=password,
            faction=faction,
            rank=rank,
            status=status,
            notes=notes,
            last_updated=self._clock(),
            is_active=True,
        )
        accounts.append(account)
        self._save(self.accounts_key, _accounts_adapter, accounts)

        logger.info(f"账号已保存: {account.name} ({account.id})")
        return account

    def update_account(self, account_id: str, updates: dict[str, Any]) -> bool:
        """浅合并账号字段并刷新 last_updated，字段无效时抛出 ValidationError 且不写入"""
        accounts = self.get_all_accounts()
        account = next((a for a in accounts if a.id == account_id), None)
        if not account:
            return False

        changes = {
            field: value
            for field, value in updates.items()
            if field != "id" and field in SavedAccount.model_fields
        }
        validated = SavedAccount.model_validate({**account.model_dump(), **changes})
        for field in changes:
            setattr(account, field, getattr(validated, field))
        account.last_updated = self._clock()

        self._save(self.accounts_key, _accounts_adapter, accounts)
        return True

    def delete_account(self, account_id: str) -> bool:
        """删除账号，同时删除它的状态和会话"""
        accounts = self.get_all_accounts()
        remaining = [a for a in accounts if a.id != account_id]
        if len(remaining) == len(accounts):
            return False

        self._save(self.accounts_key, _accounts_adapter, remaining)
        self._delete_account_statuses(account_id)
        self._delete_account_sessions(account_id)

        logger.info(f"账号已删除: {account_id}")
        return True

    def find_account_by_name(self, name: str) -> Optional[SavedAccount]:
        """按名称查找账号（不区分大小写）"""
        lower_name = name.lower()
        return next(
            (a for a in self.get_all_accounts() if a.name.lower() == lower_name),
            None,
        )

    def import_from_faction_members(self, members: list[Member], faction_name: str) -> int:
        """
        从派系成员导入账号

        不存在的账号会被创建，已存在的账号更新派系、职级、状态和备注。

        Returns:
            新创建的账号数
        """
        imported = 0
        for member in members:
            existing = self.find_account_by_name(member.name)
            if not existing:
                self.save_account(
                    name=member.name,
                    password=member.password,
                    faction=faction_name,
                    rank=member.rank,
                    status=member.status,
                    notes=member.notes,
                )
                imported += 1
            else:
                self.update_account(existing.id, {
                    "faction": faction_name,
                    "rank": member.rank,
                    "status": member.status,
                    "notes": member.notes,
                })

        logger.info(f"从派系 {faction_name} 导入账号: 新建 {imported} 个, 共 {len(members)} 名成员")
        return imported

    # === 状态管理 ===

    def get_all_statuses(self) -> list[AccountStatus]:
        return self._load(self.statuses_key, _statuses_adapter, "状态")

    def update_account_status(
        self,
        account_id: str,
        status: ActivityStatus,
        location: Optional[str] = None
    ):
        """更新账号状态（每个账号只保留一条），并同步到账号记录"""
        statuses = self.get_all_statuses()
        new_status = AccountStatus(
            account_id=account_id,
            status=status,
            last_seen=self._clock(),
            location=location,
        )

        index = next((i for i, s in enumerate(statuses) if s.account_id == account_id), None)
        if index is not None:
            statuses[index] = new_status
        else:
            statuses.append(new_status)

        self._save(self.statuses_key, _statuses_adapter, statuses)
        self.update_account(account_id, {"status": status})

    def get_account_status(self, account_id: str) -> Optional[AccountStatus]:
        return next((s for s in self.get_all_statuses() if s.account_id == account_id), None)

    def get_online_accounts(self) -> list[AccountStatus]:
        return [s for s in self.get_all_statuses() if s.status == ActivityStatus.ONLINE]

    def _delete_account_statuses(self, account_id: str):
        statuses = [s for s in self.get_all_statuses() if s.account_id != account_id]
        self._save(self.statuses_key, _statuses_adapter, statuses)

    # === 会话管理 ===

    def get_all_sessions(self) -> list[AccountSession]:
        return self._load(self.sessions_key, _sessions_adapter, "会话")

    def get_active_session(self, account_id: str) -> Optional[AccountSession]:
        """账号当前进行中的会话"""
        return next(
            (s for s in self.get_all_sessions() if s.account_id == account_id and s.is_open),
            None,
        )

    def start_session(
        self,
        account_id: str,
        status: ActivityStatus = ActivityStatus.ONLINE
    ) -> AccountSession:
        """开始新会话，已有进行中的会话时先结束它"""
        if self.get_active_session(account_id):
            self.end_session(account_id)

        sessions = self.get_all_sessions()
        session = AccountSession(
            account_id=account_id,
            start_time=self._clock(),
            status=status,
        )
        sessions.append(session)
        self._save(self.sessions_key, _sessions_adapter, sessions)

        self.update_account_status(account_id, status)

        logger.debug(f"会话开始: account_id={account_id}, status={session.status.value}")
        return session

    def end_session(self, account_id: str) -> bool:
        """结束进行中的会话并把状态设为 offline，没有进行中的会话时返回 False"""
        sessions = self.get_all_sessions()
        session = next((s for s in sessions if s.account_id == account_id and s.is_open), None)
        if not session:
            return False

        end_time = self._clock()
        session.end_time = end_time
        session.duration = _duration_ms(session.start_time, end_time)
        self._save(self.sessions_key, _sessions_adapter, sessions)

        self.update_account_status(account_id, ActivityStatus.OFFLINE)

        logger.debug(f"会话结束: account_id={account_id}, duration={session.duration}ms")
        return True

    def get_account_sessions(
        self,
        account_id: str,
        limit: Optional[int] = None
    ) -> list[AccountSession]:
        """账号的会话，按开始时间倒序"""
        sessions = sorted(
            (s for s in self.get_all_sessions() if s.account_id == account_id),
            key=lambda s: s.start_time,
            reverse=True,
        )
        if limit is None:
            limit = settings.session_history_limit
        return sessions[:limit]

    def get_play_time_stats(self, account_id: str, days: Optional[int] = None) -> PlayTimeStats:
        """
        统计时间窗口内的在线时长

        只统计已结束且 start_time 在 [now - days, now] 内的会话。
        跨越午夜的会话整体计入开始的那一天。

        Args:
            account_id: 账号ID
            days: 回溯天数，默认 settings.playtime_default_days

        Returns:
            PlayTimeStats（时长单位为毫秒）
        """
        if days is None:
            days = settings.playtime_default_days

        now = self._clock()
        cutoff = now - timedelta(days=days)

        sessions = [
            s for s in self.get_all_sessions()
            if s.account_id == account_id
            and s.duration is not None
            and cutoff <= s.start_time <= now
        ]

        total_time = sum(s.duration for s in sessions)
        time_by_day: dict[str, int] = {}
        for session in sessions:
            day = session.start_time.astimezone(UTC).date().isoformat()
            time_by_day[day] = time_by_day.get(day, 0) + session.duration

        return PlayTimeStats(
            total_time=total_time,
            average_session=total_time / len(sessions) if sessions else 0,
            sessions_count=len(sessions),
            time_by_day=time_by_day,
        )

    def _delete_account_sessions(self, account_id: str):
        sessions = [s for s in self.get_all_sessions() if s.account_id != account_id]
        self._save(self.sessions_key, _sessions_adapter, sessions)

    # === 工具 ===

    def export_data(self) -> AccountDataExport:
        """导出全部数据"""
        return AccountDataExport(
            accounts=self.get_all_accounts(),
            statuses=self.get_all_statuses(),
            sessions=self.get_all_sessions(),
            export_date=self._clock(),
        )

    def export_json(self) -> str:
        return self.export_data().model_dump_json(indent=2)

    def import_data(self, data: AccountDataExport | dict | str) -> ImportResult:
        """
        导入数据，提供的集合会整体替换现有集合

        Args:
            data: AccountDataExport、字典或 JSON 字符串

        Returns:
            ImportResult（导入条数和错误信息）
        """
        result = ImportResult()
        try:
            if isinstance(data, str):
                data = AccountDataExport.model_validate_json(data)
            elif isinstance(data, dict):
                data = AccountDataExport.model_validate(data)
        except ValidationError as e:
            logger.error(f"导入数据格式错误: {e}")
            result.errors.append(str(e))
            return result

        if data.accounts is not None:
            self._save(self.accounts_key, _accounts_adapter, data.accounts)
            result.imported += len(data.accounts)

        if data.statuses is not None:
            self._save(self.statuses_key, _statuses_adapter, data.statuses)
            result.imported += len(data.statuses)

        if data.sessions is not None:
            self._save(self.sessions_key, _sessions_adapter, data.sessions)
            result.imported += len(data.sessions)

        logger.info(f"数据导入完成: {result.imported} 条")
        return result

    def clear_all_data(self):
        """清空全部数据"""
        self.storage.remove_item(self.accounts_key)
        self.storage.remove_item(self.statuses_key)
        self.storage.remove_item(self.sessions_key)
        logger.warning("账号统计数据已清空")

    def get_storage_stats(self) -> StorageStats:
        accounts = self.get_all_accounts()
        statuses = self.get_all_statuses()
        sessions = self.get_all_sessions()

        storage_size = sum(
            len(self.storage.get_item(key) or "")
            for key in (self.accounts_key, self.statuses_key, self.sessions_key)
        )

        return StorageStats(
            total_accounts=len(accounts),
            active_accounts=sum(1 for a in accounts if a.is_active),
            online_accounts=sum(1 for s in statuses if s.status == ActivityStatus.ONLINE),
            total_sessions=len(sessions),
            active_sessions=sum(1 for s in sessions if s.is_open),
            storage_size=storage_size,
        )

    # === 私有方法 ===

    def _load(self, key: str, adapter: TypeAdapter, label: str) -> list:
        stored = self.storage.get_item(key)
        if not stored:
            return []

        try:
            return adapter.validate_json(stored)
        except ValidationError as e:
            logger.error(f"加载{label}失败: {e}")
            return []

    def _save(self, key: str, adapter: TypeAdapter, items: list):
        self.storage.set_item(key, adapter.dump_json(items, exclude_none=True).decode("utf-8"))
