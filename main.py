from loguru import logger

from factionboard.database.connection import create_db_and_tables
from factionboard.models import ActivityAction, ActivityLog
from factionboard.services.account_storage_service import AccountStorageService
from factionboard.services.faction_store import FactionStore
from factionboard.services.mock_data import SUPER_ADMIN_ID, build_mock_factions, build_mock_users
from factionboard.services.query_helpers import get_faction_stats, get_top_active_members
from factionboard.utils.formatting import format_duration, format_time_ago, get_status_text
from factionboard.utils.logging import setup_logging


def main():
    """初始化数据库和派系存储，输出当前统计"""
    setup_logging()

    logger.info("正在初始化数据库...")
    create_db_and_tables()
    logger.info("数据库初始化完成!")

    store = FactionStore()
    store.subscribe(lambda: logger.debug("派系数据已更新"))
    store.init(build_mock_factions(), build_mock_users())
    store.add_activity_log(ActivityLog(
        user_id=SUPER_ADMIN_ID,
        action=ActivityAction.LOGIN.value,
        details="Запуск панели",
    ))

    stats = store.get_global_stats()
    logger.info(
        f"成员: {stats.total_members} (在线 {stats.online_members}, "
        f"AFK {stats.afk_members}, 离线 {stats.offline_members}), "
        f"在线率 {stats.online_percentage}%, 生效警告 {stats.total_warnings}"
    )

    for faction in store.get_all_factions():
        faction_stats = get_faction_stats(store, faction.id)
        logger.info(
            f"派系 {faction.name}: {faction.online_members}/{faction.total_members} 在线, "
            f"平均 {faction_stats.average_hours} 小时"
        )

    for rank, member in enumerate(get_top_active_members(store, limit=3), start=1):
        logger.info(
            f"本周活跃 #{rank}: {member.name} ({member.weekly_hours} 小时, "
            f"{get_status_text(member.status)})"
        )

    for entry in store.get_activity_logs(limit=5):
        logger.info(f"活动: {entry.label} - {entry.details} ({format_time_ago(entry.timestamp)})")

    # 账号在线时长统计
    account_service = AccountStorageService()
    storage_stats = account_service.get_storage_stats()
    logger.info(
        f"账号: {storage_stats.total_accounts} (在线 {storage_stats.online_accounts}), "
        f"会话: {storage_stats.total_sessions} (进行中 {storage_stats.active_sessions})"
    )
    for account in account_service.get_all_accounts():
        playtime = account_service.get_play_time_stats(account.id)
        logger.info(
            f"账号 {account.name}: {playtime.sessions_count} 个会话, "
            f"总时长 {format_duration(playtime.total_time)}"
        )


if __name__ == "__main__":
    main()
