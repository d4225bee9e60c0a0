"""
生成模拟数据用于测试在线时长统计功能
"""
import random
from datetime import datetime, timedelta, UTC
from factionboard.database.connection import create_db_and_tables
from factionboard.models import AccountDataExport, AccountSession, ActivityStatus
from factionboard.services.account_storage_service import AccountStorageService
from factionboard.services.mock_data import build_mock_factions


def generate_mock_data(days: int = 14, sessions_per_account: int = 20):
    """
    生成模拟数据

    参数:
    - days: 会话分布的天数
    - sessions_per_account: 每个账号生成的会话数量
    """
    create_db_and_tables()
    service = AccountStorageService()

    # 从演示派系导入账号
    print("\n📝 从演示派系导入账号...")
    created = 0
    for faction in build_mock_factions():
        created += service.import_from_faction_members(faction.members, faction.name)
    accounts = service.get_all_accounts()
    print(f"✅ 账号导入完成！新建 {created} 个，共 {len(accounts)} 个")

    # 生成已结束的会话
    print(f"\n🕒 为每个账号生成 {sessions_per_account} 个会话...")
    now = datetime.now(UTC)
    sessions = []
    for account in accounts:
        for _ in range(sessions_per_account):
            start_time = now - timedelta(days=random.uniform(0, days))
            duration = timedelta(minutes=random.randint(5, 240))
            end_time = min(start_time + duration, now)
            sessions.append(AccountSession(
                account_id=account.id,
                start_time=start_time,
                end_time=end_time,
                duration=int((end_time - start_time) / timedelta(milliseconds=1)),
                status=random.choice([ActivityStatus.ONLINE, ActivityStatus.AFK]),
            ))

    result = service.import_data(AccountDataExport(sessions=sessions))
    print(f"✅ 会话生成完成！导入 {result.imported} 条")

    # 统计信息
    stats = service.get_storage_stats()
    print(f"\n📊 数据统计:")
    print(f"  - 账号数: {stats.total_accounts}")
    print(f"  - 会话数: {stats.total_sessions}")
    print(f"  - 存储大小: {stats.storage_size} 字符")
    print(f"\n✅ 模拟数据生成完成！")


if __name__ == "__main__":
    import sys

    days = int(sys.argv[1]) if len(sys.argv) > 1 else 14
    sessions_per_account = int(sys.argv[2]) if len(sys.argv) > 2 else 20

    generate_mock_data(days, sessions_per_account)
