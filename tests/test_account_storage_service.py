"""Tests for account, status and session tracking."""

from datetime import datetime, timedelta, UTC

import pytest
from pydantic import ValidationError
from conftest import make_member

from factionboard.config.settings import settings
from factionboard.models import AccountDataExport, AccountSession, ActivityStatus


def closed_session(account_id: str, start: datetime, minutes: int) -> AccountSession:
    return AccountSession(
        account_id=account_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        duration=minutes * 60_000,
    )


class TestAccounts:
    """Tests for account CRUD."""

    def test_save_account(self, service, clock):
        account = service.save_account(name="Джон Смит", password="secret", faction="Полиция ЛС")

        assert account.id
        assert account.is_active
        assert account.last_updated == clock.now
        assert [a.name for a in service.get_all_accounts()] == ["Джон Смит"]

    def test_account_ids_unique(self, service):
        ids = {service.save_account(name=f"acc{i}").id for i in range(5)}
        assert len(ids) == 5

    def test_duplicate_name_rejected_case_insensitive(self, service):
        service.save_account(name="Tony")

        assert service.save_account(name="tONY") is None
        assert len(service.get_all_accounts()) == 1

    def test_find_account_by_name(self, service):
        saved = service.save_account(name="Tony")

        assert service.find_account_by_name("TONY").id == saved.id
        assert service.find_account_by_name("nobody") is None

    def test_update_account(self, service, clock):
        account = service.save_account(name="Tony")
        clock.advance(hours=1)

        assert service.update_account(account.id, {"rank": "Капо", "id": "other"})

        loaded = service.find_account_by_name("Tony")
        assert loaded.id == account.id
        assert loaded.rank == "Капо"
        assert loaded.last_updated == clock.now

    def test_invalid_update_is_not_written(self, service):
        account = service.save_account(name="Tony", rank="Солдат")

        with pytest.raises(ValidationError):
            service.update_account(account.id, {"rank": "Капо", "status": "bogus"})

        loaded = service.find_account_by_name("Tony")
        assert loaded.rank == "Солдат"
        assert loaded.last_updated == account.last_updated

    def test_update_missing_account(self, service):
        assert service.update_account("missing", {"rank": "x"}) is False

    def test_delete_account_cascades(self, service):
        keep = service.save_account(name="keep")
        doomed = service.save_account(name="doomed")
        for account in (keep, doomed):
            service.start_session(account.id)
            service.end_session(account.id)
        service.start_session(doomed.id)

        assert service.delete_account(doomed.id)

        assert [a.id for a in service.get_all_accounts()] == [keep.id]
        assert [s.account_id for s in service.get_all_statuses()] == [keep.id]
        assert {s.account_id for s in service.get_all_sessions()} == {keep.id}

    def test_delete_missing_account(self, service):
        assert service.delete_account("missing") is False

    def test_import_from_faction_members(self, service):
        service.save_account(name="Сара Коннор", rank="Рядовой")
        members = [
            make_member("Джон Смит", ActivityStatus.ONLINE, rank="Шериф"),
            make_member("сара коннор", ActivityStatus.AFK, rank="Сержант", notes="повышена"),
        ]

        created = service.import_from_faction_members(members, "Полиция ЛС")

        assert created == 1
        john = service.find_account_by_name("Джон Смит")
        assert john.faction == "Полиция ЛС"
        assert john.status == ActivityStatus.ONLINE
        sara = service.find_account_by_name("Сара Коннор")
        assert sara.rank == "Сержант"
        assert sara.notes == "повышена"
        assert sara.status == ActivityStatus.AFK


class TestStatuses:
    """Tests for per-account current status."""

    def test_status_upserted(self, service, clock):
        account = service.save_account(name="Tony")

        service.update_account_status(account.id, ActivityStatus.ONLINE, location="Los Santos")
        clock.advance(minutes=10)
        service.update_account_status(account.id, ActivityStatus.AFK)

        statuses = service.get_all_statuses()
        assert len(statuses) == 1
        assert statuses[0].status == ActivityStatus.AFK
        assert statuses[0].last_seen == clock.now
        assert statuses[0].location is None

    def test_status_mirrored_on_account(self, service):
        account = service.save_account(name="Tony")
        service.update_account_status(account.id, ActivityStatus.ONLINE)

        assert service.find_account_by_name("Tony").status == ActivityStatus.ONLINE
        assert service.get_account_status(account.id).status == ActivityStatus.ONLINE

    def test_online_accounts(self, service):
        a = service.save_account(name="a")
        b = service.save_account(name="b")
        service.update_account_status(a.id, ActivityStatus.ONLINE)
        service.update_account_status(b.id, ActivityStatus.OFFLINE)

        assert [s.account_id for s in service.get_online_accounts()] == [a.id]


class TestSessions:
    """Tests for the per-account session state machine."""

    def test_start_and_end_session(self, service, clock):
        account = service.save_account(name="Tony")

        session = service.start_session(account.id)
        assert session.is_open
        assert service.get_account_status(account.id).status == ActivityStatus.ONLINE

        clock.advance(minutes=90)
        assert service.end_session(account.id)

        stored = service.get_all_sessions()[0]
        assert stored.end_time == clock.now
        assert stored.duration == 90 * 60_000
        assert service.get_account_status(account.id).status == ActivityStatus.OFFLINE
        assert service.get_active_session(account.id) is None

    def test_end_without_open_session(self, service):
        assert service.end_session("nobody") is False

    def test_double_end_returns_false(self, service):
        service.start_session("acc")
        assert service.end_session("acc") is True
        assert service.end_session("acc") is False
        assert len(service.get_all_sessions()) == 1

    def test_double_start_closes_previous(self, service):
        """Starting twice yields one closed session followed by one open session."""
        service.start_session("A", ActivityStatus.ONLINE)
        service.start_session("A", ActivityStatus.ONLINE)

        sessions = [s for s in service.get_all_sessions() if s.account_id == "A"]
        assert len(sessions) == 2
        assert sessions[0].end_time is not None
        assert sessions[0].duration >= 0
        assert sessions[1].is_open

    def test_at_most_one_open_session(self, service, clock):
        for _ in range(4):
            service.start_session("A")
            clock.advance(minutes=3)
            open_sessions = [s for s in service.get_all_sessions() if s.account_id == "A" and s.is_open]
            assert len(open_sessions) == 1

    def test_sessions_per_account_are_independent(self, service):
        service.start_session("A")
        service.start_session("B")

        assert service.get_active_session("A") is not None
        assert service.get_active_session("B") is not None

    def test_start_session_with_afk_status(self, service):
        session = service.start_session("A", "afk")

        assert session.status == ActivityStatus.AFK
        assert service.get_account_status("A").status == ActivityStatus.AFK

    def test_account_sessions_newest_first_with_limit(self, service, clock):
        for _ in range(3):
            service.start_session("A")
            clock.advance(minutes=10)
        service.end_session("A")

        sessions = service.get_account_sessions("A", limit=2)
        assert len(sessions) == 2
        assert sessions[0].start_time > sessions[1].start_time

    def test_account_sessions_zero_limit(self, service):
        service.start_session("A")

        assert service.get_account_sessions("A", limit=0) == []
        assert len(service.get_account_sessions("A")) == 1


class TestPlayTimeStats:
    """Tests for windowed playtime statistics."""

    def test_window_boundaries(self, service, clock):
        days = 7
        now = clock.now
        service.import_data(AccountDataExport(sessions=[
            closed_session("A", now - timedelta(days=days), 10),
            closed_session("A", now - timedelta(days=days - 1), 20),
            closed_session("A", now - timedelta(days=days + 1), 40),
        ]))

        stats = service.get_play_time_stats("A", days)

        assert stats.sessions_count == 2
        assert stats.total_time == 30 * 60_000
        assert stats.average_session == 15 * 60_000

    def test_open_sessions_and_other_accounts_excluded(self, service, clock):
        service.import_data(AccountDataExport(sessions=[
            closed_session("A", clock.now - timedelta(hours=2), 30),
            closed_session("B", clock.now - timedelta(hours=2), 50),
            AccountSession(account_id="A", start_time=clock.now - timedelta(minutes=5)),
        ]))

        stats = service.get_play_time_stats("A", 1)

        assert stats.sessions_count == 1
        assert stats.total_time == 30 * 60_000

    def test_zero_length_session_counted(self, service):
        service.start_session("A")
        service.end_session("A")

        stats = service.get_play_time_stats("A", 1)
        assert stats.sessions_count == 1
        assert stats.total_time == 0

    def test_no_sessions(self, service):
        stats = service.get_play_time_stats("A")

        assert stats.total_time == 0
        assert stats.average_session == 0
        assert stats.sessions_count == 0
        assert stats.time_by_day == {}

    def test_time_by_day_uses_start_day(self, service, clock):
        """A session crossing midnight is attributed to its start day only."""
        late = datetime(2024, 9, 13, 23, 30, tzinfo=UTC)
        service.import_data(AccountDataExport(sessions=[
            closed_session("A", late, 120),
            closed_session("A", datetime(2024, 9, 14, 10, 0, tzinfo=UTC), 30),
            closed_session("A", datetime(2024, 9, 14, 18, 0, tzinfo=UTC), 15),
        ]))

        stats = service.get_play_time_stats("A", 7)

        assert stats.time_by_day == {
            "2024-09-13": 120 * 60_000,
            "2024-09-14": 45 * 60_000,
        }

    def test_default_window_from_settings(self, service, clock):
        service.import_data(AccountDataExport(sessions=[
            closed_session("A", clock.now - timedelta(days=settings.playtime_default_days + 1), 10),
        ]))

        assert service.get_play_time_stats("A").sessions_count == 0


class TestPersistence:
    """Tests for the persisted JSON collections."""

    def test_data_survives_new_service_instance(self, service, kv_storage, clock):
        from factionboard.services.account_storage_service import AccountStorageService

        account = service.save_account(name="Tony")
        service.start_session(account.id)

        reloaded = AccountStorageService(storage=kv_storage, clock=clock)
        assert reloaded.find_account_by_name("tony").id == account.id
        session = reloaded.get_active_session(account.id)
        assert session.start_time == clock.now
        assert session.start_time.tzinfo is not None

    @pytest.mark.parametrize("key, reader", [
        (settings.accounts_storage_key, "get_all_accounts"),
        (settings.statuses_storage_key, "get_all_statuses"),
        (settings.sessions_storage_key, "get_all_sessions"),
    ])
    def test_corrupted_collection_reads_as_empty(self, service, kv_storage, key, reader):
        kv_storage.set_item(key, "{not valid json")

        assert getattr(service, reader)() == []

    def test_corrupted_sessions_do_not_break_start(self, service, kv_storage):
        kv_storage.set_item(settings.sessions_storage_key, "[{\"account_id\": 1}]")

        service.start_session("A")

        assert len(service.get_all_sessions()) == 1

    def test_storage_stats(self, service):
        a = service.save_account(name="a")
        b = service.save_account(name="b")
        service.update_account(b.id, {"is_active": False})
        service.start_session(a.id)
        service.start_session(b.id)
        service.end_session(b.id)

        stats = service.get_storage_stats()

        assert stats.total_accounts == 2
        assert stats.active_accounts == 1
        assert stats.online_accounts == 1
        assert stats.total_sessions == 2
        assert stats.active_sessions == 1
        assert stats.storage_size > 0

    def test_export_then_import_into_empty_storage(self, service, clock):
        account = service.save_account(name="Tony")
        service.start_session(account.id)
        clock.advance(minutes=30)
        service.end_session(account.id)
        exported = service.export_json()

        service.clear_all_data()
        assert service.get_storage_stats().storage_size == 0

        result = service.import_data(exported)

        assert result.errors == []
        assert result.imported == 3
        assert service.get_play_time_stats(account.id).total_time == 30 * 60_000

    def test_import_rejects_malformed_payload(self, service):
        service.save_account(name="Tony")

        result = service.import_data({"accounts": [{"name": "missing id"}]})

        assert result.imported == 0
        assert result.errors
        assert [a.name for a in service.get_all_accounts()] == ["Tony"]

    def test_partial_import_keeps_other_collections(self, service):
        service.save_account(name="Tony")

        result = service.import_data({"sessions": []})

        assert result.imported == 0
        assert len(service.get_all_accounts()) == 1
