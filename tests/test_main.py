"""
Unit tests for the command line tools and the local store replay.
"""
import pytest
from unittest.mock import patch
from click.testing import CliRunner

from src.main import cli, LocalSync

pytestmark = pytest.mark.unit


class TestQuoteCommand:
    def test_quote_output(self):
        result = CliRunner().invoke(cli, ['quote', '--price', '10000', '--nights', '2'])

        assert result.exit_code == 0
        assert "Base (2 nights): 20 000 DA" in result.output
        assert "Traveler pays: 21 600 DA" in result.output
        assert "Host receives: 18 000 DA" in result.output
        assert "Platform revenue: 3 600 DA" in result.output

    def test_negative_price(self):
        result = CliRunner().invoke(cli, ['quote', '--price', '-5', '--nights', '2'])
        assert result.exit_code == 2
        assert "non-negative" in result.output

    def test_missing_option(self):
        result = CliRunner().invoke(cli, ['quote', '--price', '100'])
        assert result.exit_code != 0


class TestStatsCommand:
    @patch('src.main.AdminService')
    def test_stats(self, mock_admin):
        mock_admin.return_value.platform_stats.return_value = {
            "total_volume": 27000.0, "total_commission": 4500.0, "count": 2, "bookings": [],
        }
        result = CliRunner().invoke(cli, ['stats'])

        assert result.exit_code == 0
        assert "Platform Statistics:" in result.output
        assert "Confirmed bookings: 2" in result.output
        assert "Total commission: 4 500 DA" in result.output

    @patch('src.main.AdminService')
    def test_stats_error(self, mock_admin):
        mock_admin.return_value.platform_stats.return_value = {
            "total_volume": 0.0, "total_commission": 0.0, "count": 0, "bookings": [], "error": "offline",
        }
        result = CliRunner().invoke(cli, ['stats'])

        assert result.exit_code == 1
        assert "Error: offline" in result.output


class TestLocalSync:
    @pytest.fixture
    def seeded_store(self, local_store):
        local_store.upsert("users", {"id": "u1", "email": "a@locadz.dz", "full_name": "A"}, key="email")
        local_store.upsert("bookings", {"id": "b1", "property_id": "p1", "status": "PENDING_APPROVAL"})
        return local_store

    def test_dry_run_writes_nothing(self, supabase_client, mock_table, seeded_store):
        table = mock_table([])

        stats = LocalSync(supabase_client=supabase_client, local_store=seeded_store).sync(dry_run=True)

        assert stats["records_skipped"] == 2
        assert stats["records_synced"] == 0
        table.insert.assert_not_called()
        assert len(seeded_store.all("users")) == 1

    def test_sync_inserts_and_clears(self, supabase_client, mock_table, seeded_store):
        table = mock_table([], [{"id": "u1"}], [], [{"id": "b1"}])

        stats = LocalSync(supabase_client=supabase_client, local_store=seeded_store).sync()

        assert stats["records_synced"] == 2
        assert stats["collections"] == {"users": 1, "bookings": 1}
        assert table.insert.call_count == 2
        assert seeded_store.all("users") == []
        assert seeded_store.all("bookings") == []

    def test_already_remote_is_dropped_locally(self, supabase_client, mock_table, seeded_store):
        table = mock_table([{"email": "a@locadz.dz"}], [{"id": "b1"}])

        stats = LocalSync(supabase_client=supabase_client, local_store=seeded_store).sync()

        assert stats["records_skipped"] == 2
        table.insert.assert_not_called()
        assert seeded_store.all("users") == []

    def test_failed_insert_stays_local(self, supabase_client, mock_table, seeded_store):
        table = mock_table([])
        table.insert.side_effect = Exception("violates foreign key constraint")

        stats = LocalSync(supabase_client=supabase_client, local_store=seeded_store).sync()

        assert stats["errors"] == 2
        assert len(seeded_store.all("bookings")) == 1

    def test_sync_local_command_needs_supabase(self, monkeypatch):
        monkeypatch.setattr("src.main.SupabaseClient.initialize", lambda self: False)
        result = CliRunner().invoke(cli, ['sync-local', '--dry-run'])
        assert result.exit_code == 1
        assert "Supabase is not configured" in result.output
