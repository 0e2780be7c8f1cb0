"""
Unit tests for the Supabase client and the local fallback store.
"""
import pytest
from unittest.mock import Mock
from datetime import date

from src.supabase_sync.supabase_client import SupabaseClient
from src.supabase_sync import supabase_client as client_module
from src.utils.errors import RemoteServiceError
from src.utils.models import BookingStatus

pytestmark = pytest.mark.unit


def test_select_applies_filters(supabase_client, mock_table):
    table = mock_table([{"id": "p1"}])

    rows = supabase_client.select("properties", {"host_id": "h1"}, order="created_at", desc=True, limit=5)

    assert rows == [{"id": "p1"}]
    table.eq.assert_called_once_with("host_id", "h1")
    table.order.assert_called_once_with("created_at", desc=True)
    table.limit.assert_called_once_with(5)


def test_select_in_filters_use_enum_values(supabase_client, mock_table):
    table = mock_table([])

    supabase_client.select("bookings", {"property_id": "p1"},
                           in_filters={"status": [BookingStatus.APPROVED, BookingStatus.PAID]})

    table.in_.assert_called_once_with("status", ["APPROVED", "PAID"])


def test_select_with_offset_uses_range(supabase_client, mock_table):
    table = mock_table([])

    supabase_client.select("properties", limit=20, offset=40)

    table.range.assert_called_once_with(40, 59)
    table.limit.assert_not_called()


def test_select_one_returns_none_when_empty(supabase_client, mock_table):
    mock_table([])
    assert supabase_client.select_one("users", {"email": "nobody@locadz.dz"}) is None


def test_insert_serializes_dates_and_enums(supabase_client, mock_table):
    table = mock_table([{"id": "b1"}])

    row = supabase_client.insert("bookings", {
        "id": "b1",
        "start_date": date(2025, 8, 1),
        "status": BookingStatus.PENDING_APPROVAL,
        "tags": [BookingStatus.PAID],
    })

    assert row == {"id": "b1"}
    payload = table.insert.call_args[0][0]
    assert payload["start_date"] == "2025-08-01"
    assert payload["status"] == "PENDING_APPROVAL"
    assert payload["tags"] == ["PAID"]


def test_insert_returns_payload_when_no_rows(supabase_client, mock_table):
    mock_table([])
    row = supabase_client.insert("messages", {"id": "m1", "content": "Salam"})
    assert row["id"] == "m1"


def test_update_and_delete(supabase_client, mock_table):
    table = mock_table([{"id": "b1", "status": "PAID"}])

    assert supabase_client.update("bookings", {"status": BookingStatus.PAID}, {"id": "b1"})[0]["status"] == "PAID"
    table.update.assert_called_once_with({"status": "PAID"})
    assert supabase_client.delete("bookings", {"id": "b1"}) == [{"id": "b1", "status": "PAID"}]


def test_count_prefers_exact_count(supabase_client, mock_table):
    mock_table([{"id": "m1"}], count=7)
    assert supabase_client.count("messages", {"receiver_id": "u1"}) == 7


def test_count_falls_back_to_rows(supabase_client, mock_table):
    mock_table([{"id": "m1"}, {"id": "m2"}])
    assert supabase_client.count("messages") == 2


def test_failure_carries_postgres_code(supabase_client):
    error = Exception("duplicate key value violates unique constraint")
    error.code = "23505"
    supabase_client.client.table.side_effect = error

    with pytest.raises(RemoteServiceError) as exc_info:
        supabase_client.insert("users", {"email": "a@locadz.dz"})

    assert exc_info.value.is_unique_violation
    assert exc_info.value.details["table"] == "users"


def test_offline_client_raises_remote_error(offline_client):
    with pytest.raises(RemoteServiceError):
        offline_client.select("properties")


def test_upload_and_public_url(supabase_client):
    bucket = Mock()
    supabase_client.client.storage.from_.return_value = bucket
    bucket.upload.return_value = Mock(path="proofs/b1/b1-1.png")
    bucket.get_public_url.return_value = "https://cdn.locadz.dz/proofs/b1/b1-1.png?"

    stored = supabase_client.upload_file("payment-proofs", "proofs/b1/b1-1.png", b"img", "image/png")

    assert stored == "proofs/b1/b1-1.png"
    bucket.upload.assert_called_once_with("proofs/b1/b1-1.png", b"img", {"content-type": "image/png"})
    assert supabase_client.public_url("payment-proofs", stored) == "https://cdn.locadz.dz/proofs/b1/b1-1.png"


def test_upload_failure(supabase_client):
    supabase_client.client.storage.from_.return_value.upload.side_effect = Exception("bucket not found")
    with pytest.raises(RemoteServiceError):
        supabase_client.upload_file("id-documents", "u1/id-1.png", b"img")


def test_initialize_missing_config(monkeypatch):
    monkeypatch.setattr(client_module.supabase_config, "url", "")
    monkeypatch.setattr(client_module.supabase_config, "anon_key", "")
    monkeypatch.setattr(client_module.supabase_config, "service_role_key", "")

    client = SupabaseClient()
    assert client.initialize() is False
    with pytest.raises(RemoteServiceError):
        client.select("users")


class TestLocalStore:
    """File-backed fallback collections."""

    def test_upsert_and_find(self, local_store):
        local_store.upsert("users", {"id": "u1", "email": "a@locadz.dz"}, key="email")
        local_store.upsert("users", {"id": "u1", "email": "a@locadz.dz", "is_verified": True}, key="email")

        assert len(local_store.all("users")) == 1
        assert local_store.find_one("users", email="a@locadz.dz")["is_verified"] is True
        assert local_store.find_one("users", email="b@locadz.dz") is None

    def test_update_and_remove(self, local_store):
        local_store.upsert("bookings", {"id": "b1", "status": "PENDING_APPROVAL"})

        assert local_store.update("bookings", "id", "b1", {"status": "APPROVED"})["status"] == "APPROVED"
        assert local_store.update("bookings", "id", "missing", {"status": "APPROVED"}) is None
        assert local_store.remove("bookings", "id", "b1") is True
        assert local_store.remove("bookings", "id", "b1") is False

    def test_persists_between_instances(self, local_store):
        local_store.upsert("messages", {"id": "m1", "content": "Salam"})
        from src.supabase_sync.local_store import LocalStore
        assert LocalStore(str(local_store.path)).find("messages", id="m1")

    def test_corrupt_file_reads_empty(self, local_store):
        local_store.path.write_text("{not json", encoding="utf-8")
        assert local_store.all("users") == []

    def test_clear(self, local_store):
        local_store.upsert("users", {"id": "u1"})
        local_store.upsert("messages", {"id": "m1"})
        local_store.clear("users")
        assert local_store.all("users") == []
        assert local_store.all("messages")
        local_store.clear()
        assert local_store.all("messages") == []
