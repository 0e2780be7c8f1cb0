"""
Shared fixtures: a SupabaseClient whose SDK is a Mock, and a temporary local store.
"""
import pytest
from unittest.mock import Mock

from src.supabase_sync.supabase_client import SupabaseClient
from src.supabase_sync.local_store import LocalStore
from src.utils.models import UserProfile, UserRole, IdVerificationStatus

QUERY_METHODS = ("select", "eq", "in_", "or_", "order", "limit", "range", "insert", "update", "delete", "upsert")


@pytest.fixture
def supabase_client():
    client = SupabaseClient()
    client.initialized = True
    client.client = Mock()
    return client


@pytest.fixture
def offline_client():
    """A client whose every table call fails, as when Supabase is unreachable."""
    client = SupabaseClient()
    client.initialized = True
    client.client = Mock()
    client.client.table.side_effect = Exception("connection refused")
    return client


@pytest.fixture
def local_store(tmp_path):
    return LocalStore(str(tmp_path / "local_store.json"))


@pytest.fixture
def mock_table(supabase_client):
    """
    Chain every query builder call back to one table Mock.

    Each positional argument is the row list returned by one `execute()`,
    in call order.
    """

    def _make(*results, count=None):
        table = Mock()
        supabase_client.client.table.return_value = table
        for name in QUERY_METHODS:
            getattr(table, name).return_value = table

        responses = []
        for rows in results or ([],):
            res = Mock()
            res.data = rows
            res.count = count
            responses.append(res)
        if len(responses) == 1:
            table.execute.return_value = responses[0]
        else:
            table.execute.side_effect = responses
        return table

    return _make


def _user(user_id, role, **overrides):
    data = dict(
        id=user_id,
        full_name=f"{role.value.title()} User",
        email=f"{user_id}@locadz.dz",
        phone_number="0551234567",
        role=role,
        is_verified=True,
        id_verification_status=IdVerificationStatus.NONE,
    )
    data.update(overrides)
    return UserProfile(**data)


@pytest.fixture
def traveler():
    return _user("traveler-1", UserRole.TRAVELER)


@pytest.fixture
def host():
    return _user("host-1", UserRole.HOST)


@pytest.fixture
def admin():
    return _user("admin-1", UserRole.ADMIN)
