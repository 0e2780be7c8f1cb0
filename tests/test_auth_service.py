"""
Unit tests for account registration, verification, sign-in and password reset.
"""
import pytest
from unittest.mock import Mock
from urllib.parse import urlparse, parse_qs

from src.api.services.auth_service import AuthService
from src.api.security.otp import OTPStore
from src.api.security.crypto import hash_password, verify_password
from src.api.security.jwt import verify_token
from src.utils.errors import ValidationFailedError, ConflictError, NotFoundError, AuthenticationError
from src.utils.models import UserRole

pytestmark = pytest.mark.unit


def _service(client, local_store):
    return AuthService(
        supabase_client=client,
        local_store=local_store,
        otp_store=OTPStore(length=4, ttl_seconds=600, bypass_code=""),
        notifier=Mock(),
    )


def _sent_code(service):
    email, code = service.notifier.send_verification_code.call_args[0]
    return email, code


class TestRegister:
    """Account creation."""

    def test_register_success(self, supabase_client, mock_table, local_store):
        table = mock_table([])
        service = _service(supabase_client, local_store)

        user = service.register("  Amine Benali ", "Amine@Locadz.DZ", "0551234567", password="secret1")

        assert user.email == "amine@locadz.dz"
        assert user.full_name == "Amine Benali"
        assert user.role == UserRole.TRAVELER
        assert user.is_verified is False
        assert user.avatar_url.endswith("?seed=amine%40locadz.dz")
        payload = table.insert.call_args[0][0]
        assert payload["password_hash"] != "secret1"
        assert verify_password("secret1", payload["password_hash"])
        email, code = _sent_code(service)
        assert email == "amine@locadz.dz"
        assert len(code) == 4

    @pytest.mark.parametrize("email,phone,role,code", [
        ("amine@locadz", "0551234567", UserRole.TRAVELER, "INVALID_EMAIL"),
        ("amine@locadz.dz", "0451234567", UserRole.TRAVELER, "INVALID_PHONE"),
        ("amine@locadz.dz", "0551234567", UserRole.ADMIN, "INVALID_ROLE"),
    ])
    def test_register_rejects_bad_input(self, supabase_client, local_store, email, phone, role, code):
        service = _service(supabase_client, local_store)
        with pytest.raises(ValidationFailedError) as exc_info:
            service.register("Amine", email, phone, role=role)
        assert exc_info.value.code == code
        supabase_client.client.table.assert_not_called()

    def test_register_duplicate_email(self, supabase_client, local_store):
        error = Exception("duplicate key value violates unique constraint \"users_email_key\"")
        error.code = "23505"
        supabase_client.client.table.side_effect = error
        service = _service(supabase_client, local_store)

        with pytest.raises(ConflictError) as exc_info:
            service.register("Amine", "amine@locadz.dz", "0551234567")

        assert exc_info.value.code == "EMAIL_EXISTS"
        assert local_store.all("users") == []

    def test_register_offline_stores_locally(self, offline_client, local_store):
        service = _service(offline_client, local_store)

        user = service.register("Amine", "amine@locadz.dz", "0551234567", role="host")

        assert user.role == UserRole.HOST
        assert local_store.find_one("users", email="amine@locadz.dz")["role"] == "HOST"
        with pytest.raises(ConflictError):
            service.register("Amine", "amine@locadz.dz", "0551234567")


class TestVerification:
    """Email verification codes."""

    def test_verify_offline_account(self, offline_client, local_store):
        service = _service(offline_client, local_store)
        service.register("Amine", "amine@locadz.dz", "0551234567")
        email, code = _sent_code(service)

        user = service.verify_account(email, code)

        assert user.is_verified is True
        assert local_store.find_one("users", email=email)["is_verified"] is True

    def test_verify_remote_account(self, supabase_client, mock_table, local_store):
        service = _service(supabase_client, local_store)
        code = service.otp.issue("amine@locadz.dz")
        mock_table([{"id": "u1", "full_name": "Amine", "email": "amine@locadz.dz", "is_verified": True}])

        assert service.verify_account("AMINE@locadz.dz", code).is_verified is True

    def test_wrong_code(self, supabase_client, local_store):
        service = _service(supabase_client, local_store)
        code = service.otp.issue("amine@locadz.dz")
        wrong = "1000" if code != "1000" else "1001"

        with pytest.raises(ValidationFailedError) as exc_info:
            service.verify_account("amine@locadz.dz", wrong)
        assert exc_info.value.code == "INVALID_CODE"

    def test_resend_code_unknown_account(self, offline_client, local_store):
        service = _service(offline_client, local_store)
        with pytest.raises(NotFoundError):
            service.resend_code("nobody@locadz.dz")

    def test_resend_code(self, offline_client, local_store):
        service = _service(offline_client, local_store)
        service.register("Amine", "amine@locadz.dz", "0551234567")

        service.resend_code("amine@locadz.dz")

        assert service.notifier.send_verification_code.call_count == 2
        assert service.otp.has_pending("amine@locadz.dz")


class TestLogin:
    """Sign-in flows."""

    @pytest.fixture
    def service(self, offline_client, local_store):
        local_store.upsert("users", {
            "id": "u1", "full_name": "Amine", "email": "amine@locadz.dz", "role": "TRAVELER",
            "is_verified": True, "password_hash": hash_password("secret1"),
        }, key="email")
        local_store.upsert("users", {
            "id": "u2", "full_name": "Nadia", "email": "nadia@locadz.dz", "role": "HOST",
            "is_verified": False,
        }, key="email")
        return _service(offline_client, local_store)

    def test_login_verified(self, service):
        result = service.login("Amine@locadz.dz", "secret1")
        assert result.requires_verification is False
        assert result.user.id == "u1"
        service.notifier.send_verification_code.assert_not_called()

    def test_login_wrong_password(self, service):
        with pytest.raises(AuthenticationError) as exc_info:
            service.login("amine@locadz.dz", "wrong")
        assert exc_info.value.code == "INVALID_CREDENTIALS"

    def test_login_unverified_reissues_code(self, service):
        result = service.login("nadia@locadz.dz")
        assert result.requires_verification is True
        assert _sent_code(service)[0] == "nadia@locadz.dz"

    def test_login_unknown_account(self, service):
        with pytest.raises(NotFoundError) as exc_info:
            service.login("nobody@locadz.dz")
        assert exc_info.value.code == "ACCOUNT_NOT_FOUND"

    def test_login_bad_email(self, service):
        with pytest.raises(ValidationFailedError):
            service.login("not-an-email")

    def test_login_without_password_needs_emailed_code(self, service, local_store):
        local_store.upsert("users", {
            "id": "u3", "full_name": "Karim", "email": "karim@locadz.dz", "role": "HOST",
            "is_verified": True,
        }, key="email")

        result = service.login("karim@locadz.dz")

        assert result.requires_verification is True
        email, code = _sent_code(service)
        assert email == "karim@locadz.dz"
        assert service.verify_account(email, code).id == "u3"

    def test_login_without_password_ignores_supplied_password(self, service, local_store):
        local_store.upsert("users", {
            "id": "u3", "full_name": "Karim", "email": "karim@locadz.dz", "role": "HOST",
            "is_verified": True,
        }, key="email")
        assert service.login("karim@locadz.dz", "anything").requires_verification is True

    def test_session_token_claims(self, service):
        user = service.login("amine@locadz.dz", "secret1").user
        payload = verify_token(service.issue_session_token(user))
        assert payload["sub"] == "u1"
        assert payload["role"] == "TRAVELER"


class TestProfile:
    """Profile edits, role switching and password reset."""

    @pytest.fixture
    def service(self, offline_client, local_store):
        local_store.upsert("users", {
            "id": "u1", "full_name": "Amine", "email": "amine@locadz.dz", "role": "TRAVELER",
            "is_verified": True,
        }, key="email")
        return _service(offline_client, local_store)

    def test_update_profile_whitelists_fields(self, service, local_store):
        user = service.update_profile("u1", {"full_name": "Amine B.", "role": "ADMIN", "is_verified": False})
        assert user.full_name == "Amine B."
        assert user.role == UserRole.TRAVELER
        assert local_store.find_one("users", id="u1")["is_verified"] is True

    def test_update_profile_bad_phone(self, service):
        with pytest.raises(ValidationFailedError):
            service.update_profile("u1", {"phone_number": "12345"})

    def test_switch_role_round_trip(self, service):
        assert service.switch_role("u1").role == UserRole.HOST
        assert service.switch_role("u1").role == UserRole.TRAVELER

    def test_password_reset(self, service, local_store):
        link = service.request_password_reset("amine@locadz.dz")
        token = parse_qs(urlparse(link).query)["token"][0]
        assert urlparse(link).path.endswith("/reset-password")
        service.notifier.send_password_reset.assert_called_once_with("amine@locadz.dz", link)

        service.reset_password(token, "newsecret")

        stored = local_store.find_one("users", id="u1")["password_hash"]
        assert verify_password("newsecret", stored)

    def test_reset_rejects_short_password(self, service):
        with pytest.raises(ValidationFailedError) as exc_info:
            service.reset_password("whatever", "123")
        assert exc_info.value.code == "WEAK_PASSWORD"

    def test_reset_rejects_session_token(self, service):
        session = service.issue_session_token(service.get_user("amine@locadz.dz"))
        with pytest.raises(ValidationFailedError) as exc_info:
            service.reset_password(session, "newsecret")
        assert exc_info.value.code == "INVALID_RESET_TOKEN"
