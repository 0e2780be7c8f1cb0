"""
Unit tests for messaging, reviews and favorites.
"""
import pytest
from unittest.mock import Mock

from src.api.services.messaging_service import MessagingService
from src.api.services.review_service import ReviewService, rating_summary
from src.api.services.favorite_service import FavoriteService
from src.utils.errors import ValidationFailedError, RemoteServiceError
from src.utils.models import Review

pytestmark = pytest.mark.unit


def _message(msg_id, sender, receiver, created_at, is_read=False):
    return {
        "id": msg_id, "sender_id": sender, "receiver_id": receiver, "content": f"msg {msg_id}",
        "is_read": is_read, "created_at": created_at,
    }


class TestMessaging:
    def test_send(self, supabase_client, mock_table, local_store):
        table = mock_table([])
        message = MessagingService(supabase_client, local_store).send_message("u1", "u2", "  Salam  ", "p1")

        assert message.content == "Salam"
        assert table.insert.call_args[0][0]["property_id"] == "p1"

    @pytest.mark.parametrize("sender,receiver,content,code", [
        ("u1", "u2", "   ", "EMPTY_MESSAGE"),
        ("u1", "u1", "Salam", "INVALID_RECIPIENT"),
    ])
    def test_send_rejects(self, supabase_client, local_store, sender, receiver, content, code):
        with pytest.raises(ValidationFailedError) as exc_info:
            MessagingService(supabase_client, local_store).send_message(sender, receiver, content)
        assert exc_info.value.code == code

    def test_send_offline_keeps_message(self, offline_client, local_store):
        message = MessagingService(offline_client, local_store).send_message("u1", "u2", "Salam")
        assert local_store.find_one("messages", id=message.id)["content"] == "Salam"

    def test_conversation_merges_local_messages(self, supabase_client, mock_table, local_store):
        table = mock_table([
            _message("m1", "u1", "u2", "2025-01-01T10:00:00"),
            _message("m3", "u2", "u1", "2025-01-01T12:00:00"),
        ])
        local_store.upsert("messages", _message("m2", "u1", "u2", "2025-01-01T11:00:00"))
        local_store.upsert("messages", _message("m9", "u1", "u3", "2025-01-01T11:30:00"))

        messages = MessagingService(supabase_client, local_store).get_conversation("u1", "u2")

        assert [m.id for m in messages] == ["m1", "m2", "m3"]
        table.eq.assert_any_call("sender_id", "u1")
        table.eq.assert_any_call("receiver_id", "u2")
        table.or_.assert_not_called()

    def test_conversation_peer_id_is_a_plain_value(self, supabase_client, mock_table, local_store):
        crafted = "bob),id.not.is.null,and(sender_id.eq.bob"
        table = mock_table([])

        assert MessagingService(supabase_client, local_store).get_conversation("alice", crafted) == []

        table.or_.assert_not_called()
        eq_calls = [c[0] for c in table.eq.call_args_list]
        assert ("receiver_id", crafted) in eq_calls
        assert ("sender_id", crafted) in eq_calls
        assert all(column in ("sender_id", "receiver_id") for column, _ in eq_calls)

    def test_conversation_rows_are_not_duplicated(self, supabase_client, mock_table, local_store):
        mock_table(
            [_message("m1", "u1", "u2", "2025-01-01T10:00:00")],
            [_message("m1", "u1", "u2", "2025-01-01T10:00:00"), _message("m2", "u2", "u1", "2025-01-01T11:00:00")],
        )
        messages = MessagingService(supabase_client, local_store).get_conversation("u1", "u2")
        assert [m.id for m in messages] == ["m1", "m2"]

    def test_unread_count(self, supabase_client, mock_table, local_store):
        mock_table([], count=4)
        assert MessagingService(supabase_client, local_store).get_unread_count("u1") == 4

    def test_unread_count_offline(self, offline_client, local_store):
        assert MessagingService(offline_client, local_store).get_unread_count("u1") == 0

    def test_mark_read(self, offline_client, local_store):
        local_store.upsert("messages", _message("m1", "u2", "u1", "2025-01-01T10:00:00"))
        local_store.upsert("messages", _message("m2", "u2", "u1", "2025-01-01T11:00:00", is_read=True))
        local_store.upsert("messages", _message("m3", "u1", "u2", "2025-01-01T12:00:00"))

        assert MessagingService(offline_client, local_store).mark_conversation_read("u1", "u2") == 1
        assert local_store.find_one("messages", id="m1")["is_read"] is True
        assert local_store.find_one("messages", id="m3")["is_read"] is False

    def test_list_conversations(self, offline_client, local_store):
        local_store.upsert("messages", _message("m1", "u2", "u1", "2025-01-01T10:00:00"))
        local_store.upsert("messages", _message("m2", "u2", "u1", "2025-01-01T11:00:00"))
        local_store.upsert("messages", _message("m3", "u1", "u3", "2025-01-02T09:00:00"))

        conversations = MessagingService(offline_client, local_store).list_conversations("u1")

        assert [c["user_id"] for c in conversations] == ["u3", "u2"]
        assert conversations[1]["last_message"].id == "m2"
        assert conversations[1]["unread"] == 2
        assert conversations[0]["unread"] == 0


class TestReviews:
    def test_rating_summary(self):
        reviews = [Review("r1", "p1", "u1", "A", 5, "Top"), Review("r2", "p1", "u2", "B", 4, "Bien"),
                   Review("r3", "p1", "u3", "C", 4, "Bien")]
        assert rating_summary(reviews) == {"count": 3, "average": 4.3}
        assert rating_summary([]) == {"count": 0, "average": None}

    def test_add_review_refreshes_rating(self, supabase_client, mock_table, traveler):
        review_row = {"id": "r1", "property_id": "p1", "user_id": traveler.id, "user_name": traveler.full_name,
                      "rating": 5, "comment": "Magnifique"}
        mock_table([review_row], [review_row, dict(review_row, id="r0", rating=4)])
        property_service = Mock()
        service = ReviewService(supabase_client, property_service)

        review = service.add_review("p1", traveler, 5, " Magnifique ")

        assert review.rating == 5
        property_service.refresh_rating.assert_called_once_with("p1", 4.5, 2)

    @pytest.mark.parametrize("rating,comment,code", [
        (0, "Bien", "INVALID_RATING"),
        (6, "Bien", "INVALID_RATING"),
        (4, "  ", "EMPTY_COMMENT"),
    ])
    def test_add_review_validation(self, supabase_client, traveler, rating, comment, code):
        with pytest.raises(ValidationFailedError) as exc_info:
            ReviewService(supabase_client, Mock()).add_review("p1", traveler, rating, comment)
        assert exc_info.value.code == code

    def test_add_review_remote_failure_propagates(self, offline_client, traveler):
        with pytest.raises(RemoteServiceError):
            ReviewService(offline_client, Mock()).add_review("p1", traveler, 5, "Top")

    def test_reviews_offline(self, offline_client):
        assert ReviewService(offline_client, Mock()).get_reviews_for_property("p1") == []


class TestFavorites:
    def test_toggle_adds(self, supabase_client, mock_table):
        table = mock_table([], [{"id": "f1"}])
        assert FavoriteService(supabase_client).toggle_favorite("u1", "p1") is True
        assert table.insert.call_args[0][0]["property_id"] == "p1"

    def test_toggle_removes(self, supabase_client, mock_table):
        table = mock_table([{"id": "f1"}], [{"id": "f1"}])
        assert FavoriteService(supabase_client).toggle_favorite("u1", "p1") is False
        table.delete.assert_called_once()

    def test_favorite_ids(self, supabase_client, mock_table):
        mock_table([{"property_id": "p1"}, {"property_id": "p2"}])
        assert FavoriteService(supabase_client).get_user_favorite_property_ids("u1") == ["p1", "p2"]

    def test_offline_reads(self, offline_client):
        service = FavoriteService(offline_client)
        assert service.is_favorite("u1", "p1") is False
        assert service.get_favorites("u1") == []
