"""Integration tests for the idempotency store.

These tests verify:
1. The first request for a key wins the placeholder
2. A completed key replays the saved response verbatim
3. Rolling back the processing transaction frees the key
4. A placeholder without a response surfaces as an invariant violation
5. Keys are scoped per user
"""

from uuid import uuid4

import anyio
import pytest
from sqlalchemy import func, select
from starlette.responses import Response, StreamingResponse

from backend.newsletter.db.models.idempotency import IdempotencyRecord
from backend.newsletter.errors import IdempotencyRecordNotFoundError
from backend.newsletter.idempotency import (
    IdempotencyKey,
    ReturnSavedResponse,
    StartProcessing,
    get_saved_response,
    save_response,
    try_processing,
)

KEY = IdempotencyKey.parse("store-key-0001")


def _redirect_with_cookies() -> Response:
    response = Response(status_code=303, headers={"Location": "/admin/newsletters"})
    response.set_cookie("_flash", "first")
    response.set_cookie("other", "second")
    return response


def _count_records(session_factory) -> int:
    with session_factory() as session:
        return session.execute(
            select(func.count()).select_from(IdempotencyRecord)
        ).scalar_one()


class TestIdempotencyStore:
    """Test idempotency store functionality."""

    def test_first_request_starts_processing(self, session_factory):
        next_action = try_processing(session_factory, KEY, uuid4())

        assert isinstance(next_action, StartProcessing)
        next_action.session.rollback()
        next_action.session.close()

    def test_saved_response_is_replayed_verbatim(self, session_factory):
        user_id = uuid4()
        next_action = try_processing(session_factory, KEY, user_id)
        original = _redirect_with_cookies()
        saved = save_response(next_action.session, KEY, user_id, original)
        next_action.session.close()

        replay = try_processing(session_factory, KEY, user_id)

        assert isinstance(replay, ReturnSavedResponse)
        assert replay.response.status_code == 303
        assert replay.response.raw_headers == original.raw_headers
        assert replay.response.body == original.body
        assert saved.raw_headers == original.raw_headers

    def test_repeated_headers_keep_their_order(self, session_factory, test_session):
        user_id = uuid4()
        next_action = try_processing(session_factory, KEY, user_id)
        save_response(next_action.session, KEY, user_id, _redirect_with_cookies())
        next_action.session.close()

        response = get_saved_response(test_session, KEY, user_id)

        set_cookies = [
            value for name, value in response.raw_headers if name == b"set-cookie"
        ]
        assert len(set_cookies) == 2
        assert set_cookies[0].startswith(b"_flash=first")
        assert set_cookies[1].startswith(b"other=second")

    def test_streaming_body_is_collected(self, session_factory):
        async def chunks():
            yield "hello, "
            yield b"world"

        user_id = uuid4()
        next_action = try_processing(session_factory, KEY, user_id)

        def _save():
            return save_response(
                next_action.session,
                KEY,
                user_id,
                StreamingResponse(chunks(), status_code=200, media_type="text/plain"),
            )

        # Streaming bodies are drained from a worker thread, as in a sync endpoint
        saved = anyio.run(anyio.to_thread.run_sync, _save)
        next_action.session.close()

        assert saved.body == b"hello, world"
        replay = try_processing(session_factory, KEY, user_id)
        assert replay.response.body == b"hello, world"

    def test_rollback_frees_the_key(self, session_factory):
        user_id = uuid4()
        first = try_processing(session_factory, KEY, user_id)
        first.session.rollback()
        first.session.close()

        assert _count_records(session_factory) == 0
        second = try_processing(session_factory, KEY, user_id)
        assert isinstance(second, StartProcessing)
        second.session.rollback()
        second.session.close()

    def test_placeholder_without_response_is_an_invariant_violation(
        self, session_factory, test_session
    ):
        user_id = uuid4()
        test_session.add(IdempotencyRecord(user_id=user_id, idempotency_key=KEY.value))
        test_session.commit()

        with pytest.raises(IdempotencyRecordNotFoundError):
            try_processing(session_factory, KEY, user_id)

    def test_placeholder_is_not_returned_as_saved_response(self, test_session):
        user_id = uuid4()
        test_session.add(IdempotencyRecord(user_id=user_id, idempotency_key=KEY.value))
        test_session.commit()

        assert get_saved_response(test_session, KEY, user_id) is None

    def test_keys_are_scoped_per_user(self, session_factory):
        alice, bob = uuid4(), uuid4()
        first = try_processing(session_factory, KEY, alice)
        save_response(first.session, KEY, alice, Response(status_code=200))
        first.session.close()

        second = try_processing(session_factory, KEY, bob)

        assert isinstance(second, StartProcessing)
        second.session.rollback()
        second.session.close()
