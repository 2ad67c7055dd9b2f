"""Idempotency store for publish request deduplication.

Processing a key happens in two phases that share one database transaction:

1. ``try_processing`` inserts a placeholder row for (user_id, key). Winning
   the insert hands the caller a ``Session`` whose open transaction holds the
   placeholder. Losing it (the row already exists) means another request
   already processed the key, and its saved response is returned instead.
2. ``save_response`` fills the placeholder with the response and commits.

If the caller fails between the two phases, rolling the session back removes
the placeholder as well, so a retry with the same key starts from scratch.
"""

import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

import anyio.from_thread
from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, sessionmaker
from starlette.responses import Response, StreamingResponse

from backend.newsletter.db.models.idempotency import IdempotencyRecord
from backend.newsletter.db.types import HeaderPair
from backend.newsletter.errors import IdempotencyRecordNotFoundError

from .key import IdempotencyKey

logger = logging.getLogger(__name__)


@dataclass
class StartProcessing:
    """The caller owns the key; ``session`` holds the placeholder row."""

    session: Session


@dataclass
class ReturnSavedResponse:
    """The key was already processed; replay ``response``."""

    response: Response


NextAction = StartProcessing | ReturnSavedResponse


def try_processing(
    session_factory: sessionmaker[Session],
    idempotency_key: IdempotencyKey,
    user_id: UUID,
) -> NextAction:
    """
    Claim an idempotency key or fetch the response saved for it.

    Args:
        session_factory: Factory used to open the processing transaction
        idempotency_key: Validated client key
        user_id: User the key is scoped to

    Returns:
        StartProcessing with an open session if the placeholder was inserted,
        ReturnSavedResponse with the stored response otherwise

    Raises:
        IdempotencyRecordNotFoundError: If the key exists but has no saved
            response (processing was started and never completed)
    """
    session = session_factory()
    try:
        inserted = _insert_placeholder(session, idempotency_key, user_id)
    except Exception:
        session.rollback()
        session.close()
        raise

    if inserted:
        return StartProcessing(session)

    session.rollback()
    session.close()

    with session_factory() as read_session:
        saved = get_saved_response(read_session, idempotency_key, user_id)

    if saved is None:
        raise IdempotencyRecordNotFoundError(
            "We expected a saved response, we didn't find it."
        )

    logger.info(
        "idempotency_replay",
        extra={"user_id": str(user_id), "idempotency_key": idempotency_key.value},
    )
    return ReturnSavedResponse(saved)


def get_saved_response(
    session: Session,
    idempotency_key: IdempotencyKey,
    user_id: UUID,
) -> Response | None:
    """
    Rebuild the response stored for a key.

    Args:
        session: SQLAlchemy session
        idempotency_key: Validated client key
        user_id: User the key is scoped to

    Returns:
        Response with the stored status, headers and body, or None if no
        completed record exists

    Note:
        Placeholders (rows without a status code) are treated as missing.
    """
    record = session.get(IdempotencyRecord, (user_id, idempotency_key.value))

    if record is None or not record.is_completed:
        return None

    return _build_response(
        record.response_status_code,
        record.response_headers or [],
        record.response_body or b"",
    )


def save_response(
    session: Session,
    idempotency_key: IdempotencyKey,
    user_id: UUID,
    response: Response,
) -> Response:
    """
    Store a response into the key's placeholder and commit.

    Args:
        session: Session returned inside StartProcessing
        idempotency_key: Validated client key
        user_id: User the key is scoped to
        response: Response computed for the request

    Returns:
        A response equal to what later replays of this key will receive

    Note:
        Streaming bodies are drained into memory before anything is written.
    """
    body = _response_body(response)
    headers: list[HeaderPair] = [
        (name.decode("latin-1"), value) for name, value in response.raw_headers
    ]

    session.execute(
        update(IdempotencyRecord)
        .where(
            IdempotencyRecord.user_id == user_id,
            IdempotencyRecord.idempotency_key == idempotency_key.value,
        )
        .values(
            response_status_code=response.status_code,
            response_headers=headers,
            response_body=body,
        )
    )
    session.commit()

    return _build_response(response.status_code, headers, body)


def _insert_placeholder(
    session: Session,
    idempotency_key: IdempotencyKey,
    user_id: UUID,
) -> bool:
    """INSERT ... ON CONFLICT DO NOTHING. Returns True if a row was inserted."""
    dialect = session.get_bind().dialect.name
    insert = postgresql_insert if dialect == "postgresql" else sqlite_insert

    stmt = (
        insert(IdempotencyRecord.__table__)
        .values(
            user_id=user_id,
            idempotency_key=idempotency_key.value,
            created_at=datetime.now(timezone.utc),
        )
        .on_conflict_do_nothing()
    )
    result = session.execute(stmt)
    return result.rowcount > 0


def _response_body(response: Response) -> bytes:
    if isinstance(response, StreamingResponse):
        # Sync endpoints run in anyio worker threads
        return anyio.from_thread.run(_collect_stream, response.body_iterator)
    return bytes(response.body)


async def _collect_stream(iterator: AsyncIterable[str | bytes]) -> bytes:
    chunks = []
    async for chunk in iterator:
        chunks.append(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
    return b"".join(chunks)


def _build_response(status_code: int, headers: list[HeaderPair], body: bytes) -> Response:
    response = Response(content=body, status_code=status_code)
    # Replace the defaults Response computed with the stored headers verbatim
    response.raw_headers = [(name.encode("latin-1"), value) for name, value in headers]
    return response
