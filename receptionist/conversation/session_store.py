"""
Per-call session state, keyed by LiveKit room name.

Each active call gets its own ``CallSessionState``; nothing recorded for
one call is visible to another. State is created on first access and
dropped when the call's shutdown callback calls ``end_session``. A session
id reused after teardown starts from a fresh state.

Usage:
    store = SessionStore()
    state = await store.get_or_create("room-abc")
    state.add_quote_request(quote)
    ...
    await store.end_session("room-abc")
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from receptionist.exceptions import SessionLimitError, SessionNotFoundError
from receptionist.schemas.call_schema import (
    CallNote,
    MessageRequest,
    QuoteRequest,
    TransferRequest,
)
from receptionist.schemas.customer_schema import CustomerContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 500


@dataclass
class CallSessionState:
    """
    Everything captured during one call.

    The record lists are append-only; the records themselves are frozen.
    ``customer_context`` is replaced only by the customer lookup tool.
    """

    session_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    call_notes: list[CallNote] = field(default_factory=list)
    quote_requests: list[QuoteRequest] = field(default_factory=list)
    message_requests: list[MessageRequest] = field(default_factory=list)
    transfer_requests: list[TransferRequest] = field(default_factory=list)
    customer_context: CustomerContext = field(default_factory=CustomerContext)

    def add_call_note(self, note: CallNote) -> CallNote:
        self.call_notes.append(note)
        return note

    def add_quote_request(self, quote: QuoteRequest) -> QuoteRequest:
        self.quote_requests.append(quote)
        return quote

    def add_message_request(self, message: MessageRequest) -> MessageRequest:
        self.message_requests.append(message)
        return message

    def add_transfer_request(self, transfer: TransferRequest) -> TransferRequest:
        self.transfer_requests.append(transfer)
        return transfer

    def counts(self) -> dict[str, int]:
        return {
            "call_notes": len(self.call_notes),
            "quote_requests": len(self.quote_requests),
            "message_requests": len(self.message_requests),
            "transfer_requests": len(self.transfer_requests),
        }

    def summary(self) -> dict[str, Any]:
        """End-of-call report. Contains caller PII; log it through ``safe_log``."""
        context = self.customer_context
        return {
            "session_id": self.session_id,
            "started_at": self.created_at.isoformat(),
            "counts": self.counts(),
            "existing_client": context.lookup_successful,
            "customer_id": context.customer.customer_id if context.customer else None,
            "call_notes": [n.model_dump(mode="json") for n in self.call_notes],
            "quote_requests": [q.model_dump(mode="json") for q in self.quote_requests],
            "message_requests": [m.model_dump(mode="json") for m in self.message_requests],
            "transfer_requests": [t.model_dump(mode="json") for t in self.transfer_requests],
        }


class SessionStore:
    """
    In-memory map of session id to ``CallSessionState``.

    Insertion, lookup and removal are serialized with an asyncio lock so
    many concurrent calls can share one store. Work inside a single session
    is sequential (one LLM turn at a time) and needs no extra locking.
    """

    def __init__(self, max_sessions: int = DEFAULT_MAX_SESSIONS) -> None:
        self._sessions: dict[str, CallSessionState] = {}
        self._lock = asyncio.Lock()
        self._max_sessions = max_sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    async def get_or_create(self, session_id: str) -> CallSessionState:
        """
        Return the session's state, creating it on first access.

        Raises:
            SessionLimitError: If the store is already at capacity.
        """
        async with self._lock:
            state = self._sessions.get(session_id)
            if state is not None:
                return state

            if len(self._sessions) >= self._max_sessions:
                raise SessionLimitError(
                    f"Maximum concurrent sessions ({self._max_sessions}) reached"
                )

            state = CallSessionState(session_id=session_id)
            self._sessions[session_id] = state
            logger.info(
                "Session created: %s (active=%d)", session_id, len(self._sessions)
            )
            return state

    async def get(self, session_id: str) -> Optional[CallSessionState]:
        async with self._lock:
            return self._sessions.get(session_id)

    async def get_or_raise(self, session_id: str) -> CallSessionState:
        state = await self.get(session_id)
        if state is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return state

    async def end_session(self, session_id: str) -> bool:
        """Drop a session's state. Returns False if it was already gone."""
        async with self._lock:
            state = self._sessions.pop(session_id, None)
        if state is None:
            logger.debug("Session already ended: %s", session_id)
            return False
        logger.info("Session ended: %s %s", session_id, state.counts())
        return True

    async def active_ids(self) -> list[str]:
        async with self._lock:
            return list(self._sessions)

