"""In-memory registry of per-client contexts."""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from ..config import config
from ..orchestrator import LearningOrchestrator

logger = logging.getLogger(__name__)


def is_valid_client_id(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        return str(uuid.UUID(value)) == value
    except ValueError:
        return False


@dataclass
class ClientContext:
    client_id: str
    orchestrator: LearningOrchestrator
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    last_seen: datetime = field(default_factory=datetime.now)


class ClientRegistry:
    """
    Maps client ids to their orchestrator.

    Contexts idle for longer than the session timeout are dropped and their
    quiz timers disposed. Stored data (profile, settings, theme) lives in the
    client's storage and survives expiry.
    """

    def __init__(
        self,
        orchestrator_factory: Callable[[str], LearningOrchestrator],
        timeout_minutes: Optional[int] = None,
    ):
        self.orchestrator_factory = orchestrator_factory
        self.timeout = timedelta(
            minutes=timeout_minutes or config.auth.session_timeout_minutes
        )
        self._clients: Dict[str, ClientContext] = {}
        self._lock = threading.Lock()

    def get(self, client_id: str) -> ClientContext:
        with self._lock:
            self._expire_idle()
            context = self._clients.get(client_id)
            if context is None:
                context = ClientContext(client_id, self.orchestrator_factory(client_id))
                self._clients[client_id] = context
                logger.info(f"New client context: {client_id}")
            context.last_seen = datetime.now()
            return context

    def _expire_idle(self):
        now = datetime.now()
        for client_id, context in list(self._clients.items()):
            if now - context.last_seen > self.timeout:
                del self._clients[client_id]
                context.orchestrator.dispose()
                logger.info(f"Expired idle client context: {client_id}")

    def clear(self):
        with self._lock:
            for context in self._clients.values():
                context.orchestrator.dispose()
            self._clients.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)
