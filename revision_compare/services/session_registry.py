"""In-memory registry of comparison sessions."""
from __future__ import annotations

from typing import Dict

from revision_compare.core.errors import ResourceNotFoundError
from revision_compare.core.logging import LogEvent
from revision_compare.services.base_service import BaseService, singleton
from revision_compare.services.compare_session import CompareSession, SimilarityMatcher


@singleton
class SessionRegistry(BaseService):
    """会话注册表 - 会话只保存在内存中，进程退出即丢失"""

    def _initialize(self) -> None:
        self._sessions: Dict[str, CompareSession] = {}

    def create(self, matcher: SimilarityMatcher) -> CompareSession:
        self._ensure_initialized()
        session = CompareSession(matcher)
        self._sessions[session.id] = session
        self.logger.info(LogEvent.SESSION_CREATED, session_id=session.id)
        return session

    def get(self, session_id: str) -> CompareSession:
        self._ensure_initialized()
        session = self._sessions.get(session_id)
        if session is None:
            raise ResourceNotFoundError("Session", session_id)
        return session

    async def close(self, session_id: str) -> None:
        session = self.get(session_id)
        del self._sessions[session_id]
        await session.close()
        self.logger.info(LogEvent.SESSION_CLOSED, session_id=session_id)

    async def close_all(self) -> None:
        self._ensure_initialized()
        for session_id in list(self._sessions):
            await self.close(session_id)
