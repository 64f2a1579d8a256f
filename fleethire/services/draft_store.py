import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from redis.asyncio import Redis
from redis.exceptions import RedisError

from fleethire.core.config import settings
from fleethire.core.redis import get_redis
from fleethire.schemas.catalog import Catalog
from fleethire.schemas.quote import DraftSession, QuoteDraft

logger = logging.getLogger(__name__)


def _unavailable(action: str, session_id: str, error: RedisError) -> HTTPException:
    logger.error(f"Draft storage {action} failed for {session_id}: {error}")
    return HTTPException(status_code=503, detail="Draft storage unavailable")


class DraftStore:
    """Quote builder sessions kept in Redis, one key per session, expiring after ``ttl`` seconds."""

    def __init__(self, redis: Redis, ttl: int):
        self.redis = redis
        self.ttl = ttl

    @staticmethod
    def _key(session_id: str) -> str:
        return f"draft:{session_id}"

    async def create(self, draft: QuoteDraft, catalog: Catalog) -> DraftSession:
        session = DraftSession(
            session_id=uuid.uuid4().hex,
            draft=draft,
            catalog=catalog,
            created_at=datetime.now(timezone.utc),
        )
        await self.save(session)
        logger.info(f"Created quote draft {session.session_id}")
        return session

    async def get(self, session_id: str) -> Optional[DraftSession]:
        try:
            raw = await self.redis.get(self._key(session_id))
        except RedisError as e:
            raise _unavailable("read", session_id, e) from e
        return DraftSession.model_validate_json(raw) if raw else None

    async def save(self, session: DraftSession) -> None:
        try:
            await self.redis.set(self._key(session.session_id), session.model_dump_json(), ex=self.ttl)
        except RedisError as e:
            raise _unavailable("write", session.session_id, e) from e

    async def delete(self, session_id: str) -> None:
        try:
            await self.redis.delete(self._key(session_id))
        except RedisError as e:
            raise _unavailable("delete", session_id, e) from e


def get_draft_store() -> DraftStore:
    redis = get_redis()
    if redis is None:
        raise HTTPException(status_code=503, detail="Draft storage unavailable")
    return DraftStore(redis, settings.DRAFT_TTL)
