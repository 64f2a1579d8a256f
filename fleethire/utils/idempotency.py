import logging
from typing import Optional
from redis.exceptions import RedisError
from fleethire.core.redis import get_redis
from fleethire.core.config import settings
from fleethire.schemas.quote import SubmitOut

logger = logging.getLogger(__name__)


def _key(session_id: str, idempotency_key: str) -> str:
    return f"idemp:submit:{session_id}:{idempotency_key}"


async def get_submission(session_id: str, idempotency_key: str) -> Optional[SubmitOut]:
    if not idempotency_key:
        return None
    redis = get_redis()
    if redis is None:
        return None
    try:
        v = await redis.get(_key(session_id, idempotency_key))
    except RedisError as e:
        logger.warning(f"Idempotency lookup failed for draft {session_id}: {e}")
        return None
    return SubmitOut.model_validate_json(v) if v else None


async def remember_submission(session_id: str, idempotency_key: str, out: SubmitOut) -> None:
    redis = get_redis()
    if redis is None:
        return
    try:
        await redis.set(_key(session_id, idempotency_key), out.model_dump_json(), ex=settings.IDEMPOTENCY_TTL)
    except RedisError as e:
        logger.warning(f"Idempotency write failed for quote {out.quote_number}: {e}")
