"""Queue utilities backed by Redis or fakeredis for local development."""
from __future__ import annotations

import logging
from typing import Optional

import fakeredis
import redis
from redis.exceptions import RedisError
from rq import Queue

from api.config import get_settings

logger = logging.getLogger(__name__)

_FAKE_SERVER = fakeredis.FakeServer()


def get_redis_connection(redis_url: Optional[str] = None) -> redis.Redis:
    """Return a Redis connection, falling back to in-memory fakeredis.

    The fakeredis server is module-level so that the API and an in-process
    worker share queued annotation jobs during local development.
    """

    redis_url = redis_url or get_settings().redis_url
    try:
        connection = redis.Redis.from_url(redis_url)
        connection.ping()
        return connection
    except RedisError:
        logger.warning("Redis unavailable at %s, falling back to fakeredis", redis_url)
        return fakeredis.FakeStrictRedis(server=_FAKE_SERVER)


def get_queue(name: Optional[str] = None, connection: Optional[redis.Redis] = None) -> Queue:
    """Return the RQ queue that annotation jobs are enqueued on."""

    conn = connection or get_redis_connection()
    return Queue(name or get_settings().queue_name, connection=conn)
