"""Entry point for running the background annotation worker."""
from __future__ import annotations

import logging

from rq import Worker

from api.config import check_transport_security, get_settings
from worker.queue import get_queue, get_redis_connection
from worker import tasks  # noqa: F401  # ensure task functions are discoverable

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    check_transport_security(settings)
    connection = get_redis_connection()
    queue = get_queue(name=settings.queue_name, connection=connection)
    worker = Worker([queue], connection=connection)
    logger.info("Starting worker for queues: %s", queue.name)
    worker.work()


if __name__ == "__main__":
    main()
