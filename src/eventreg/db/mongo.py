from __future__ import annotations

import os
import logging
import time
from typing import Optional

from pymongo import MongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

# Always go through eventreg.config so python-dotenv is applied
from eventreg import config

logger = logging.getLogger(__name__)

_CLIENT: Optional[MongoClient] = None


def _mongo_uri() -> str:
    # Prefer config (loads .env), fallback to raw env
    uri = getattr(config, "MONGODB_URI", None) or os.getenv("MONGODB_URI")
    if not uri:
        raise RuntimeError("MONGODB_URI is not set")
    return uri


def _db_name() -> str:
    return getattr(config, "MONGO_DB", None) or os.getenv("MONGO_DB") or "event_registration"


def get_client() -> MongoClient:
    global _CLIENT
    if _CLIENT is not None:
        return _CLIENT
    _CLIENT = MongoClient(
        _mongo_uri(),
        server_api=ServerApi("1"),
        serverSelectionTimeoutMS=config.MONGO_SERVER_SELECTION_TIMEOUT_MS,
        connectTimeoutMS=config.MONGO_CONNECT_TIMEOUT_MS,
        socketTimeoutMS=config.MONGO_SOCKET_TIMEOUT_MS,
        retryWrites=True,
        w="majority",
    )
    return _CLIENT


def get_db():
    return get_client()[_db_name()]


def get_collection(name: str):
    return get_db()[name]


def close_client() -> None:
    global _CLIENT
    if _CLIENT is not None:
        _CLIENT.close()
        _CLIENT = None


def ping() -> bool:
    try:
        get_client().admin.command("ping")
        return True
    except (PyMongoError, RuntimeError) as e:
        logger.error("Mongo ping failed: %s", e)
        return False


def wait_for_mongo(
    attempts: Optional[int] = None,
    delay: Optional[float] = None,
    max_delay: Optional[float] = None,
    sleep=time.sleep,
) -> bool:
    """
    Block until MongoDB answers a ping, backing off exponentially between tries.
    attempts=0 keeps trying forever. Returns False if the attempts ran out.
    """
    attempts = config.MONGO_RETRY_ATTEMPTS if attempts is None else attempts
    delay = config.MONGO_RETRY_DELAY if delay is None else delay
    max_delay = config.MONGO_RETRY_MAX_DELAY if max_delay is None else max_delay

    n = 0
    while True:
        n += 1
        if ping():
            logger.info("MongoDB connected (attempt %d)", n)
            return True
        if attempts and n >= attempts:
            logger.error("MongoDB unreachable after %d attempts", n)
            return False
        wait = min(delay * (2 ** (n - 1)), max_delay)
        logger.warning("MongoDB not reachable (attempt %d), retrying in %.1fs", n, wait)
        sleep(wait)
