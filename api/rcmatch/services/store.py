import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from ..errors import StoreUnavailable

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def load_json(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, (list, dict)):
        return value
    try:
        loaded = json.loads(value)
    except (TypeError, ValueError):
        return default
    return loaded if isinstance(loaded, type(default)) else default


@contextmanager
def store_guard(operation: str) -> Iterator[None]:
    """Translate driver/pool failures into StoreUnavailable."""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as exc:
        logger.warning("[store] %s failed: %s", operation, exc.__class__.__name__)
        raise StoreUnavailable(f"Store unavailable during {operation}") from exc
