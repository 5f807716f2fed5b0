import functools
import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from examcore.core.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)


def store_operation(func: Callable) -> Callable:
    """Turn database failures raised by a CRUD call into ``StoreUnavailable``.

    The wrapped callable must take the session as its first positional
    argument after ``self`` (or as ``db=``). The session is rolled back so the
    caller can keep using it.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError as e:
            db = kwargs.get("db")
            if db is None and len(args) > 1:
                db = args[1]
            if db is not None and hasattr(db, "rollback"):
                db.rollback()
            logger.error(f"Store call {func.__qualname__} failed: {e}")
            raise StoreUnavailable(operation=func.__qualname__) from e

    return wrapper
