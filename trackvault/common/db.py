# trackvault/common/db.py
from __future__ import annotations

import contextlib
import functools
from typing import Callable, Iterator, TypeVar

from django.db import DatabaseError, transaction

from trackvault.common.api.exceptions import PersistenceError

F = TypeVar("F", bound=Callable)


@contextlib.contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """
    Re-raise any DatabaseError inside the block as PersistenceError, keeping
    the driver error on __cause__ and out of the client-facing message.
    """
    try:
        yield
    except DatabaseError as exc:
        raise PersistenceError(f"Failed to {action}.") from exc


def atomic_write(action: str) -> Callable[[F], F]:
    """
    `transaction.atomic` whose queries and commit report storage failures as
    PersistenceError("Failed to <action>.").
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with storage_errors(action), transaction.atomic():
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
