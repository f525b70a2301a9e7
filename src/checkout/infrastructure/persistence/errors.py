"""Translate SQLAlchemy errors into domain exceptions at the store boundary."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from checkout.domain.exceptions import DuplicateExternalReference, StorageFailure


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        if "payment_reference" in str(exc.orig):
            raise DuplicateExternalReference(
                f"{action}: payment reference already attached to another order"
            ) from exc
        raise StorageFailure(f"{action}: integrity violation") from exc
    except SQLAlchemyError as exc:
        raise StorageFailure(f"{action}: {type(exc).__name__}") from exc
