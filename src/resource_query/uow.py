"""
SQLAlchemy implementation of the Unit of Work pattern.
"""

from __future__ import annotations

import contextlib
import logging
from typing import TYPE_CHECKING

from .exceptions import UnitOfWorkError

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.orm import Session

    SessionFactory = Callable[[], Session]

logger = logging.getLogger("resource_query.uow")


class SQLAlchemyUnitOfWork:
    """
    Transaction scope around a synchronous SQLAlchemy ``Session``.

    Supports two usage patterns:

    1. **Caller-Managed Sessions** (request-scoped session from the host
       framework):
       ```python
       with SQLAlchemyUnitOfWork(session=session) as uow:
           uow.session.add(record)
       ```
       The session stays open after the block.

    2. **Self-Managed Sessions**:
       ```python
       factory = sessionmaker(engine)
       with SQLAlchemyUnitOfWork(session_factory=factory) as uow:
           ...
       ```
       The UoW creates and closes the session.

    The block commits on success and rolls back if it raises.

    **Important:** Exactly one of `session` or `session_factory` must be provided.
    """

    def __init__(
        self,
        session: Session | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        if session is not None and session_factory is not None:
            raise UnitOfWorkError(
                "Cannot provide both 'session' and 'session_factory'. "
                "Use either caller-managed (session) or self-managed "
                "(session_factory) pattern."
            )

        if session is None and session_factory is None:
            raise UnitOfWorkError(
                "Must provide either 'session' or 'session_factory'."
            )

        self._session: Session | None = session
        self._session_factory = session_factory
        self._owns_session = session_factory is not None and session is None

    @property
    def session(self) -> Session:
        """Get the active session. Raises if session not yet created."""
        if self._session is None:
            raise UnitOfWorkError("Session not yet created. Ensure __enter__ was called.")
        return self._session

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        if self._owns_session and self._session_factory:
            self._session = self._session_factory()

        if not self.session.in_transaction():
            self.session.begin()

        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                logger.debug("Rolling back after %s", exc_type.__name__)
                self.rollback()
        finally:
            if self._owns_session and self._session is not None:
                self._session.close()
                self._session = None

    def commit(self) -> None:
        """Commit the current transaction."""
        try:
            self.session.commit()
        except Exception as e:  # noqa: BLE001
            # Constraint violations, lost connections, etc.
            with contextlib.suppress(Exception):
                self.rollback()
            raise UnitOfWorkError(f"Failed to commit transaction: {e}") from e

    def rollback(self) -> None:
        """Rollback the current transaction."""
        try:
            if self.session.in_transaction():
                self.session.rollback()
        except Exception as e:  # noqa: BLE001
            raise UnitOfWorkError(f"Failed to rollback transaction: {e}") from e
