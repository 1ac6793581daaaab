"""
BaseService -- abstract base for kernel write services.

Responsibility:
    Common constructor and session-handling contract for every service in
    the kernel layer.  Services receive a SQLAlchemy ``Session`` and use
    ``session.flush()`` -- never ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell.  DocumentService is the one
    exception: it owns the transaction boundary of a document submit or
    revert and commits through ``transaction_scope``.

Invariants enforced:
    - Services flush within the caller's transaction and never commit or
      roll back themselves, so a posting plus its reconciliation land in
      one atomic unit.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from books_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide read-only query methods -- those belong in
          ``books_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
