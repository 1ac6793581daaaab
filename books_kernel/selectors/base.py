"""
Module: books_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/ and models/.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors never call session.add(), delete(),
      commit() or flush().
    - Selectors return frozen dataclasses, not ORM instances, so report
      code never holds live rows.
    - The caller owns the session; reports open their own session so they
      read committed data only.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from books_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """Abstract base class for all selectors."""

    def __init__(self, session: Session):
        self.session = session
