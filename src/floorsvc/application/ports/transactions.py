from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol


class TransactionManager(Protocol):
    """Opens a store transaction that every repository call made inside joins.

    Leaving the block normally commits; an exception rolls everything back.
    Nested blocks join the outer transaction.
    """

    def transaction(self) -> AbstractContextManager[None]: ...
