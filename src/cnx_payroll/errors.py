from __future__ import annotations


class StoreReadError(RuntimeError):
    """A read against the persistence collaborator failed."""

    def __init__(self, table: str, message: str) -> None:
        super().__init__(f"{table}: {message}")
        self.table = table
        self.message = message
