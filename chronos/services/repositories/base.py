"""Record store contract shared by the catalog and the cart mirror."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel

from chronos.services.query import RecordQuery


class StoreResponse(BaseModel):
    """Outcome of a record store call.

    ``success=False`` is a logical failure reported by the store (bad
    filter, missing table, missing record); ``message`` says why.
    """
    success: bool
    message: Optional[str] = None
    data: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "StoreResponse":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, message: str) -> "StoreResponse":
        return cls(success=False, message=message)


class RecordStore(ABC):
    """Remote record store used by the catalog and the cart mirror.

    Implementations return ``StoreResponse`` for logical failures and may
    raise for transport faults; callers handle both.
    """

    @abstractmethod
    async def fetch_records(self, table: str, query: RecordQuery) -> StoreResponse:
        """Fetch a list of raw records."""

    @abstractmethod
    async def get_record_by_id(
        self, table: str, record_id: int, query: Optional[RecordQuery] = None
    ) -> StoreResponse:
        """Fetch one raw record; ``data`` is the record dict."""

    @abstractmethod
    async def create_record(self, table: str, records: list[dict]) -> StoreResponse:
        """Insert records."""


class BaseRepository(RecordStore):
    """Base class for stores backed by a Supabase client.

    Accepts the async client; all methods await the query builder.
    """

    def __init__(self, client) -> None:
        self.client = client
