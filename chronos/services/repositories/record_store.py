"""Supabase Record Store - translates RecordQuery into PostgREST calls.

All methods use async/await with supabase-py v2.
"""
from typing import Any, Optional

from postgrest.exceptions import APIError

from chronos.errors import ERROR_RECORD_NOT_FOUND
from chronos.logging import get_logger
from chronos.services.query import Condition, GroupOperator, Operator, RecordQuery

from .base import BaseRepository, StoreResponse

logger = get_logger(__name__)

ID_FIELD = "Id"


def _scalar(value: Any) -> Any:
    """PostgREST wants lowercase booleans."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _quote(value: Any) -> str:
    """Quote a value for use inside an or=(...) expression."""
    text = str(_scalar(value)).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _contains_pattern(value: Any) -> str:
    """ilike pattern matching ``value`` literally as a substring."""
    text = str(_scalar(value)).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{text}%"


def _expressions(condition: Condition) -> list[str]:
    """Render one condition as or=(...) expressions."""
    name = condition.field
    values = condition.values
    op = condition.operator

    if op in (Operator.EQUAL_TO, Operator.EXACT_MATCH):
        if len(values) == 1:
            return [f"{name}.eq.{_quote(values[0])}"]
        return [f"{name}.in.({','.join(_quote(v) for v in values)})"]
    if op is Operator.CONTAINS:
        return [f"{name}.ilike.{_quote(_contains_pattern(v))}" for v in values]
    if op is Operator.GREATER_THAN_OR_EQUAL_TO:
        return [f"{name}.gte.{_quote(values[0])}"]
    if op is Operator.LESS_THAN_OR_EQUAL_TO:
        return [f"{name}.lte.{_quote(values[0])}"]
    raise ValueError(f"Unsupported operator: {op}")


class SupabaseRecordStore(BaseRepository):
    """Record store over a Supabase (PostgREST) project."""

    def _select(self, table: str, query: Optional[RecordQuery]):
        columns = ",".join(query.fields) if query and query.fields else "*"
        return self.client.table(table).select(columns)

    def _apply_condition(self, request, condition: Condition):
        name = condition.field
        values = [_scalar(v) for v in condition.values]
        op = condition.operator

        if not values:
            return request
        if op in (Operator.EQUAL_TO, Operator.EXACT_MATCH):
            if len(values) == 1:
                return request.eq(name, values[0])
            return request.in_(name, values)
        if op is Operator.CONTAINS:
            if len(values) == 1:
                return request.ilike(name, _contains_pattern(values[0]))
            return request.or_(",".join(_expressions(condition)))
        if op is Operator.GREATER_THAN_OR_EQUAL_TO:
            return request.gte(name, values[0])
        if op is Operator.LESS_THAN_OR_EQUAL_TO:
            return request.lte(name, values[0])
        raise ValueError(f"Unsupported operator: {op}")

    def _build(self, table: str, query: RecordQuery):
        request = self._select(table, query)

        for condition in query.where:
            request = self._apply_condition(request, condition)

        for group in query.where_groups:
            if group.operator is GroupOperator.OR:
                expressions = [e for c in group.conditions for e in _expressions(c)]
                if expressions:
                    request = request.or_(",".join(expressions))
            else:
                for condition in group.conditions:
                    request = self._apply_condition(request, condition)

        for order in query.order_by:
            request = request.order(order.field, desc=order.descending)

        if query.limit is not None:
            request = request.range(query.offset, query.offset + query.limit - 1)

        return request

    async def fetch_records(self, table: str, query: RecordQuery) -> StoreResponse:
        try:
            result = await self._build(table, query).execute()
        except APIError as e:
            logger.warning(f"fetch_records on {table} rejected: {e.message}")
            return StoreResponse.failed(e.message or str(e))
        return StoreResponse.ok(result.data or [])

    async def get_record_by_id(
        self, table: str, record_id: int, query: Optional[RecordQuery] = None
    ) -> StoreResponse:
        try:
            result = await self._select(table, query).eq(ID_FIELD, record_id).limit(1).execute()
        except APIError as e:
            logger.warning(f"get_record_by_id on {table} rejected: {e.message}")
            return StoreResponse.failed(e.message or str(e))
        if not result.data:
            return StoreResponse.failed(ERROR_RECORD_NOT_FOUND)
        return StoreResponse.ok(result.data[0])

    async def create_record(self, table: str, records: list[dict]) -> StoreResponse:
        try:
            result = await self.client.table(table).insert(records).execute()
        except APIError as e:
            logger.warning(f"create_record on {table} rejected: {e.message}")
            return StoreResponse.failed(e.message or str(e))
        return StoreResponse.ok(result.data)
