"""
Base service layer for unified database operations

Every table-backed service builds on BaseService so routes never touch SQL directly.
Expected failures come back as ServiceResult(success=False, error_type=...) rather than exceptions.
"""

import uuid
import logging
from typing import Dict, Any, List, Optional, Tuple, Iterable
from dataclasses import dataclass

import asyncpg

from signalpage.database.connection import get_db_pool

logger = logging.getLogger(__name__)

# Columns every table carries and that may be filtered/sorted on
COMMON_COLUMNS = {"id", "created_at", "updated_at"}

FILTER_OPERATORS = {
    "=": "=",
    "!=": "<>",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
    "in": "= ANY",
}


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    page_info: Optional[Dict[str, Any]] = None

    @property
    def first(self) -> Optional[Dict[str, Any]]:
        """First returned record, if any"""
        return self.data[0] if self.data else None


class InvalidQueryError(ValueError):
    """Raised when a query references a column the service does not expose"""


def serialize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert datetime and UUID values to JSON-friendly strings"""
    data = dict(row)
    for key, value in data.items():
        if hasattr(value, 'isoformat'):
            data[key] = value.isoformat()
        elif isinstance(value, uuid.UUID):
            data[key] = str(value)
    return data


class BaseService:
    """Base service wrapping parametrised asyncpg queries for one table"""

    def __init__(self, table_name: str, columns: Iterable[str], id_field: str = "id"):
        self.table_name = table_name
        self.id_field = id_field
        self.columns = set(columns) | COMMON_COLUMNS | {id_field}
        logger.info(f"BaseService initialized for table: {table_name}")

    # ------------------------------------------------------------------
    # Query builders (pure, no I/O)
    # ------------------------------------------------------------------

    def _check_column(self, name: str) -> str:
        if name not in self.columns:
            raise InvalidQueryError(f"Unknown column for {self.table_name}: {name}")
        return name

    def _build_where(
        self,
        filters: Optional[Dict[str, Any]],
        start_index: int = 1
    ) -> Tuple[str, List[Any]]:
        """
        Build a WHERE clause from filters

        Args:
            filters: {field: value} for equality, {field: None} for IS NULL,
                     or {field: {"op": "in", "value": [...]}} for other operators
            start_index: First positional parameter number to use

        Returns:
            Tuple of (sql fragment including WHERE, or empty string; params)
        """
        if not filters:
            return "", []

        clauses = []
        params: List[Any] = []
        index = start_index

        for field_name, filter_spec in filters.items():
            column = self._check_column(field_name)

            if isinstance(filter_spec, dict):
                op = filter_spec.get("op", "=")
                value = filter_spec.get("value")
            else:
                op = "="
                value = filter_spec

            if op not in FILTER_OPERATORS:
                raise InvalidQueryError(f"Unsupported filter operator: {op}")

            if value is None and op in ("=", "!="):
                clauses.append(f"{column} IS {'NOT ' if op == '!=' else ''}NULL")
                continue

            sql_op = FILTER_OPERATORS[op]
            if op == "in":
                clauses.append(f"{column} {sql_op}(${index})")
                params.append(list(value))
            else:
                clauses.append(f"{column} {sql_op} ${index}")
                params.append(value)
            index += 1

        return "WHERE " + " AND ".join(clauses), params

    def _build_order_by(self, order_by: Optional[List[Dict[str, str]]]) -> str:
        if not order_by:
            return ""
        parts = []
        for spec in order_by:
            column = self._check_column(spec["field"])
            direction = "DESC" if spec.get("dir", "asc").lower() == "desc" else "ASC"
            parts.append(f"{column} {direction}")
        return "ORDER BY " + ", ".join(parts)

    def _build_read_query(
        self,
        fields: Optional[List[str]],
        filters: Optional[Dict[str, Any]],
        order_by: Optional[List[Dict[str, str]]],
        limit: int,
        offset: int
    ) -> Tuple[str, List[Any]]:
        select = ", ".join(self._check_column(f) for f in fields) if fields else "*"
        where_sql, params = self._build_where(filters)
        order_sql = self._build_order_by(order_by)

        query = f"SELECT {select} FROM {self.table_name}"
        if where_sql:
            query += f" {where_sql}"
        if order_sql:
            query += f" {order_sql}"
        query += f" LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}"
        params.extend([limit, offset])
        return query, params

    def _build_insert_query(self, data: Dict[str, Any]) -> Tuple[str, List[Any]]:
        columns = [self._check_column(c) for c in data.keys()]
        placeholders = [f"${i}" for i in range(1, len(columns) + 1)]
        query = (
            f"INSERT INTO {self.table_name} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholders)}) RETURNING *"
        )
        return query, list(data.values())

    def _build_upsert_query(
        self,
        data: Dict[str, Any],
        conflict_fields: List[str]
    ) -> Tuple[str, List[Any]]:
        query, params = self._build_insert_query(data)
        conflict = ", ".join(self._check_column(c) for c in conflict_fields)
        updates = [f"{c} = EXCLUDED.{c}" for c in data.keys() if c not in conflict_fields]
        if updates:
            action = "DO UPDATE SET " + ", ".join(updates)
        else:
            action = "DO NOTHING"
        query = query.replace(" RETURNING *", f" ON CONFLICT ({conflict}) {action} RETURNING *")
        return query, params

    def _build_update_query(
        self,
        data: Dict[str, Any],
        filters: Dict[str, Any]
    ) -> Tuple[str, List[Any]]:
        if not filters:
            raise InvalidQueryError("Refusing to UPDATE without filters")
        sets = []
        params: List[Any] = []
        for i, (column, value) in enumerate(data.items(), start=1):
            sets.append(f"{self._check_column(column)} = ${i}")
            params.append(value)
        where_sql, where_params = self._build_where(filters, start_index=len(params) + 1)
        query = f"UPDATE {self.table_name} SET {', '.join(sets)} {where_sql} RETURNING *"
        return query, params + where_params

    def _build_delete_query(self, filters: Dict[str, Any]) -> Tuple[str, List[Any]]:
        if not filters:
            raise InvalidQueryError("Refusing to DELETE without filters")
        where_sql, params = self._build_where(filters)
        return f"DELETE FROM {self.table_name} {where_sql} RETURNING *", params

    def _build_count_query(self, filters: Optional[Dict[str, Any]]) -> Tuple[str, List[Any]]:
        where_sql, params = self._build_where(filters)
        query = f"SELECT COUNT(*) FROM {self.table_name}"
        if where_sql:
            query += f" {where_sql}"
        return query, params

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _get_pool(self):
        db_pool = get_db_pool()
        if not db_pool:
            raise RuntimeError("Database pool not initialized")
        return db_pool

    def _failure(self, operation: str, e: Exception) -> ServiceResult:
        """Map a database exception to a failed ServiceResult"""
        if isinstance(e, InvalidQueryError):
            logger.warning(f"{operation} rejected for {self.table_name}: {e}")
            return ServiceResult(success=False, error=str(e), error_type="INVALID_QUERY")
        if isinstance(e, asyncpg.UniqueViolationError):
            logger.warning(f"Unique constraint violation on {self.table_name}: {e}")
            return ServiceResult(success=False, error="Record already exists", error_type="CONFLICT_ERROR")
        if isinstance(e, asyncpg.ForeignKeyViolationError):
            return ServiceResult(success=False, error="Referenced record not found", error_type="FOREIGN_KEY_ERROR")
        if isinstance(e, asyncpg.PostgresError):
            logger.error(f"{operation} failed for {self.table_name}: {e}", exc_info=True)
            return ServiceResult(success=False, error=f"Database operation failed: {e}", error_type="DATABASE_ERROR")

        logger.error(f"{operation} failed for {self.table_name}: {e}", exc_info=True)
        return ServiceResult(success=False, error=str(e), error_type="EXECUTION_ERROR")

    async def _fetch(self, operation: str, query: str, params: List[Any]) -> List[Dict[str, Any]]:
        db_pool = self._get_pool()
        logger.info(f"Executing {operation}: {query}")
        logger.debug(f"Parameters: {params}")
        async with db_pool.acquire() as conn:
            rows = await conn.fetch(query, *params)
        return [serialize_row(row) for row in rows]

    async def create(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Create a new record

        Args:
            data: Dictionary of column values to insert

        Returns:
            ServiceResult with created record data
        """
        try:
            query, params = self._build_insert_query(data)
            rows = await self._fetch("INSERT", query, params)
            if not rows:
                raise RuntimeError("Insert operation failed - no data returned")
            return ServiceResult(success=True, data=rows, count=len(rows))
        except Exception as e:
            return self._failure("Create", e)

    async def upsert(self, data: Dict[str, Any], conflict_fields: List[str]) -> ServiceResult:
        """Insert a record, or update it when conflict_fields already match a row"""
        try:
            query, params = self._build_upsert_query(data, conflict_fields)
            rows = await self._fetch("UPSERT", query, params)
            return ServiceResult(success=True, data=rows, count=len(rows))
        except Exception as e:
            return self._failure("Upsert", e)

    async def read(
        self,
        fields: Optional[List[str]] = None,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[List[Dict[str, str]]] = None,
        limit: int = 100,
        offset: int = 0
    ) -> ServiceResult:
        """
        Read records

        Args:
            fields: Columns to select (default: all)
            filters: See _build_where
            order_by: List of ordering specs [{"field": "created_at", "dir": "desc"}]
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            ServiceResult with matched records
        """
        try:
            query, params = self._build_read_query(fields, filters, order_by, limit, offset)
            rows = await self._fetch("READ", query, params)

            page_info = None
            if offset > 0 or limit < 1000:
                page_info = {"limit": limit, "offset": offset}

            return ServiceResult(success=True, data=rows, count=len(rows), page_info=page_info)
        except Exception as e:
            return self._failure("Read", e)

    async def get_by_id(self, record_id: str, filters: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """
        Get a single record by primary key

        Extra filters (typically user_id) scope the lookup; a miss returns RESOURCE_NOT_FOUND.
        """
        scoped = {self.id_field: record_id, **(filters or {})}
        result = await self.read(filters=scoped, limit=1)
        if result.success and not result.data:
            return ServiceResult(
                success=False,
                error=f"Record not found with ID: {record_id}",
                error_type="RESOURCE_NOT_FOUND"
            )
        return result

    async def update(
        self,
        record_id: str,
        data: Dict[str, Any],
        filters: Optional[Dict[str, Any]] = None
    ) -> ServiceResult:
        """
        Update a record by primary key

        Args:
            record_id: Primary key value of record to update
            data: Dictionary of column values to update
            filters: Extra scoping filters (typically user_id)

        Returns:
            ServiceResult with updated record data, RESOURCE_NOT_FOUND if nothing matched
        """
        scoped = {self.id_field: record_id, **(filters or {})}
        result = await self.update_where(scoped, data)
        if result.success and not result.data:
            return ServiceResult(
                success=False,
                error=f"Record with id {record_id} not found",
                error_type="RESOURCE_NOT_FOUND"
            )
        return result

    async def update_where(self, filters: Dict[str, Any], data: Dict[str, Any]) -> ServiceResult:
        """Update every record matching filters"""
        if not data:
            return ServiceResult(success=False, error="No fields provided for update", error_type="INVALID_QUERY")
        try:
            query, params = self._build_update_query(data, filters)
            rows = await self._fetch("UPDATE", query, params)
            return ServiceResult(success=True, data=rows, count=len(rows))
        except Exception as e:
            return self._failure("Update", e)

    async def delete(self, record_id: str, filters: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """
        Delete a record by primary key

        Returns:
            ServiceResult with the deleted record, RESOURCE_NOT_FOUND if nothing matched
        """
        scoped = {self.id_field: record_id, **(filters or {})}
        try:
            query, params = self._build_delete_query(scoped)
            rows = await self._fetch("DELETE", query, params)
        except Exception as e:
            return self._failure("Delete", e)

        if not rows:
            return ServiceResult(
                success=False,
                error=f"Record not found with ID: {record_id}",
                error_type="RESOURCE_NOT_FOUND"
            )
        return ServiceResult(success=True, data=rows, count=len(rows))

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """Count records matching filters; the total is returned in ServiceResult.count"""
        try:
            query, params = self._build_count_query(filters)
            db_pool = self._get_pool()
            logger.info(f"Executing COUNT: {query}")
            async with db_pool.acquire() as conn:
                total = await conn.fetchval(query, *params)
            return ServiceResult(success=True, data=[], count=int(total or 0))
        except Exception as e:
            return self._failure("Count", e)
