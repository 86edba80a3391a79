"""Tenant-scoped, paginated listing of the sheet-metal stock view.

Sort column, sort direction, view and tenant column are structural SQL and are
only ever taken from the allow-lists below. Tenant name, offset and page size
are always bound parameters.
"""
import re
import logging
from decimal import Decimal
from typing import Any, List, NamedTuple, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from core.errors import UpstreamStoreFailure
from core.inventory_db import ExclusiveSession
from schemas.inventory import InventoryRow, PageQuery, PageResult

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 20
DEFAULT_SORT_COLUMN = "Codice"
DEFAULT_SORT_DIR = "DESC"
SORT_DIRECTIONS = ("ASC", "DESC")

# (view column, response field, type) in the view's column order
COLUMNS: Tuple[Tuple[str, str, type], ...] = (
    ("Codice", "codice", str),
    ("Materiale", "materiale", str),
    ("Spessore", "spessore", float),
    ("DimX", "dimX", float),
    ("DimY", "dimY", float),
    ("Area", "area", float),
    ("Peso", "peso", float),
    ("Ritaglio", "ritaglio", int),
    ("Qta", "qta", int),
    ("Udata1", "udata1", str),
    ("Udata2", "udata2", str),
    ("Udata3", "udata3", str),
)

_SORTABLE = {name.lower(): column for column, field, _ in COLUMNS for name in (column, field)}

# a column whose driver type does not match reads as null
_NUMERIC = {int: (int,), float: (int, float, Decimal)}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*){0,2}$")


def normalize_page_size(size: Optional[int]) -> int:
    if size is None or size <= 0 or size > MAX_PAGE_SIZE:
        return MAX_PAGE_SIZE
    return size


def count_pages(total_count: int, page_size: int) -> int:
    if total_count <= 0:
        return 0
    return (total_count + page_size - 1) // page_size


def normalize_page(page: Optional[int], total_pages: int) -> int:
    """1-based page clamped into ``[0, total_pages]``; 0 only when there are no pages."""
    if page is None or page < 1:
        page = 1
    return min(page, total_pages)


def page_offset(page: int, page_size: int) -> int:
    return max(page - 1, 0) * page_size


def normalize_sort(field: Optional[str], direction: Optional[str]) -> Tuple[str, str]:
    column = DEFAULT_SORT_COLUMN
    if field:
        column = _SORTABLE.get(field.strip().lower())
        if column is None:
            logger.warning("ignoring unknown sorting field %r", field[:64])
            column = DEFAULT_SORT_COLUMN
    d = (direction or DEFAULT_SORT_DIR).strip().upper()
    if d not in SORT_DIRECTIONS:
        logger.warning("ignoring unknown sorting direction %r", d[:16])
        d = DEFAULT_SORT_DIR
    return column, d


class BuiltQuery(NamedTuple):
    sql: str
    params: Tuple[Any, ...]


class InventoryQueryBuilder:
    def __init__(self, view: str, tenant_column: str = "Udata1"):
        if not _IDENTIFIER.match(view or ""):
            raise ValueError(f"invalid inventory view name: {view!r}")
        if tenant_column not in [c for c, _, _ in COLUMNS]:
            raise ValueError(f"invalid tenant column: {tenant_column!r}")
        self.view = view
        self.tenant_column = tenant_column

    def _filter(self, tenant: Optional[str]) -> Tuple[str, List[Any]]:
        if tenant:
            return f" WHERE {self.tenant_column} = :p1", [tenant]
        return "", []

    def count(self, tenant: Optional[str]) -> BuiltQuery:
        where, params = self._filter(tenant)
        return BuiltQuery(f"SELECT COUNT(*) FROM {self.view}{where}", tuple(params))

    def page(self, tenant: Optional[str], sort_column: str, sort_dir: str, offset: int, size: int) -> BuiltQuery:
        if _SORTABLE.get(sort_column.lower()) != sort_column:
            raise ValueError(f"sort column not allowed: {sort_column!r}")
        if sort_dir not in SORT_DIRECTIONS:
            raise ValueError(f"sort direction not allowed: {sort_dir!r}")
        where, params = self._filter(tenant)
        n = len(params)
        sql = (
            f"SELECT * FROM {self.view}{where} "
            f"ORDER BY {sort_column} {sort_dir} "
            f"OFFSET :p{n + 1} ROWS FETCH NEXT :p{n + 2} ROWS ONLY"
        )
        return BuiltQuery(sql, tuple(params) + (int(offset), int(size)))


def _read(row: Sequence[Any], index: int, kind: type):
    try:
        value = row[index]
    except (IndexError, KeyError, TypeError):
        return None
    if value is None:
        return None
    if kind is str:
        return value if isinstance(value, str) else None
    if isinstance(value, bool) or not isinstance(value, _NUMERIC[kind]):
        return None
    try:
        return kind(value)
    except (TypeError, ValueError, ArithmeticError):
        return None


def map_row(row: Sequence[Any]) -> InventoryRow:
    values = {field: _read(row, i, kind) for i, (_, field, kind) in enumerate(COLUMNS)}
    return InventoryRow(**values)


class InventoryGateway:
    def __init__(self, session: ExclusiveSession, builder: InventoryQueryBuilder):
        self.session = session
        self.builder = builder

    def _run(self, source, query: BuiltQuery):
        try:
            return source.run_parameterized_query(query.sql, query.params)
        except SQLAlchemyError as e:
            logger.error("inventory query failed: %s", e, exc_info=True)
            raise UpstreamStoreFailure() from e

    def list_page(self, tenant: Optional[str], query: PageQuery) -> PageResult:
        tenant = tenant or None
        page_size = normalize_page_size(query.size)
        sort_column, sort_dir = normalize_sort(query.sorting_field, query.sorting_dir)

        with self.session.acquire() as source:
            counted = self._run(source, self.builder.count(tenant))
            total_count = 0
            if counted and counted[0] and counted[0][0] is not None:
                total_count = int(counted[0][0])

            total_pages = count_pages(total_count, page_size)
            page = normalize_page(query.page, total_pages)

            rows = []
            if total_pages:
                rows = self._run(
                    source,
                    self.builder.page(tenant, sort_column, sort_dir, page_offset(page, page_size), page_size),
                )

        return PageResult(
            results=[map_row(r) for r in rows],
            current_page=page,
            total_pages=total_pages,
            total_count=total_count,
        )
