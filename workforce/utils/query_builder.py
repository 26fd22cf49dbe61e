# workforce/utils/query_builder.py
"""
Filter, sort and pagination composition for list endpoints

The builder accumulates SQLAlchemy predicates (every value is a bound
parameter) and only lets callers sort by columns from an explicit
allow-list. The row query and the count query are built from the same
predicate list, the count never carries LIMIT/OFFSET.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def _clamp_int(value: Any, default: int, low: int, high: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    number = max(number, low)
    if high is not None:
        number = min(number, high)
    return number


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    pagination: Dict[str, Any] = field(default_factory=dict)


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


class QueryBuilder:
    """Compose a parameterised SELECT plus its matching COUNT

    sortable maps request-facing names (camelCase or snake_case) to columns;
    anything outside it falls back to default_sort.
    """

    def __init__(self, model, sortable: Mapping[str, Any], default_sort: str = "created_at"):
        self.model = model
        self.sortable = dict(sortable)
        self.default_sort = default_sort
        self._restrictions: List[Any] = []
        self._predicates: List[Any] = []
        self._order = None
        self.page = DEFAULT_PAGE
        self.limit = DEFAULT_LIMIT

    # Predicates

    def restrict(self, predicate) -> "QueryBuilder":
        """Role-based restriction; always emitted ahead of user supplied filters"""
        if predicate is not None:
            self._restrictions.append(predicate)
        return self

    def where(self, predicate) -> "QueryBuilder":
        if predicate is not None:
            self._predicates.append(predicate)
        return self

    def filter_eq(self, column, value) -> "QueryBuilder":
        if value is not None:
            self._predicates.append(column == value)
        return self

    def search(self, term: Optional[str], *columns) -> "QueryBuilder":
        # wildcards inside term are passed through as-is
        if term is None:
            return self
        term = term.strip()
        if not term or not columns:
            return self
        pattern = f"%{term}%"
        self._predicates.append(or_(*[column.ilike(pattern) for column in columns]))
        return self

    @property
    def predicates(self) -> List[Any]:
        return self._restrictions + self._predicates

    # Ordering and paging

    def resolve_sort_column(self, sort_by: Optional[str]):
        if sort_by and sort_by in self.sortable:
            return self.sortable[sort_by]
        return self.sortable[self.default_sort]

    def order_by(self, sort_by: Optional[str] = None, sort_order: Optional[str] = None) -> "QueryBuilder":
        column = self.resolve_sort_column(sort_by)
        direction = (sort_order or "").lower()
        if direction == "asc":
            self._order = [column.asc(), self.model.id.asc()]
        else:
            self._order = [column.desc(), self.model.id.desc()]
        return self

    def paginate(self, page: Any = None, limit: Any = None) -> "QueryBuilder":
        self.page = _clamp_int(page, DEFAULT_PAGE, 1)
        self.limit = _clamp_int(limit, DEFAULT_LIMIT, 1, MAX_LIMIT)
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    # Statements

    def count_statement(self):
        return select(func.count(self.model.id)).where(*self.predicates)

    def select_statement(self, *options):
        if self._order is None:
            self.order_by()
        stmt = select(self.model).where(*self.predicates)
        if options:
            stmt = stmt.options(*options)
        return stmt.order_by(*self._order).limit(self.limit).offset(self.offset)

    def fetch(self, db: Session, *options) -> Page:
        total = db.execute(self.count_statement()).scalar_one()
        items = list(db.execute(self.select_statement(*options)).scalars().unique())
        return Page(items=items, pagination=build_pagination(self.page, self.limit, total))
