"""Data Cloud query definitions.

Each definition pairs the SQL to run with the mapping from positional result
rows to named records. Data Cloud returns rows as arrays in SELECT order, so
the SELECT column list and the record field names come from the same ordered
``fields`` tuple.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import InvalidQueryDefinitionError, TransformError
from .sql_escape import escape_sql_string

DEFAULT_LIMIT = 100


class QueryKind(Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class QueryDefinition:
    """Immutable description of a Data Cloud query and its result shape."""
    name: str
    kind: QueryKind
    table: str
    fields: Tuple[Tuple[str, str], ...]
    limit: int = DEFAULT_LIMIT
    sql: Optional[str] = None
    builder: Optional[Callable[["QueryDefinition", Mapping[str, Any]], str]] = None

    @property
    def columns(self) -> List[str]:
        return [column for column, _ in self.fields]

    @property
    def field_names(self) -> List[str]:
        return [field for _, field in self.fields]

    @property
    def base_sql(self) -> str:
        """SELECT ... FROM clause without WHERE or LIMIT."""
        return f"SELECT {', '.join(self.columns)} FROM {self.table}"

    def build_query(self, filters: Optional[Mapping[str, Any]] = None) -> str:
        if self.builder is None:
            raise InvalidQueryDefinitionError(
                f"Query definition '{self.name}' has no query builder"
            )
        return self.builder(self, filters or {})

    def transform(self, rows: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
        """Map positional rows to records, one record per row, in order."""
        names = self.field_names
        records = []
        for index, row in enumerate(rows):
            if len(row) < len(names):
                raise TransformError(
                    f"Row {index} of '{self.name}' has {len(row)} values, "
                    f"expected {len(names)}"
                )
            records.append({name: row[position] for position, name in enumerate(names)})
        return records


def resolve_sql(definition: QueryDefinition, filters: Optional[Mapping[str, Any]] = None) -> str:
    """Return the SQL text a definition runs for the given filters."""
    if definition.kind is QueryKind.DYNAMIC and definition.builder is not None:
        return definition.build_query(filters)
    if definition.kind is QueryKind.STATIC and definition.sql:
        return definition.sql
    raise InvalidQueryDefinitionError(
        f"Query definition '{definition.name}' must have either sql or build_query"
    )


def static_query(name: str, table: str, fields: Tuple[Tuple[str, str], ...],
                 limit: int = DEFAULT_LIMIT) -> QueryDefinition:
    """Create a definition whose SQL never changes."""
    columns = ", ".join(column for column, _ in fields)
    return QueryDefinition(
        name=name,
        kind=QueryKind.STATIC,
        table=table,
        fields=fields,
        limit=limit,
        sql=f"SELECT {columns} FROM {table} LIMIT {limit}",
    )


def dynamic_query(name: str, table: str, fields: Tuple[Tuple[str, str], ...],
                  builder: Callable[[QueryDefinition, Mapping[str, Any]], str],
                  limit: int = DEFAULT_LIMIT) -> QueryDefinition:
    """Create a definition whose SQL is built from a filter set."""
    return QueryDefinition(
        name=name,
        kind=QueryKind.DYNAMIC,
        table=table,
        fields=fields,
        limit=limit,
        builder=builder,
    )


def _build_unified_b2b_query(definition: QueryDefinition, filters: Mapping[str, Any]) -> str:
    conditions = []

    # Falsy values count as absent
    if filters.get("accountName"):
        conditions.append(
            f"ssot__Name__c LIKE '%{escape_sql_string(filters['accountName'])}%'"
        )
    if filters.get("accountSource"):
        conditions.append(
            f"ssot__AccountSource__c = '{escape_sql_string(filters['accountSource'])}'"
        )
    if filters.get("segment"):
        conditions.append(
            f"ssot__AccountTypeId__c = '{escape_sql_string(filters['segment'])}'"
        )

    query = definition.base_sql
    if conditions:
        query += f" WHERE {' AND '.join(conditions)}"
    return f"{query} LIMIT {definition.limit}"


ENGAGEMENT_QUERY = static_query(
    name="userEngagement",
    table="UserEngagement__dlm",
    fields=(
        ("ClientSession__c", "clientSession"),
        ("CreatedDate__c", "createdDate"),
        ("EntityType__c", "entityType"),
        ("EventIdentifier__c", "eventIdentifier"),
        ("EventName__c", "eventName"),
    ),
)

UNIFIED_B2B_QUERY = dynamic_query(
    name="unifiedB2B",
    table="UnifiedssotAccountB2b__dlm",
    fields=(
        ("ssot__Name__c", "name"),
        ("ssot__Number__c", "number"),
        ("ssot__AccountSource__c", "accountSource"),
        ("ssot__AccountTypeId__c", "accountTypeId"),
        ("ssot__CreatedDate__c", "createdDate"),
        ("ssot__LastModifiedDate__c", "lastModifiedDate"),
        ("ssot__ParentAccountId__c", "parentAccountId"),
        ("ssot__Id__c", "id"),
    ),
    builder=_build_unified_b2b_query,
)
