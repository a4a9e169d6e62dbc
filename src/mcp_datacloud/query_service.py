"""Data Cloud query execution service."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from . import filters as filter_utils
from .errors import AuthorizationError
from .queries import QueryDefinition, resolve_sql

QUERY_BUILD_FAILED = "Query build failed"


def _timestamp() -> str:
    # Same shape as JavaScript's Date.toISOString(), e.g. 2024-05-01T12:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DataCloudQueryService:
    """
    Runs query definitions against Data Cloud and wraps the results.

    The authorized connection is fetched on first use and reused for the rest
    of the instance's life, so an instance should serve one logical request.
    Query-level failures come back as error envelopes; authorization failures
    are raised as AuthorizationError.
    """

    def __init__(self, authorizer: Any, connection_name: str, logger: Optional[Any] = None):
        self.authorizer = authorizer
        self.connection_name = connection_name
        self.logger = logger or logging.getLogger(__name__)
        self._context = None
        self._pending: Optional[asyncio.Future] = None

    @classmethod
    def from_config(cls, config, authorizer, logger: Optional[Any] = None) -> "DataCloudQueryService":
        """Create a service for the Data Cloud connection named in config."""
        return cls(authorizer, config.dc_connection_name, logger)

    async def get_context(self):
        """Return the cached authorized context, authorizing once if needed."""
        if self._context is not None:
            return self._context

        # The pending task is stored before it is awaited so that concurrent
        # first callers share one authorization.
        if self._pending is None:
            self.logger.info(f"Getting Data Cloud connection for '{self.connection_name}'...")
            self._pending = asyncio.ensure_future(self._authorize())
            self._pending.add_done_callback(self._authorization_done)

        # Shielded so a cancelled caller does not cancel the shared task
        context = await asyncio.shield(self._pending)
        self._context = context
        return context

    def _authorization_done(self, task: asyncio.Future) -> None:
        if not task.cancelled() and task.exception() is None:
            self._context = task.result()
        elif self._pending is task:
            # Failed or cancelled: the next call authorizes again
            self._pending = None

    async def _authorize(self):
        try:
            return await self.authorizer.authorize(self.connection_name)
        except AuthorizationError:
            raise
        except Exception as e:
            raise AuthorizationError(
                f"Failed to authorize connection '{self.connection_name}': {str(e)}"
            ) from e

    async def execute_query(self, definition: QueryDefinition,
                            filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Run a query definition and return a success or error envelope."""
        filters = {} if filters is None else filters

        # Authorization errors are not turned into envelopes
        context = await self.get_context()

        try:
            query = resolve_sql(definition, filters)
            self.logger.info(f"Executing Data Cloud query: {query}")
            response = await context.query(query)
            records = definition.transform((response or {}).get("data") or [])

            return {
                "success": True,
                "records": records,
                "metadata": {
                    "totalRecords": len(records),
                    "query": query,
                    "filters": filters,
                    "executedAt": _timestamp(),
                },
            }
        except Exception as e:
            self.logger.error(f"Error executing Data Cloud query: {str(e)}")
            return {
                "success": False,
                "error": "Failed to execute Data Cloud query",
                "message": str(e),
                "query": self._fallback_query(definition),
                "filters": filters,
            }

    @staticmethod
    def _fallback_query(definition: QueryDefinition) -> str:
        """Unfiltered SQL for error reports."""
        try:
            return resolve_sql(definition)
        except Exception:
            return QUERY_BUILD_FAILED

    async def execute_query_with_filters(self, definition: QueryDefinition,
                                         raw_filters: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Clean raw_filters and run the definition with what remains."""
        return await self.execute_query(definition, self.clean_filters(raw_filters))

    async def execute_raw_query(self, sql: str,
                                transform: Optional[Callable[[List[Any]], List[Any]]] = None) -> Dict[str, Any]:
        """Run literal SQL, optionally transforming the rows."""
        context = await self.get_context()

        try:
            self.logger.info(f"Executing raw Data Cloud query: {sql}")
            response = await context.query(sql)
            rows = (response or {}).get("data") or []
            records = transform(rows) if transform else rows

            return {
                "success": True,
                "records": records,
                "metadata": {
                    "totalRecords": len(records),
                    "query": sql,
                    "executedAt": _timestamp(),
                },
            }
        except Exception as e:
            self.logger.error(f"Error executing raw Data Cloud query: {str(e)}")
            return {
                "success": False,
                "error": "Failed to execute raw Data Cloud query",
                "message": str(e),
                "query": sql,
            }

    @staticmethod
    def clean_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return filter_utils.clean_filters(filters)

    @staticmethod
    def build_query_params(params: Mapping[str, Any], base_params: Iterable[str] = ()) -> str:
        return filter_utils.build_query_params(params, base_params)
