"""MCP Data Cloud Extension."""
import logging
import os
from typing import Dict, Any, Optional
from mcp.server.fastmcp.server import FastMCP
from .authorization import ConnectionAuthorizer
from .config import Config, load_config
from .errors import AuthorizationError, ConfigurationError
from .filters import build_query_params
from .queries import ENGAGEMENT_QUERY, UNIFIED_B2B_QUERY
from .query_service import DataCloudQueryService
from .query_validator import QueryValidator

logger = logging.getLogger(__name__)

ACCOUNTS_QUERY = "SELECT Id, Name FROM Account"
DATA_MODEL_OBJECT_PARAM = "entityType=DataModelObject"
REQUIRED_EVENT_FIELDS = ("ActionDeveloperName", "EventType", "SourceObjectDeveloperName")

SYSTEM_INSTRUCTIONS = """MCP Data Cloud Extension.

Read-only access to Salesforce Data Cloud. Prefer the dedicated tools
(datacloud_engagement, datacloud_unified_b2b, datacloud_models) over raw SQL.
Raw queries passed to datacloud_query must be a single SELECT statement and
should include a LIMIT clause.
"""


def _authorization_failure(e: AuthorizationError) -> Dict[str, Any]:
    logger.error(f"Authorization failed: {str(e)}")
    return {"success": False, "error": "Authorization failed", "message": str(e)}


async def get_engagement(config: Config, authorizer) -> Dict[str, Any]:
    """User engagement records from UserEngagement__dlm."""
    service = DataCloudQueryService.from_config(config, authorizer)
    try:
        return await service.execute_query_with_filters(ENGAGEMENT_QUERY, {})
    except AuthorizationError as e:
        return _authorization_failure(e)


async def get_unified_b2b(config: Config, authorizer,
                          account_name: Optional[str] = None,
                          account_source: Optional[str] = None,
                          segment: Optional[str] = None) -> Dict[str, Any]:
    """Unified B2B account records, optionally filtered."""
    service = DataCloudQueryService.from_config(config, authorizer)
    raw_filters = {
        "accountName": account_name,
        "accountSource": account_source,
        "segment": segment,
    }
    try:
        return await service.execute_query_with_filters(UNIFIED_B2B_QUERY, raw_filters)
    except AuthorizationError as e:
        return _authorization_failure(e)


async def get_models(config: Config, authorizer,
                     entity_category: Optional[str] = None,
                     entity_name: Optional[str] = None) -> Dict[str, Any]:
    """Data Model Object metadata, optionally filtered by category or name."""
    service = DataCloudQueryService.from_config(config, authorizer)
    try:
        context = await service.get_context()
        query_string = build_query_params(
            {"entityCategory": entity_category, "entityName": entity_name},
            [DATA_MODEL_OBJECT_PARAM],
        )
        logger.info(f"Querying Data Cloud models: {query_string}")
        response = await context.get_metadata(query_string)
        models = response.get("metadata") or []
        logger.info(f"Metadata API response: {len(models)} DMOs found")
        return {"models": models}
    except Exception as e:
        logger.error(f"Error retrieving Data Cloud models: {str(e)}")
        return {
            "error": "Failed to retrieve Data Cloud models",
            "message": str(e),
        }


async def run_query(config: Config, authorizer, sql: str) -> Dict[str, Any]:
    """Validate and run a raw Data Cloud SQL query."""
    is_valid, error_message = QueryValidator.validate_query(sql)
    if not is_valid:
        return {"success": False, "error": error_message}

    service = DataCloudQueryService.from_config(config, authorizer)
    try:
        return await service.execute_raw_query(sql)
    except AuthorizationError as e:
        return _authorization_failure(e)


async def _query_accounts(authorizer, org_name: str):
    logger.info(f"Getting org '{org_name}' connection...")
    org = await authorizer.authorize_org(org_name)
    accounts = await org.query_records(ACCOUNTS_QUERY)
    logger.info(f"For org '{org_name}', found {len(accounts)} Accounts")
    return accounts


async def get_accounts(config: Config, authorizer) -> Dict[str, Any]:
    """
    Accounts from the org named by SALESFORCE_ORG_NAME.

    When SALESFORCE_ORG_NAME is unset, or its connection or query fails, the
    org behind the Data Cloud connection (DC_CONNECTION_NAME) is queried instead.
    """
    org_name = config.salesforce_org_name
    if org_name and org_name != config.dc_connection_name:
        try:
            accounts = await _query_accounts(authorizer, org_name)
            return {"success": True, "org": org_name, "records": accounts}
        except Exception as e:
            logger.error(f"Account query against '{org_name}' failed, falling back: {str(e)}")

    fallback_name = config.dc_connection_name
    try:
        accounts = await _query_accounts(authorizer, fallback_name)
        return {"success": True, "org": fallback_name, "records": accounts}
    except AuthorizationError as e:
        return _authorization_failure(e)
    except Exception as e:
        logger.error(f"Account query failed: {str(e)}")
        return {"success": False, "error": str(e)}


async def handle_data_action_event(config: Config, authorizer, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Log Data Cloud data action events and run the configured follow-up query."""
    events = payload.get("events") if isinstance(payload, dict) else None
    if not isinstance(events, list) or not events:
        return {"success": False, "error": "Payload must contain a non-empty 'events' list"}

    for index, event in enumerate(events):
        missing = [field for field in REQUIRED_EVENT_FIELDS if not isinstance(event, dict) or field not in event]
        if missing:
            return {
                "success": False,
                "error": f"Event {index} is missing required fields: {', '.join(missing)}"
            }

    schemas = payload.get("schemas")
    if not isinstance(schemas, list):
        schemas = []
    schema_ids = ",".join(str(s.get("schemaId")) for s in schemas if isinstance(s, dict)) or "n/a"
    logger.info(f"Data action event: {len(events)} events for schemas {schema_ids}")

    for event in events:
        logger.info(
            f"Got action '{event['ActionDeveloperName']}', event type '{event['EventType']}' "
            f"triggered by {event.get('EventPrompt')} on object '{event['SourceObjectDeveloperName']}' "
            f"published on {event.get('EventPublishDateTime')}"
        )

    result = {"success": True, "count": len(events)}
    if config.data_cloud_org and config.data_cloud_query:
        service = DataCloudQueryService(authorizer, config.data_cloud_org)
        try:
            result["queryResult"] = await service.execute_raw_query(config.data_cloud_query)
        except AuthorizationError as e:
            result["queryResult"] = _authorization_failure(e)
    return result


class MCPDataCloudExtension(FastMCP):
    """MCP Data Cloud Extension."""

    def __init__(self, config: Config, authorizer: Optional[ConnectionAuthorizer] = None):
        """Initialize the extension."""
        super().__init__(
            name="mcp_datacloud",
            instructions=SYSTEM_INSTRUCTIONS,
        )
        self.config = config
        self.authorizer = authorizer or ConnectionAuthorizer(timeout=config.request_timeout)
        self._setup_tools()

    def _setup_tools(self):
        """Set up the extension's tools."""
        @self.tool("datacloud_engagement")
        async def engagement() -> dict:
            """Return user engagement records from Data Cloud."""
            return await get_engagement(self.config, self.authorizer)

        @self.tool("datacloud_unified_b2b")
        async def unified_b2b(
            account_name: Optional[str] = None,
            account_source: Optional[str] = None,
            segment: Optional[str] = None
        ) -> dict:
            """Return unified B2B accounts. account_name is a partial match, the others exact."""
            return await get_unified_b2b(
                self.config, self.authorizer, account_name, account_source, segment)

        @self.tool("datacloud_models")
        async def models(
            entity_category: Optional[str] = None,
            entity_name: Optional[str] = None
        ) -> dict:
            """List Data Model Objects (categories: Profile, Engagement, Related)."""
            return await get_models(self.config, self.authorizer, entity_category, entity_name)

        @self.tool("datacloud_query")
        async def query(sql: str) -> dict:
            """Execute a read-only Data Cloud SQL query."""
            return await run_query(self.config, self.authorizer, sql)

        @self.tool("salesforce_accounts")
        async def accounts() -> dict:
            """Return Accounts from SALESFORCE_ORG_NAME, falling back to the Data Cloud connection's org."""
            return await get_accounts(self.config, self.authorizer)

        @self.tool("datacloud_data_action_event")
        async def data_action_event(payload: dict) -> dict:
            """Handle a Data Cloud data action event payload."""
            return await handle_data_action_event(self.config, self.authorizer, payload)


def run_mcp_server():
    """Run the extension server."""
    # Create logs directory if it doesn't exist
    log_dir = os.path.join(os.path.dirname(__file__), 'logs')
    os.makedirs(log_dir, exist_ok=True)

    # Set up logging to both file and console
    log_file = os.path.join(log_dir, 'mcp_datacloud.log')
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(f"Startup failed: {str(e)}")
        raise SystemExit(1) from e

    logging.getLogger().setLevel(config.log_level)
    logger.info(f"Starting MCP Data Cloud Extension - Logging to {log_file}")
    extension = MCPDataCloudExtension(config)
    extension.run()


if __name__ == "__main__":
    run_mcp_server()
