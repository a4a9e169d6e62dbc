"""Environment configuration for the Data Cloud extension."""
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Config:
    dc_connection_name: str
    salesforce_org_name: Optional[str] = None
    data_cloud_org: Optional[str] = None
    data_cloud_query: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL
    request_timeout: Optional[float] = None


def _status(value: Optional[str]) -> str:
    return "set" if value else "not set"


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Read configuration from environment variables.

    DC_CONNECTION_NAME is required since every Data Cloud tool needs it.
    DATA_CLOUD_ORG and DATA_CLOUD_QUERY drive the data action event query
    and should be set together.
    """
    env = os.environ if environ is None else environ

    dc_connection_name = env.get("DC_CONNECTION_NAME") or None
    salesforce_org_name = env.get("SALESFORCE_ORG_NAME") or None
    data_cloud_org = env.get("DATA_CLOUD_ORG") or None
    data_cloud_query = env.get("DATA_CLOUD_QUERY") or None

    logger.info("Environment configuration:")
    logger.info(f"  DC_CONNECTION_NAME: {_status(dc_connection_name)}")
    logger.info(f"  SALESFORCE_ORG_NAME: {_status(salesforce_org_name)}")
    logger.info(f"  DATA_CLOUD_ORG: {_status(data_cloud_org)}")
    logger.info(f"  DATA_CLOUD_QUERY: {_status(data_cloud_query)}")

    if not dc_connection_name:
        logger.error("Missing required environment variable DC_CONNECTION_NAME")
        raise ConfigurationError(
            "DC_CONNECTION_NAME must be set: Data Cloud functionality is core to this extension"
        )

    if bool(data_cloud_org) != bool(data_cloud_query):
        logger.warning(
            "DATA_CLOUD_ORG and DATA_CLOUD_QUERY should both be set or both be unset "
            "for data action event queries to work"
        )

    timeout_value = env.get("MCP_DATACLOUD_REQUEST_TIMEOUT")
    try:
        request_timeout = float(timeout_value) if timeout_value else None
    except ValueError as e:
        raise ConfigurationError(
            f"MCP_DATACLOUD_REQUEST_TIMEOUT must be a number of seconds, got '{timeout_value}'"
        ) from e

    log_level = (env.get("MCP_DATACLOUD_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    # getLevelName maps known names to their numeric level
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigurationError(
            f"MCP_DATACLOUD_LOG_LEVEL must be a logging level name, got '{log_level}'"
        )

    return Config(
        dc_connection_name=dc_connection_name,
        salesforce_org_name=salesforce_org_name,
        data_cloud_org=data_cloud_org,
        data_cloud_query=data_cloud_query,
        log_level=log_level,
        request_timeout=request_timeout,
    )
