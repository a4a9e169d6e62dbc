"""Connection authorization backed by the OS keyring."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
import keyring
from keyring.errors import PasswordDeleteError
from .errors import AuthorizationError
from .salesforce import DataCloudClient, OrgClient

logger = logging.getLogger(__name__)

CREDENTIALS_SERVICE_NAME = "mcp_datacloud"
INSTANCE_URL_KEY = "instance_url"
ACCESS_TOKEN_KEY = "access_token"


@dataclass
class ConnectionCredentials:
    """Stored credentials for one named connection."""
    connection_name: str
    instance_url: str
    access_token: str


def _username(connection_name: str, key: str) -> str:
    return f"{connection_name}:{key}"


class ConnectionAuthorizer:
    """Hands out authorized clients for named connections."""

    def __init__(self, service_name: str = CREDENTIALS_SERVICE_NAME, timeout: Optional[float] = None):
        self.service_name = service_name
        self.timeout = timeout

    def load_credentials(self, connection_name: str) -> ConnectionCredentials:
        """Load a connection's credentials from secure storage."""
        try:
            logger.debug(f"Loading credentials for '{connection_name}' from keyring")
            instance_url = keyring.get_password(
                self.service_name, _username(connection_name, INSTANCE_URL_KEY))
            access_token = keyring.get_password(
                self.service_name, _username(connection_name, ACCESS_TOKEN_KEY))
        except Exception as e:
            logger.error(f"Error loading credentials: {str(e)}")
            raise AuthorizationError(
                f"Could not read credentials for connection '{connection_name}': {str(e)}"
            ) from e

        if not instance_url or not access_token:
            raise AuthorizationError(f"No credentials stored for connection '{connection_name}'")
        return ConnectionCredentials(connection_name, instance_url, access_token)

    def store_credentials(self, connection_name: str, instance_url: str, access_token: str) -> bool:
        """Save a connection's credentials to secure storage."""
        try:
            logger.debug(f"Saving credentials for '{connection_name}' to keyring")
            keyring.set_password(
                self.service_name, _username(connection_name, INSTANCE_URL_KEY), instance_url)
            keyring.set_password(
                self.service_name, _username(connection_name, ACCESS_TOKEN_KEY), access_token)
            return True
        except Exception as e:
            logger.error(f"Error saving credentials: {str(e)}")
            return False

    def clear_credentials(self, connection_name: str) -> None:
        """Remove a connection's credentials. Missing entries are ignored."""
        for key in (INSTANCE_URL_KEY, ACCESS_TOKEN_KEY):
            try:
                keyring.delete_password(self.service_name, _username(connection_name, key))
            except PasswordDeleteError:
                logger.debug(f"No '{key}' stored for '{connection_name}'")

    async def authorize(self, connection_name: str) -> DataCloudClient:
        """Return a Data Cloud client for the named connection."""
        credentials = await asyncio.to_thread(self.load_credentials, connection_name)
        logger.info(f"Authorized Data Cloud connection '{connection_name}' ({credentials.instance_url})")
        return DataCloudClient(credentials.instance_url, credentials.access_token, timeout=self.timeout)

    async def authorize_org(self, connection_name: str) -> OrgClient:
        """Return a core API client for the named org connection."""
        credentials = await asyncio.to_thread(self.load_credentials, connection_name)
        logger.info(f"Authorized org connection '{connection_name}' ({credentials.instance_url})")
        try:
            return OrgClient(credentials.instance_url, credentials.access_token)
        except Exception as e:
            raise AuthorizationError(
                f"Could not connect to org '{connection_name}': {str(e)}"
            ) from e
