"""Salesforce Data Cloud and core API clients."""
import asyncio
import logging
import requests
from typing import Dict, Any, List, Optional
from simple_salesforce import Salesforce
from .errors import QueryExecutionError

logger = logging.getLogger(__name__)


class DataCloudClient:
    """Authorized client for the Data Cloud query and metadata APIs."""

    def __init__(self, instance_url: str, access_token: str, timeout: Optional[float] = None):
        self.instance_url = instance_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json"
        }

    async def query(self, sql: str) -> Dict[str, Any]:
        """Execute a Data Cloud SQL query. Rows come back positionally under "data"."""
        return await asyncio.to_thread(self._query, sql)

    def _query(self, sql: str) -> Dict[str, Any]:
        url = f"{self.instance_url}/api/v2/query"
        try:
            response = requests.post(url, headers=self.headers, json={"sql": sql}, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Query request failed: {str(e)}")
            raise QueryExecutionError(f"Query request failed: {str(e)}") from e

        if response.status_code == 200:
            return response.json()
        else:
            logger.error(f"Query failed: {response.text}")
            raise QueryExecutionError(f"Query failed: {response.status_code}")

    async def get_metadata(self, query_string: str = "") -> Dict[str, Any]:
        """Fetch Data Cloud metadata, filtered by an encoded query string."""
        return await asyncio.to_thread(self._get_metadata, query_string)

    def _get_metadata(self, query_string: str) -> Dict[str, Any]:
        url = f"{self.instance_url}/api/v1/metadata"
        if query_string:
            url = f"{url}?{query_string}"
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Metadata request failed: {str(e)}")
            raise QueryExecutionError(f"Metadata request failed: {str(e)}") from e

        if response.status_code == 200:
            return response.json()
        else:
            logger.error(f"Metadata request failed: {response.text}")
            raise QueryExecutionError(f"Metadata request failed: {response.status_code}")


class OrgClient:
    """Authorized client for SOQL queries against a Salesforce org."""

    def __init__(self, instance_url: str, access_token: str):
        self.instance_url = instance_url
        self.sf = Salesforce(instance_url=instance_url, session_id=access_token)

    async def query_records(self, soql: str) -> List[Dict[str, Any]]:
        """Run a SOQL query and return its records without the attributes key."""
        logger.info(f"Executing SOQL query: {soql}")
        results = await asyncio.to_thread(self.sf.query_all, soql)
        return [
            {key: value for key, value in record.items() if key != "attributes"}
            for record in results.get("records", [])
        ]
