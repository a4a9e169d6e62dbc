"""Tests for the Data Cloud and org REST clients."""

from unittest.mock import Mock, patch

import pytest
import requests

from mcp_datacloud.errors import QueryExecutionError
from mcp_datacloud.salesforce import DataCloudClient, OrgClient


def _response(status_code, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


class TestDataCloudClient:
    """Data Cloud query and metadata calls."""

    @pytest.mark.asyncio
    async def test_query_posts_sql(self):
        """Test query posts the SQL with a bearer token."""
        client = DataCloudClient("https://dc.example.com", "token123", timeout=10)
        with patch("mcp_datacloud.salesforce.requests.post",
                   return_value=_response(200, {"data": [["A"]]})) as post:
            result = await client.query("SELECT Name__c FROM T__dlm")

        assert result == {"data": [["A"]]}
        post.assert_called_once_with(
            "https://dc.example.com/api/v2/query",
            headers={"Authorization": "Bearer token123", "Content-Type": "application/json"},
            json={"sql": "SELECT Name__c FROM T__dlm"},
            timeout=10,
        )

    @pytest.mark.asyncio
    async def test_query_error_status(self):
        """Test a non-200 response raises QueryExecutionError."""
        client = DataCloudClient("https://dc.example.com", "token123")
        with patch("mcp_datacloud.salesforce.requests.post",
                   return_value=_response(400, text="syntax error")):
            with pytest.raises(QueryExecutionError, match="Query failed: 400"):
                await client.query("SELECT bad")

    @pytest.mark.asyncio
    async def test_query_transport_error(self):
        """Test connection errors raise QueryExecutionError."""
        client = DataCloudClient("https://dc.example.com", "token123")
        with patch("mcp_datacloud.salesforce.requests.post",
                   side_effect=requests.ConnectionError("unreachable")):
            with pytest.raises(QueryExecutionError, match="unreachable"):
                await client.query("SELECT 1")

    @pytest.mark.asyncio
    async def test_get_metadata(self):
        """Test metadata requests append the query string."""
        client = DataCloudClient("https://dc.example.com", "token123")
        with patch("mcp_datacloud.salesforce.requests.get",
                   return_value=_response(200, {"metadata": [{"name": "Account"}]})) as get:
            result = await client.get_metadata("entityType=DataModelObject")

        assert result == {"metadata": [{"name": "Account"}]}
        assert get.call_args.args[0] == "https://dc.example.com/api/v1/metadata?entityType=DataModelObject"

    @pytest.mark.asyncio
    async def test_get_metadata_error_status(self):
        """Test metadata failures raise QueryExecutionError."""
        client = DataCloudClient("https://dc.example.com", "token123")
        with patch("mcp_datacloud.salesforce.requests.get", return_value=_response(401)):
            with pytest.raises(QueryExecutionError, match="401"):
                await client.get_metadata()


class TestOrgClient:
    """Core API SOQL queries."""

    @pytest.mark.asyncio
    async def test_query_records_strips_attributes(self):
        """Test records come back without the attributes key."""
        with patch("mcp_datacloud.salesforce.Salesforce") as sf_class:
            sf_class.return_value.query_all.return_value = {
                "totalSize": 1,
                "records": [{"attributes": {"type": "Account"}, "Id": "001", "Name": "Acme"}],
            }
            client = OrgClient("https://org.example.com", "session")
            records = await client.query_records("SELECT Id, Name FROM Account")

        assert records == [{"Id": "001", "Name": "Acme"}]
        sf_class.return_value.query_all.assert_called_once_with("SELECT Id, Name FROM Account")
