"""MCP Data Cloud: Salesforce Data Cloud queries for MCP clients."""
