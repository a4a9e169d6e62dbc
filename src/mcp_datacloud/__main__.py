"""Main entry point for mcp_datacloud"""
from mcp_datacloud.server import run_mcp_server

def main():
    """MCP Data Cloud: Salesforce Data Cloud queries for MCP clients."""
    run_mcp_server()

if __name__ == "__main__":
    main()
