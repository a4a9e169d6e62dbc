#!/usr/bin/env python3
"""Entry point for MCP Data Cloud extension."""
from mcp_datacloud.server import run_mcp_server

if __name__ == "__main__":
    run_mcp_server()
