"""
Global pytest configuration for mcp_datacloud tests.
"""

import sys
from pathlib import Path

# Add src to Python path so tests run without an install
sys.path.insert(0, str(Path(__file__).parent / "src"))
