"""Module entrypoint.

Allows:
    python -m mcp_health_check_server
"""

from __future__ import annotations

from mcp_health_check_server.server.health_server import main

if __name__ == "__main__":
    main()
