"""Module entrypoint.

Allows:
    python -m mcp_alert_triage_server
"""

from __future__ import annotations

from mcp_alert_triage_server.server.alert_server import main

if __name__ == "__main__":
    main()
