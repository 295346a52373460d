"""
Built-in tools that every installation offers.
"""
import json
from datetime import datetime

from aia_orchestrator.plugins.tools.auto_tool import AutoTool


class CurrentTimeTool(AutoTool):
    """Report the local date and time."""

    def __init__(self, registry=None):
        super().__init__(
            name="get_current_time",
            description="Get the current date and time",
            registry=registry,
        )

    async def execute(self, **params) -> str:
        now = datetime.now()
        return json.dumps(
            {
                "datetime": now.isoformat(),
                "date": now.strftime("%Y-%m-%d"),
                "time": now.strftime("%H:%M:%S"),
                "dayOfWeek": now.strftime("%A"),
            }
        )
