"""
Plugin discovery for the AIA orchestration engine.

Feature packages contribute tools by exposing a plugin under the
``aia_orchestrator.plugins`` entry-point group. Discovery happens once, at
process start; the contributed tools are immutable afterwards.
"""

import importlib.metadata
import logging
from typing import Any, Dict, List, Optional, Set

from aia_orchestrator.interfaces.plugins.plugins import (
    PluginManager as PluginManagerInterface,
)
from aia_orchestrator.interfaces.plugins.plugins import Plugin
from aia_orchestrator.plugins.registry import ToolRegistry

# Setup logger for this module
logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "aia_orchestrator.plugins"


class PluginManager(PluginManagerInterface):
    """Discovers entry-point plugins and lets each one contribute tools."""

    def __init__(
        self,
        tool_registry: ToolRegistry,
        config: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the manager.

        Args:
            tool_registry: Registry that receives the contributed tools
            config: The "plugins" configuration section, handed to every plugin
        """
        self.tool_registry = tool_registry
        self.config = config or {}
        self._seen: Set[str] = set()

    def register_plugin(self, plugin: Plugin) -> bool:
        """Configure a plugin and let it add its tools to the registry.

        A plugin that raises contributes nothing further; tools it managed to
        register before failing stay registered.
        """
        before = set(self.tool_registry.list_all_tools())
        try:
            plugin.configure(self.config)
            if plugin.initialize(self.tool_registry) is False:
                logger.warning(f"Plugin '{plugin.name}' declined to initialize")
                return False
        except Exception as e:
            logger.error(f"Plugin '{plugin.name}' failed to contribute tools: {e}")
            return False

        added = [
            name for name in self.tool_registry.list_all_tools() if name not in before
        ]
        logger.info(f"Plugin '{plugin.name}' contributed tools: {added}")
        return True

    def load_plugins(self) -> List[str]:
        """Discover plugins by entry point and register each one once.

        Returns:
            Names of the entry points whose plugin registered successfully
        """
        registered = []
        for entry_point in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            if entry_point.value in self._seen:
                logger.debug(f"Entry point {entry_point.name} already discovered")
                continue
            self._seen.add(entry_point.value)

            try:
                plugin = entry_point.load()()
            except Exception as e:
                logger.error(f"Could not load plugin {entry_point.name}: {e}")
                continue

            if self.register_plugin(plugin):
                registered.append(entry_point.name)
        return registered
