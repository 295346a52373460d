"""
Tools for the AIA orchestration engine.

This package contains the AutoTool and FunctionTool base classes and the
built-in tool implementations.
"""

from aia_orchestrator.plugins.tools.auto_tool import *
from aia_orchestrator.plugins.tools.builtin import *
