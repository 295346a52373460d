"""
Domain models for the AIA orchestration engine.

This package contains the value types the engine is built around: providers,
settings, messages, tool calls and context items.
"""

from aia_orchestrator.domains.context import *
from aia_orchestrator.domains.conversation import *
from aia_orchestrator.domains.messages import *
from aia_orchestrator.domains.providers import *
from aia_orchestrator.domains.routing import *
from aia_orchestrator.domains.settings import *
from aia_orchestrator.domains.tools import *
