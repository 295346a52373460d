"""
Abstract interfaces for the AIA orchestration engine.

These interfaces define the contracts that concrete implementations
must adhere to:
- Provider interfaces for vendor capabilities and context collaborators
- Plugin interfaces for tools and tool registries
- Service interfaces for the orchestration components
"""
