"""
Adapters for external systems and services.

These adapters implement the interfaces defined in aia_orchestrator.interfaces
and provide concrete implementations for vendor APIs, configuration and context.
"""
