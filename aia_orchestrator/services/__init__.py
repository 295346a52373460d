"""
Service implementations for the AIA orchestration engine.

These services implement the business logic interfaces defined in
aia_orchestrator.interfaces.services.
"""
