"""
Plugin system for the AIA orchestration engine.

This package provides plugin management, tool registration, and plugin discovery
mechanisms that let feature collaborators contribute tools.
"""
