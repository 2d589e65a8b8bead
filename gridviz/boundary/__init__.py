"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, filesystem,
grid modelling library). Provides adapters behind narrow interfaces.
"""
