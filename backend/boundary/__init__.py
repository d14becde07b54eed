"""
Boundary layer for external system integrations.

Handles all interactions with external systems (database, vector search,
blob storage, model providers).
"""
