"""
Schemas module - Request/Response schemas for API endpoints.

Usage:
    from recruitops.schemas.schemas import PriorityUpdate, PriorityResponse
"""
