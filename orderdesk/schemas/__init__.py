"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input)
    - Schemas convert into core/service dataclasses, never into ORM objects

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
