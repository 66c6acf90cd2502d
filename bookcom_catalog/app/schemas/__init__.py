"""
Pydantic schema definitions for catalog payloads.

Schemas are separated from the domain entities in ``models`` to
decouple the external representation from persistence.
"""
