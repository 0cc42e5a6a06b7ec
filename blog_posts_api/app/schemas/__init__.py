"""
Pydantic schema definitions for API payloads.

Schemas are separated from the persisted record so that the wire
representation (``author`` as a display string, structured author on
input) can differ from what the store keeps (``author_name``).
"""
