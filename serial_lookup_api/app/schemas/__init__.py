"""
Pydantic schema definitions for API payloads and access-log rows.
"""
