"""
Request/response schemas.
Pydantic models validated at the HTTP boundary.
"""
