"""Response-side pydantic models: wire DTOs and JSON envelopes."""
