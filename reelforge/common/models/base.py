"""Shared model helpers."""

from uuid import uuid4

from pydantic import ConfigDict


def generate_id(prefix: str) -> str:
    """Generate a unique ID with a given prefix."""
    return f"{prefix}_{uuid4().hex[:12]}"


# Plan items and assets speak the camelCase wire format of the planning
# model while exposing snake_case attributes in Python.
WIRE_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    extra="ignore",
)
