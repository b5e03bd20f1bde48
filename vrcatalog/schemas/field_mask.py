"""
Field mask parsing shared by the update request schemas.
"""

from typing import Any


def parse_field_mask(value: Any) -> Any:
    """Accept a field mask as a list of paths or as a comma-separated string."""
    if isinstance(value, str):
        return [path.strip() for path in value.split(",") if path.strip()]
    return value
