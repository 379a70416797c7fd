from typing import Any

from pydantic import ValidationInfo


def reject_null(value: Any, info: ValidationInfo) -> Any:
    """Partial updates may omit a required column but never null it out."""

    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value
