"""Change feed event model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import ChangeEventType


class ChangeEvent(BaseModel):
    """A single committed change to a record store table."""

    model_config = ConfigDict(strict=True)

    event_id: str
    event_type: ChangeEventType
    table: str
    record: dict[str, Any] = Field(default_factory=dict)
    old_record: dict[str, Any] | None = None
