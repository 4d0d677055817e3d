"""Base entity shared by every table-backed model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseEntity(BaseModel):
    """Surrogate-keyed row with creation/update timestamps."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: Optional[int] = Field(
        default=None,
        description="Surrogate key. None until the row has been persisted.",
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last successful write; the staleness signal for caches.",
    )
