import uuid
from datetime import date

from pydantic import BaseModel, Field, computed_field, ConfigDict
from hop_service.config import settings


class LinkCreate(BaseModel):
    # Validated by the service so that malformed URLs map to ValidationError
    url: str = Field(..., description="The original URL to be shortened")


class LinkResponse(BaseModel):
    """Response schema that serializes the SQLAlchemy Link model

    - from_attributes=True reads straight from the ORM instance
    - @computed_field builds the fully-qualified short link
    """
    id: uuid.UUID
    key: str
    url: str
    created_at: date = Field(serialization_alias="createdAt")

    @computed_field(alias="fullUrl")
    @property
    def full_url(self) -> str:
        """Computed field - automatically generated from key"""
        return f"{settings.base_url.rstrip('/')}/{self.key}"

    # Pydantic V2 style configuration
    model_config = ConfigDict(from_attributes=True)
