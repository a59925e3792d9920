from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.utils.time import to_local_iso_db

HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"


class CategoryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR, description="Hex color, default #007bff")


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    color: str
    created_at: str
    updated_at: str

    @classmethod
    def from_model(cls, model) -> "CategoryResponse":
        return cls(
            id=model.id,
            name=model.name,
            description=model.description,
            color=model.color,
            created_at=to_local_iso_db(model.created_at),
            updated_at=to_local_iso_db(model.updated_at),
        )
