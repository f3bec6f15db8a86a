"""Request and response shapes of the Story resource."""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class StoryDTO(BaseModel):
    """Payload for create/edit requests."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(alias="Title")
    description: str = Field(alias="Description")
    url: str = Field(default="", alias="Url")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class ApiResponseDTO(BaseModel):
    """One element of the ``GET /api/Story/All`` response."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    story_id: Optional[str] = Field(default=None, alias="storyId")
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None


class MessageResponse(BaseModel):
    """Body returned by create, edit and delete."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    msg: Optional[str] = None
    story_id: Optional[str] = Field(default=None, alias="storyId")
