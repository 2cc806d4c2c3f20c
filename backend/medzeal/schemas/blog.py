"""Blog schemas (blogs/*). Creation is multipart, so there is no JSON input model."""

from pydantic import BaseModel, Field


class BlogPost(BaseModel):
    id: str
    title: str
    content: str
    date: str = Field(description="Display date, YYYY-MM-DD")
    thumbnail: str = Field(description="URL of the thumbnail image")
