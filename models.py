"""Database models for the thumbnail server."""
from typing import Optional

from sqlmodel import Field, SQLModel


class ImageRecord(SQLModel, table=True):
    """One uploaded image: its id joins the row to the blobs on disk."""
    __tablename__ = "images"

    id: Optional[int] = Field(default=None, primary_key=True)
    tags: str = ""
