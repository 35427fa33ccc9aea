from __future__ import annotations

from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class FacultyCoordinator(BaseModel):
    name: str
    designation: str = ""
    email: Optional[str] = None


class TextBlock(BaseModel):
    type: Literal["text"] = "text"
    id: str
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)


class QuoteBlock(BaseModel):
    type: Literal["quote"] = "quote"
    id: str
    title: str = Field(min_length=1, description="Attribution of the quote")
    content: str = Field(min_length=1)


class AchievementBlock(BaseModel):
    type: Literal["achievement"] = "achievement"
    id: str
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)


class ImageBlock(BaseModel):
    type: Literal["image"] = "image"
    id: str
    title: Optional[str] = None
    content: Optional[str] = None
    image_url: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    image_layout: Literal["single", "grid", "row"] = "single"
    caption: Optional[str] = None
    credit: Optional[str] = None

    def all_image_urls(self) -> List[str]:
        urls = list(self.image_urls)
        if self.image_url and self.image_url not in urls:
            urls.insert(0, self.image_url)
        return urls


ContentBlock = Annotated[
    Union[TextBlock, QuoteBlock, AchievementBlock, ImageBlock],
    Field(discriminator="type"),
]


class EventRecord(BaseModel):
    """Snapshot of an event report as supplied by the report-management side."""

    id: Optional[str] = None
    title: str = Field(min_length=1)
    tagline: Optional[str] = None
    event_type: str
    organized_by: str
    institute: str
    venue: str
    start_date: date
    end_date: date
    target_audience: str
    participant_count: int = Field(ge=0)
    academic_year: Optional[str] = None
    semester: Optional[str] = None
    faculty_coordinators: List[FacultyCoordinator] = Field(default_factory=list)
    content_blocks: List[ContentBlock] = Field(default_factory=list)
    status: Literal["draft", "generated"] = "draft"

    @model_validator(mode="after")
    def _check_dates(self) -> "EventRecord":
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class BlockContext(BaseModel):
    """Context forwarded to per-block generation."""

    event_title: Optional[str] = None
    event_type: Optional[str] = None
    target_audience: Optional[str] = None
    additional_info: Optional[str] = None
    existing_content: Optional[str] = None


class GenerateBlockRequest(BaseModel):
    block_type: str = Field(min_length=1)
    context: BlockContext


class SectionSuggestionRequest(BaseModel):
    section_type: str = Field(min_length=1)
    report: EventRecord


class GeneratedText(BaseModel):
    text: str


class ConnectivityStatus(BaseModel):
    connected: bool

