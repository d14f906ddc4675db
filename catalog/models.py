"""
Pydantic models for catalog documents.

Each model maps to one MongoDB collection. Ids and references are exposed as
strings on the model and stored as ObjectIds in the document.
"""

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, Field


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Convert a string id to an ObjectId, or None when it is malformed."""
    if isinstance(value, ObjectId):
        return value
    # ObjectId(None) would generate a fresh id
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def format_date(value: Optional[datetime]) -> str:
    """Render a date for display, e.g. ``Jan 05, 2024``."""
    if value is None:
        return ""
    return value.strftime("%b %d, %Y")


class BookInstanceStatus(str, Enum):
    """Availability of a physical copy."""
    AVAILABLE = "Available"
    MAINTENANCE = "Maintenance"
    LOANED = "Loaned"
    RESERVED = "Reserved"


class CatalogDocument(BaseModel):
    """Base class for models persisted in a collection."""
    id: Optional[str] = Field(None, description="Document identifier")

    # Fields holding ids of documents in other collections
    reference_fields: ClassVar[Tuple[str, ...]] = ()
    url_prefix: ClassVar[str] = "/catalog"

    @classmethod
    def from_document(cls, document: Mapping[str, Any]):
        """Build a model from a raw MongoDB document."""
        data = dict(document)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        for name in cls.reference_fields:
            value = data.get(name)
            if isinstance(value, list):
                data[name] = [str(item) for item in value]
            elif value is not None:
                data[name] = str(value)
        return cls(**data)

    def to_document(self) -> Dict[str, Any]:
        """Serialize to a MongoDB document without the ``_id`` key."""
        data = self.dict(exclude={"id"})
        for name in self.reference_fields:
            value = data.get(name)
            if isinstance(value, list):
                data[name] = [to_object_id(item) for item in value]
            elif value is not None:
                data[name] = to_object_id(value)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data

    @property
    def url(self) -> str:
        """URL of the detail page."""
        return f"{self.url_prefix}/{self.id}"


class Author(CatalogDocument):
    """An author of one or more books."""
    first_name: str = Field(..., description="Given name")
    family_name: str = Field(..., description="Family name")
    date_of_birth: Optional[datetime] = Field(None, description="Date of birth")
    date_of_death: Optional[datetime] = Field(None, description="Date of death")

    url_prefix: ClassVar[str] = "/catalog/authors"

    @property
    def name(self) -> str:
        """Full name as ``family_name, first_name``."""
        return f"{self.family_name}, {self.first_name}"

    @property
    def date_of_birth_formatted(self) -> str:
        return format_date(self.date_of_birth)

    @property
    def date_of_death_formatted(self) -> str:
        return format_date(self.date_of_death)

    @property
    def lifespan(self) -> str:
        """Birth and death dates, either of which may be blank."""
        if not self.date_of_birth and not self.date_of_death:
            return ""
        return f"{self.date_of_birth_formatted} - {self.date_of_death_formatted}".strip()


class Genre(CatalogDocument):
    """A book category such as Fiction or Poetry."""
    name: str = Field(..., description="Genre name")

    url_prefix: ClassVar[str] = "/catalog/genres"


class Book(CatalogDocument):
    """A title in the catalog."""
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author id")
    summary: str = Field(..., description="Short summary")
    isbn: str = Field(..., description="ISBN")
    genre: List[str] = Field(default_factory=list, description="Genre ids")

    reference_fields: ClassVar[Tuple[str, ...]] = ("author", "genre")
    url_prefix: ClassVar[str] = "/catalog/books"


class BookInstance(CatalogDocument):
    """A specific physical copy of a book that someone might borrow."""
    book: str = Field(..., description="Book id")
    imprint: str = Field(..., description="Publisher and edition details")
    status: BookInstanceStatus = Field(BookInstanceStatus.MAINTENANCE, description="Copy availability")
    due_back: Optional[datetime] = Field(None, description="When the copy is due back")

    reference_fields: ClassVar[Tuple[str, ...]] = ("book",)
    url_prefix: ClassVar[str] = "/catalog/bookinstances"

    @property
    def due_back_formatted(self) -> str:
        return format_date(self.due_back)


class BookListItem(BaseModel):
    """A book paired with its author for list pages."""
    book: Book
    author: Optional[Author] = None


class BookInstanceListItem(BaseModel):
    """A copy paired with its book for list pages."""
    bookinstance: BookInstance
    book: Optional[Book] = None


class CatalogCounts(BaseModel):
    """Document counts shown on the home page."""
    book_count: int = Field(0, ge=0)
    book_instance_count: int = Field(0, ge=0)
    book_instance_available_count: int = Field(0, ge=0)
    author_count: int = Field(0, ge=0)
    genre_count: int = Field(0, ge=0)


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="Application version")
    database_status: str = Field(..., description="Database connection status")
