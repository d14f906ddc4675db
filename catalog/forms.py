"""
Form validation and sanitization.

Each form is a pydantic model whose validators trim the submitted value, apply
the field rules and raise ``ValueError`` with the message shown next to the
field. ``validate_form`` turns a submission into a ``FormResult`` holding the
cleaned form or the field-level errors.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Type

from bson import ObjectId
from fastapi import Request
from pydantic import BaseModel, Field, ValidationError, validator

from catalog.models import Author, Book, BookInstance, BookInstanceStatus, CatalogDocument, Genre

NAME_MAX_LENGTH = 100


def _trim(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _required(value: str, message: str) -> str:
    if not value:
        raise ValueError(message)
    return value


def _max_length(value: str, length: int, message: str) -> str:
    if len(value) > length:
        raise ValueError(message)
    return value


def _alphanumeric(value: str, message: str) -> str:
    if not (value.isascii() and value.isalnum()):
        raise ValueError(message)
    return value


def _object_id(value: str, message: str) -> str:
    if not ObjectId.is_valid(value):
        raise ValueError(message)
    return value


def _iso_date(value: Any, message: str) -> Optional[datetime]:
    """Parse an optional ISO-8601 date; blank input means no date."""
    if isinstance(value, datetime):
        return value
    value = _trim(value)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValueError(message)


class FieldError(BaseModel):
    """A validation message attached to a form field."""
    field: str = Field(..., description="Form field name")
    message: str = Field(..., description="Human readable message")


class FormResult(BaseModel):
    """Outcome of validating a form submission."""
    values: Dict[str, Any] = Field(default_factory=dict, description="Sanitized submitted values")
    errors: List[FieldError] = Field(default_factory=list, description="Field-level errors")
    cleaned: Optional[Any] = Field(None, description="Validated form when there are no errors")

    @property
    def is_valid(self) -> bool:
        return not self.errors and self.cleaned is not None

    def messages_for(self, field: str) -> List[str]:
        return [error.message for error in self.errors if error.field == field]


class CatalogForm(BaseModel):
    """Base class for entity forms."""

    document_class: ClassVar[Type[CatalogDocument]]
    list_fields: ClassVar[Iterable[str]] = ()

    def build(self, document_id: Optional[str] = None) -> CatalogDocument:
        """Create the document model, keeping ``document_id`` on updates."""
        return self.document_class(id=document_id, **self.dict())


class AuthorForm(CatalogForm):
    first_name: str = ""
    family_name: str = ""
    date_of_birth: Optional[datetime] = None
    date_of_death: Optional[datetime] = None

    document_class: ClassVar[Type[CatalogDocument]] = Author

    @validator('first_name', pre=True)
    def validate_first_name(cls, v):
        v = _required(_trim(v), 'First name must be specified.')
        _max_length(v, NAME_MAX_LENGTH, 'First name is too long.')
        return _alphanumeric(v, 'First name has non-alphanumeric characters.')

    @validator('family_name', pre=True)
    def validate_family_name(cls, v):
        v = _required(_trim(v), 'Family name must be specified.')
        _max_length(v, NAME_MAX_LENGTH, 'Family name is too long.')
        return _alphanumeric(v, 'Family name has non-alphanumeric characters.')

    @validator('date_of_birth', pre=True)
    def validate_date_of_birth(cls, v):
        return _iso_date(v, 'Invalid date of birth')

    @validator('date_of_death', pre=True)
    def validate_date_of_death(cls, v):
        return _iso_date(v, 'Invalid date of death')


class GenreForm(CatalogForm):
    name: str = ""

    document_class: ClassVar[Type[CatalogDocument]] = Genre

    @validator('name', pre=True)
    def validate_name(cls, v):
        v = _required(_trim(v), 'Genre name required')
        return _max_length(v, NAME_MAX_LENGTH, 'Genre name is too long.')


class BookForm(CatalogForm):
    title: str = ""
    author: str = ""
    summary: str = ""
    isbn: str = ""
    genre: List[str] = Field(default_factory=list)

    document_class: ClassVar[Type[CatalogDocument]] = Book
    list_fields: ClassVar[Iterable[str]] = ("genre",)

    @validator('title', pre=True)
    def validate_title(cls, v):
        return _required(_trim(v), 'Title must not be empty.')

    @validator('author', pre=True)
    def validate_author(cls, v):
        v = _required(_trim(v), 'Author must not be empty.')
        return _object_id(v, 'Author must be chosen from the list.')

    @validator('summary', pre=True)
    def validate_summary(cls, v):
        return _required(_trim(v), 'Summary must not be empty.')

    @validator('isbn', pre=True)
    def validate_isbn(cls, v):
        return _required(_trim(v), 'ISBN must not be empty')

    @validator('genre', pre=True)
    def validate_genre(cls, v):
        return [_object_id(genre_id, 'Genre must be chosen from the list.') for genre_id in _trim_list(v)]


class BookInstanceForm(CatalogForm):
    book: str = ""
    imprint: str = ""
    status: BookInstanceStatus = BookInstanceStatus.MAINTENANCE
    due_back: Optional[datetime] = None

    document_class: ClassVar[Type[CatalogDocument]] = BookInstance

    @validator('book', pre=True)
    def validate_book(cls, v):
        v = _required(_trim(v), 'Book must be specified')
        return _object_id(v, 'Book must be chosen from the list.')

    @validator('imprint', pre=True)
    def validate_imprint(cls, v):
        return _required(_trim(v), 'Imprint must be specified')

    @validator('status', pre=True)
    def validate_status(cls, v):
        if isinstance(v, BookInstanceStatus):
            return v
        v = _trim(v)
        if not v:
            return BookInstanceStatus.MAINTENANCE
        try:
            return BookInstanceStatus(v)
        except ValueError:
            choices = ", ".join(status.value for status in BookInstanceStatus)
            raise ValueError(f'Status must be one of: {choices}')

    @validator('due_back', pre=True)
    def validate_due_back(cls, v):
        return _iso_date(v, 'Invalid date')


def _trim_list(value: Any) -> List[str]:
    """Normalize a single value or a list of values to trimmed, non-blank strings."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [item for item in (_trim(item) for item in value) if item]


def _error_message(error: Dict[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if "error" in ctx:
        return str(ctx["error"])
    return error["msg"]


def validate_form(form_class: Type[CatalogForm], data: Dict[str, Any]) -> FormResult:
    """
    Validate and sanitize submitted form data.

    Args:
        form_class: Form model to validate against
        data: Raw submitted values keyed by field name

    Returns:
        FormResult with sanitized values and either the cleaned form or errors
    """
    list_fields = set(form_class.list_fields)
    submitted = {}
    values = {}
    for name in form_class.model_fields:
        raw = data.get(name)
        submitted[name] = raw
        values[name] = _trim_list(raw) if name in list_fields else _trim(raw)

    try:
        cleaned = form_class(**submitted)
    except ValidationError as e:
        errors = [
            FieldError(field=str(error["loc"][0]) if error["loc"] else "", message=_error_message(error))
            for error in e.errors()
        ]
        return FormResult(values=values, errors=errors)

    return FormResult(values=values, cleaned=cleaned)


def initial_values(document: CatalogDocument) -> Dict[str, Any]:
    """Form values for editing an existing document."""
    values = {}
    for name, value in document.dict(exclude={"id"}).items():
        if isinstance(value, datetime):
            value = value.date().isoformat()
        elif isinstance(value, BookInstanceStatus):
            value = value.value
        values[name] = value
    return values


async def read_form(request: Request, list_fields: Iterable[str] = ()) -> Dict[str, Any]:
    """Read a urlencoded form body, collecting repeated keys for ``list_fields``."""
    form = await request.form()
    data: Dict[str, Any] = {key: form.get(key) for key in form.keys()}
    for key in list_fields:
        data[key] = form.getlist(key)
    return data
