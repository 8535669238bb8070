"""
Request payloads validated before anything reaches the record store.

Field aliases are camelCase so clients send the same keys they receive;
``model_dump(exclude_unset=True)`` yields snake_case attribute names ready
for ``insert``/``update``.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def changes(self) -> dict:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class RegisterRequest(_Payload):
    username: str = Field(min_length=3, description="Username must be at least 3 characters")
    password: str = Field(min_length=6, description="Password must be at least 6 characters")
    email: str = Field(pattern=EMAIL_PATTERN, description="Please enter a valid email")
    full_name: Optional[str] = None


class LoginRequest(_Payload):
    username: str
    password: str


class BookPayload(_Payload):
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    isbn: Optional[str] = None
    description: Optional[str] = None
    publication_year: Optional[int] = None


class ReviewPayload(_Payload):
    rating: int = Field(ge=1, le=5, description="Rating must be between 1 and 5")
    title: Optional[str] = None
    content: str = Field(min_length=10, description="Review content must be at least 10 characters")


class BookPage(BaseModel):
    """A page of catalogue results; items are persisted-layout dicts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    page_size: int
    total: int
    total_pages: int
    items: List[dict]
