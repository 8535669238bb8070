"""SQLAlchemy tables mirroring the JSON collections.

References between tables stay plain integers: the record store, not the
database, owns the one referential rule (reviews go with their book), and
dangling references are legal.
"""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, Text

from .session import Base


class UserRow(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=False)
    username = Column(String(255), unique=True, nullable=False)
    password = Column(Text, nullable=False)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)


class BookRow(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(Text, nullable=False)
    author = Column(Text, nullable=False)
    isbn = Column(String(32), nullable=True, index=True)
    description = Column(Text, nullable=True)
    publication_year = Column(Integer, nullable=True)
    added_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class ReviewRow(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=False)
    book_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    title = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
