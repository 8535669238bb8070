"""Sample catalogue loaded into an empty store."""
from __future__ import annotations

from bookreview.core.logging import get_logger
from bookreview.domain.entities import Book, Review

from .base import RecordStore

logger = get_logger(__name__)

# Reviews by author 0 render as anonymous.
ANONYMOUS_USER_ID = 0

SAMPLE_BOOKS = [
    {
        "title": "Clean Code: A Handbook of Agile Software Craftsmanship",
        "author": "Robert C. Martin",
        "isbn": "978-0132350884",
        "description": (
            "Even bad code can function. But if code isn't clean, it can bring a development organization "
            "to its knees. Every year, countless hours and significant resources are lost because of poorly "
            "written code. But it doesn't have to be that way."
        ),
        "publication_year": 2008,
    },
    {
        "title": "Design Patterns: Elements of Reusable Object-Oriented Software",
        "author": "Erich Gamma, Richard Helm, Ralph Johnson, John Vlissides",
        "isbn": "978-0201633610",
        "description": (
            "Capturing a wealth of experience about the design of object-oriented software, four top-notch "
            "designers present a catalog of simple and succinct solutions to commonly occurring design problems."
        ),
        "publication_year": 1994,
    },
    {
        "title": "The Pragmatic Programmer: Your Journey to Mastery",
        "author": "David Thomas, Andrew Hunt",
        "isbn": "978-0201616224",
        "description": (
            "The Pragmatic Programmer cuts through the increasing specialization and technicalities of modern "
            "software development to examine the core process."
        ),
        "publication_year": 2019,
    },
    {
        "title": "Refactoring: Improving the Design of Existing Code",
        "author": "Martin Fowler",
        "isbn": "978-0134757599",
        "description": (
            "Refactoring is about improving the design of existing code. It is the process of changing a "
            "software system in such a way that it does not alter the external behavior of the code, yet "
            "improves its internal structure."
        ),
        "publication_year": 2018,
    },
    {
        "title": "You Don't Know JS: Up & Going",
        "author": "Kyle Simpson",
        "isbn": "978-1491924464",
        "description": (
            "It's easy to learn parts of JavaScript, but much harder to learn it completely, or even "
            "sufficiently, whether you're new to the language or have used it for years."
        ),
        "publication_year": 2015,
    },
    {
        "title": "Eloquent JavaScript: A Modern Introduction to Programming",
        "author": "Marijn Haverbeke",
        "isbn": "978-1593279509",
        "description": (
            "JavaScript lies at the heart of almost every modern web application, from social apps like "
            "Twitter to browser-based game frameworks like Phaser and Babylon."
        ),
        "publication_year": 2018,
    },
]

# book_index points into SAMPLE_BOOKS; real ids come from the store.
SAMPLE_REVIEWS = [
    {
        "book_index": 0,
        "rating": 5,
        "title": "Essential reading for developers",
        "content": (
            "This book changed how I approach code reviews and my own programming habits. The principles "
            "are timeless despite being published over a decade ago."
        ),
    },
    {
        "book_index": 0,
        "rating": 4,
        "title": "Good but some examples are dated",
        "content": (
            "Great principles that still apply today, but some code examples feel outdated. Would love to "
            "see an updated version with modern languages and practices."
        ),
    },
    {
        "book_index": 1,
        "rating": 4,
        "title": "Classic but complex for beginners",
        "content": (
            "While this is undoubtedly a foundational text in software engineering, I found some sections "
            "quite dense and theoretical. The examples, while thorough, use older programming paradigms that "
            "might confuse those working primarily with modern languages and frameworks."
        ),
    },
]


def seed_sample_data(store: RecordStore) -> int:
    """Insert the sample catalogue when there are no books; returns how many books were added.

    Sample reviews are only added together with the sample books, and only
    when the review collection is empty.
    """
    if store.list(Book):
        return 0
    books = [store.insert(Book, data) for data in SAMPLE_BOOKS]
    if not store.list(Review):
        for review in SAMPLE_REVIEWS:
            fields = {k: v for k, v in review.items() if k != "book_index"}
            store.insert(Review, {**fields, "book_id": books[review["book_index"]].id, "user_id": ANONYMOUS_USER_ID})
    logger.info("seeded %s sample book(s) into the %s store", len(books), store.backend)
    return len(books)
