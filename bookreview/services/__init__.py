"""
High-level use cases for the book review API.

Each service orchestrates the record store to implement business rules
(ownership checks, review-to-book existence, sessions). Routers (FastAPI
endpoints) call these services instead of touching the store directly.
"""
