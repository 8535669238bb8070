"""
Core utilities shared across the book review API.

This package hosts configuration (env vars, storage paths), the logging
helper and password hashing. Services and stores depend on these primitives
instead of reading the environment or configuring logging themselves.
"""
