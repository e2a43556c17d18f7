"""
Identity provider and document store implementations
Firebase (REST) for real use, in-memory for development and tests
"""

from .firebase import FirebaseAuthProvider, FirestoreStore
from .memory import InMemoryAuthProvider, InMemoryStore

__all__ = [
    "FirebaseAuthProvider",
    "FirestoreStore",
    "InMemoryAuthProvider",
    "InMemoryStore",
]
