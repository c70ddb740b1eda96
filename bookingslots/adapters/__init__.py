"""
Adapters layer - Persistence implementations of the scheduling repository.
"""

from .memory_repository import InMemoryRepository

__all__ = ["InMemoryRepository"]
