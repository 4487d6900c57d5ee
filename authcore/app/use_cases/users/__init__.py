"""
User Use Cases

Principal lookups for authenticated requests.
"""

from .load_context_use_case import LoadContextUseCase

__all__ = [
    "LoadContextUseCase",
]
