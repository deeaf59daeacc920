"""Read-only definition index."""

from .usecases.index import Index

__all__ = ["Index"]
