"""Abstract repository for Book aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.book import Book


class BookRepository(ABC):

    @abstractmethod
    def get_by_id(self, book_id: str) -> Book | None:
        """Return a book by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Book]:
        """Return every book in the catalog."""

    @abstractmethod
    def save(self, book: Book) -> None:
        """Persist a new or updated book."""

    @abstractmethod
    def delete(self, book_id: str) -> None:
        """Remove a book from the catalog. Unknown ids are ignored."""

    @abstractmethod
    def decrement_stock(self, book_id: str, quantity: int) -> bool:
        """Atomically take *quantity* copies off the shelf.

        Returns False, leaving stock untouched, when the book is missing or
        has fewer than *quantity* copies.
        """

    @abstractmethod
    def increment_stock(self, book_id: str, quantity: int) -> None:
        """Atomically put *quantity* copies back on the shelf."""
