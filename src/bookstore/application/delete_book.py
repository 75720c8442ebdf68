"""Application service: Delete Book use case."""

from __future__ import annotations

import structlog

from bookstore.domain.exceptions import BookNotFoundError
from bookstore.domain.model.book import Book
from bookstore.domain.repository.book_repository import BookRepository

log = structlog.get_logger(__name__)


class DeleteBookHandler:

    def __init__(self, book_repo: BookRepository) -> None:
        self._book_repo = book_repo

    def handle(self, book_id: str) -> Book:
        """Take a book out of the catalog and return what was removed.

        Orders keep their own title and price snapshot. Cart lines that
        still point at the book fail the stock re-check at checkout.
        """
        book = self._book_repo.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book with ID '{book_id}' not found")

        self._book_repo.delete(book_id)
        log.info("Book deleted", book_id=book_id, title=book.title)
        return book
