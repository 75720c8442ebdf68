"""Application service: Show Book use case (query)."""

from __future__ import annotations

from bookstore.application.dto import BookDTO, book_to_dto
from bookstore.domain.exceptions import BookNotFoundError
from bookstore.domain.repository.book_repository import BookRepository


class ShowBookHandler:

    def __init__(self, book_repo: BookRepository) -> None:
        self._book_repo = book_repo

    def handle(self, book_id: str) -> BookDTO:
        book = self._book_repo.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book with ID '{book_id}' not found")
        return book_to_dto(book)
