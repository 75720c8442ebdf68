"""Application service: Update Book use case (price and/or stock)."""

from __future__ import annotations

from bookstore.domain.exceptions import BookNotFoundError, ValidationError
from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.book_repository import BookRepository


class UpdateBookHandler:

    def __init__(self, book_repo: BookRepository) -> None:
        self._book_repo = book_repo

    def handle(
        self,
        book_id: str,
        price: str | None = None,
        stock: int | None = None,
    ) -> Book:
        """Change a book's price and/or set its stock directly.

        This does NOT affect existing cart lines or orders; they captured
        a price snapshot of their own.
        """
        if price is None and stock is None:
            raise ValidationError("Nothing to update: give a price or a stock level")

        book = self._book_repo.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book with ID '{book_id}' not found")

        if price is not None:
            book.update_price(Money.of(price))
        if stock is not None:
            book.set_stock(stock)
        self._book_repo.save(book)
        return book
