"""Application service: Add Book use case."""

from __future__ import annotations

from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.book_repository import BookRepository


class AddBookHandler:

    def __init__(self, book_repo: BookRepository) -> None:
        self._book_repo = book_repo

    def handle(
        self,
        title: str,
        author: str,
        price: str,
        stock: int = 0,
        category: str = "general",
    ) -> Book:
        """Add a new book to the catalog."""
        # Auto-assign ID based on existing books
        all_books = self._book_repo.list_all()
        if all_books:
            next_id = str(max(int(b.id) for b in all_books) + 1)
        else:
            next_id = "1"

        book = Book(
            id=next_id,
            title=title.strip(),
            author=author.strip(),
            price=Money.of(price),
            stock=stock,
            category=category.strip() or "general",
        )
        self._book_repo.save(book)
        return book
