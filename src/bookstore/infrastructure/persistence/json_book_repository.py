"""JSON-file-backed implementation of BookRepository."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from bookstore.domain.model.book import Book
from bookstore.domain.model.value_objects import Money
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.infrastructure.persistence.file_lock import ensure_json_list, file_lock, write_atomic


class JsonBookRepository(BookRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        ensure_json_list(file_path)

    # --- BookRepository interface ---------------------------------------------

    def get_by_id(self, book_id: str) -> Book | None:
        return self._load().get(book_id)

    def list_all(self) -> list[Book]:
        return list(self._load().values())

    def save(self, book: Book) -> None:
        with file_lock(self._file_path):
            books = self._load()
            books[book.id] = book
            self._persist(books)

    def delete(self, book_id: str) -> None:
        with file_lock(self._file_path):
            books = self._load()
            if books.pop(book_id, None) is not None:
                self._persist(books)

    def decrement_stock(self, book_id: str, quantity: int) -> bool:
        with file_lock(self._file_path):
            books = self._load()
            book = books.get(book_id)
            if book is None or quantity <= 0 or book.stock < quantity:
                return False
            book.decrement_stock(quantity)
            self._persist(books)
            return True

    def increment_stock(self, book_id: str, quantity: int) -> None:
        with file_lock(self._file_path):
            books = self._load()
            book = books.get(book_id)
            if book is None:
                return
            book.increment_stock(quantity)
            self._persist(books)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Book]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {
            item["id"]: Book(
                id=item["id"],
                title=item["title"],
                author=item["author"],
                price=Money(Decimal(item["price"]), item.get("currency", "NPR")),
                stock=item.get("stock", 0),
                category=item.get("category", "general"),
            )
            for item in raw
        }

    def _persist(self, books: dict[str, Book]) -> None:
        raw = [
            {
                "id": b.id,
                "title": b.title,
                "author": b.author,
                "price": str(b.price.amount),
                "currency": b.price.currency,
                "stock": b.stock,
                "category": b.category,
            }
            for b in books.values()
        ]
        write_atomic(self._file_path, json.dumps(raw, indent=2) + "\n")
