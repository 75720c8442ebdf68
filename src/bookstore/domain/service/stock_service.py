"""Domain service: Stock bookkeeping.

Coordinates the cross-aggregate work of taking books off the shelf for an
order and putting them back when the order is cancelled.

Debits use a two-phase approach (validate-then-mutate) so a single short
book fails the whole request before any stock moves. The mutate phase uses
the repository's conditional decrement; if another writer got there first,
every copy already taken is returned before the error propagates.
"""

from __future__ import annotations

from typing import Sequence, Union

import structlog

from bookstore.domain.exceptions import BookNotFoundError, InsufficientStockError
from bookstore.domain.model.book import Book
from bookstore.domain.model.cart import CartLine
from bookstore.domain.model.order import OrderLineItem
from bookstore.domain.repository.book_repository import BookRepository

logger = structlog.get_logger(__name__)

StockLine = Union[CartLine, OrderLineItem]


class StockService:

    def __init__(self, book_repo: BookRepository) -> None:
        self._book_repo = book_repo

    def check_available(self, lines: Sequence[StockLine]) -> list[tuple[Book, int]]:
        """Ensure every line can be served from current stock.

        Raises BookNotFoundError or InsufficientStockError without touching
        any stock.
        """
        checked: list[tuple[Book, int]] = []
        for line in lines:
            book = self._book_repo.get_by_id(line.book_id)
            if book is None:
                raise BookNotFoundError(f"Book not found: {line.title}")
            qty = line.quantity.value
            if qty > book.stock:
                raise InsufficientStockError(book.title, qty, book.stock)
            checked.append((book, qty))
        return checked

    def debit(self, lines: Sequence[StockLine]) -> None:
        """Take stock for every line, all or nothing.

        Phase 1: load and validate every book.
        Phase 2: conditional decrement per book; on a lost race, credit
                  back what was already taken and report the shortage.
        """
        checked = self.check_available(lines)

        taken: list[tuple[Book, int]] = []
        for book, qty in checked:
            if not self._book_repo.decrement_stock(book.id, qty):
                logger.warning(
                    "Stock changed during debit, rolling back",
                    book_id=book.id,
                    requested=qty,
                )
                self._credit_pairs(taken)
                current = self._book_repo.get_by_id(book.id)
                available = current.stock if current is not None else 0
                raise InsufficientStockError(book.title, qty, available)
            taken.append((book, qty))

        logger.info("Stock debited", books={book.id: qty for book, qty in taken})

    def credit(self, lines: Sequence[StockLine]) -> None:
        """Return stock for every line, all or nothing (compensation for a debit)."""
        pairs: list[tuple[Book, int]] = []
        for line in lines:
            book = self._book_repo.get_by_id(line.book_id)
            if book is None:
                # Book removed from the catalog since the order; nothing to restock.
                logger.warning("Cannot restock missing book", book_id=line.book_id)
                continue
            pairs.append((book, line.quantity.value))
        self._credit_pairs(pairs)

    def _credit_pairs(self, pairs: list[tuple[Book, int]]) -> None:
        given: list[tuple[Book, int]] = []
        try:
            for book, qty in pairs:
                self._book_repo.increment_stock(book.id, qty)
                given.append((book, qty))
        except Exception:
            logger.error("Stock credit failed, taking back partial credit", books=[b.id for b, _ in given])
            for book, qty in given:
                self._book_repo.decrement_stock(book.id, qty)
            raise
        if pairs:
            logger.info("Stock credited", books={book.id: qty for book, qty in pairs})
