"""Application service: Update Cart Item use case."""

from __future__ import annotations

from bookstore.application.dto import CartDTO, cart_to_dto
from bookstore.domain.exceptions import BookNotFoundError
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.cart_repository import CartRepository


class UpdateCartItemHandler:

    def __init__(self, cart_repo: CartRepository, book_repo: BookRepository) -> None:
        self._cart_repo = cart_repo
        self._book_repo = book_repo

    def handle(
        self,
        user_id: str,
        book_id: str,
        quantity: int,
        refresh_price: bool = False,
    ) -> CartDTO:
        """Set the quantity of a line already in the cart.

        Args:
            refresh_price: re-capture the book's current catalog price
                instead of keeping the price from when it was added.
        """
        cart = self._cart_repo.get_or_create(user_id)
        line = cart.line_for(book_id)

        book = self._book_repo.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book not found: {line.title}")

        cart.update_item(book, quantity, refresh_price=refresh_price)
        self._cart_repo.save(cart)
        return cart_to_dto(cart)
