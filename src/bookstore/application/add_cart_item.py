"""Application service: Add To Cart use case.

Validates the request against the book's stock *at add time*, counting
copies the user already has in the cart.
"""

from __future__ import annotations

import structlog

from bookstore.application.dto import CartDTO, cart_to_dto
from bookstore.domain.exceptions import BookNotFoundError
from bookstore.domain.model.value_objects import Quantity
from bookstore.domain.repository.book_repository import BookRepository
from bookstore.domain.repository.cart_repository import CartRepository

logger = structlog.get_logger(__name__)


class AddCartItemHandler:

    def __init__(self, cart_repo: CartRepository, book_repo: BookRepository) -> None:
        self._cart_repo = cart_repo
        self._book_repo = book_repo

    def handle(self, user_id: str, book_id: str, quantity: int) -> CartDTO:
        Quantity(quantity)  # reject bad quantities before any lookup

        book = self._book_repo.get_by_id(book_id)
        if book is None:
            raise BookNotFoundError(f"Book with ID '{book_id}' not found")

        cart = self._cart_repo.get_or_create(user_id)
        line = cart.add_item(book, quantity)
        self._cart_repo.save(cart)

        logger.info("Cart item added", user_id=user_id, book_id=book_id, quantity=line.quantity.value)
        return cart_to_dto(cart)
