"""Application service: Clear Cart use case. Safe to repeat."""

from __future__ import annotations

from bookstore.application.dto import CartDTO, cart_to_dto
from bookstore.domain.repository.cart_repository import CartRepository


class ClearCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> CartDTO:
        cart = self._cart_repo.get_or_create(user_id)
        cart.clear()
        self._cart_repo.save(cart)
        return cart_to_dto(cart)
