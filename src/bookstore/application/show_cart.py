"""Application service: Show Cart use case (query, creates on first access)."""

from __future__ import annotations

from bookstore.application.dto import CartDTO, cart_to_dto
from bookstore.domain.repository.cart_repository import CartRepository


class ShowCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, user_id: str) -> CartDTO:
        return cart_to_dto(self._cart_repo.get_or_create(user_id))
