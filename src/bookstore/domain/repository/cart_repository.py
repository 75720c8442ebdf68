"""Abstract repository for Cart aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bookstore.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def get_by_user(self, user_id: str) -> Cart | None:
        """Return the cart owned by *user_id*, or None if it has none yet."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist a new or updated cart."""

    def get_or_create(self, user_id: str) -> Cart:
        """Return the user's cart, creating and saving an empty one if absent."""
        cart = self.get_by_user(user_id)
        if cart is None:
            cart = Cart(user_id=user_id)
            self.save(cart)
        return cart
