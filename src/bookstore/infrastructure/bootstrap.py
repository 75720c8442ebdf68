"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from bookstore.domain.gateway.payment_gateway import GatewayCredentials
from bookstore.domain.service.order_cost_calculator import CostPolicy
from bookstore.infrastructure.config import Settings, load_settings
from bookstore.infrastructure.gateway.esewa_gateway import EsewaGateway
from bookstore.infrastructure.persistence.json_book_repository import JsonBookRepository
from bookstore.infrastructure.persistence.json_cart_repository import JsonCartRepository
from bookstore.infrastructure.persistence.json_order_repository import JsonOrderRepository


@lru_cache(maxsize=1)
def settings() -> Settings:
    return load_settings()


def book_repository() -> JsonBookRepository:
    return JsonBookRepository(settings().data_dir / "books.json")


def cart_repository() -> JsonCartRepository:
    return JsonCartRepository(settings().data_dir / "carts.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(settings().data_dir / "orders.json")


def cost_policy() -> CostPolicy:
    return settings().cost_policy


def gateway_credentials() -> GatewayCredentials:
    return settings().gateway_credentials


def payment_gateway() -> EsewaGateway:
    return EsewaGateway(settings().esewa_status_url)
