"""Port for the external payment gateway.

The domain only needs to ask the gateway what it knows about a
transaction; the concrete HTTP adapter lives in infrastructure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class GatewayStatus(Enum):
    COMPLETE = "COMPLETE"
    PENDING = "PENDING"
    AMBIGUOUS = "AMBIGUOUS"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> GatewayStatus:
        """Map a raw gateway status onto the known set.

        Both spellings of cancelled are accepted; anything unrecognised
        becomes UNKNOWN.
        """
        normalized = (value or "").strip().upper()
        if normalized == "CANCELLED":
            normalized = "CANCELED"
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class GatewayStatusReport:
    transaction_uuid: str
    status: GatewayStatus
    total_amount: Decimal | None = None
    reference: str | None = None


class PaymentGateway(ABC):

    @abstractmethod
    def fetch_status(
        self,
        transaction_uuid: str,
        total_amount: Decimal,
        product_code: str,
    ) -> GatewayStatusReport:
        """Ask the gateway for the current state of a transaction."""


@dataclass(frozen=True)
class GatewayCredentials:
    """Merchant settings shared by signing, verification and status checks."""

    secret_key: str
    product_code: str
    form_url: str = ""
    success_url: str = ""
    failure_url: str = ""
