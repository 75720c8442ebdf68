"""Runtime configuration read from the environment.

A ``.env`` file in the working directory is loaded first, so local
development can keep merchant credentials out of the shell history.
The defaults point at the gateway's public test environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from bookstore.domain.exceptions import ValidationError
from bookstore.domain.gateway.payment_gateway import GatewayCredentials
from bookstore.domain.model.value_objects import Money
from bookstore.domain.service.order_cost_calculator import CostPolicy

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

ESEWA_TEST_SECRET = "8gBm/:&EnhH.1/q"
ESEWA_TEST_PRODUCT_CODE = "EPAYTEST"
ESEWA_TEST_FORM_URL = "https://rc-epay.esewa.com.np/api/epay/main/v2/form"
ESEWA_TEST_STATUS_URL = "https://rc.esewa.com.np/api/epay/transaction/status/"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    tax_rate: Decimal
    free_shipping_threshold: Decimal
    flat_shipping_fee: Decimal
    esewa_secret_key: str
    esewa_product_code: str
    esewa_form_url: str
    esewa_status_url: str
    esewa_success_url: str
    esewa_failure_url: str

    @property
    def cost_policy(self) -> CostPolicy:
        return CostPolicy(
            tax_rate=self.tax_rate,
            free_shipping_threshold=Money(self.free_shipping_threshold),
            flat_shipping_fee=Money(self.flat_shipping_fee),
        )

    @property
    def gateway_credentials(self) -> GatewayCredentials:
        return GatewayCredentials(
            secret_key=self.esewa_secret_key,
            product_code=self.esewa_product_code,
            form_url=self.esewa_form_url,
            success_url=self.esewa_success_url,
            failure_url=self.esewa_failure_url,
        )


def _decimal(name: str, default: str) -> Decimal:
    raw = os.environ.get(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from exc
    if not value.is_finite():
        raise ValidationError(f"{name} must be a finite number, got {raw!r}")
    if value < 0:
        raise ValidationError(f"{name} cannot be negative")
    return value


def load_settings() -> Settings:
    load_dotenv(find_dotenv(usecwd=True))
    return Settings(
        data_dir=Path(os.environ.get("BOOKSTORE_DATA_DIR", str(DEFAULT_DATA_DIR))),
        tax_rate=_decimal("BOOKSTORE_TAX_RATE", "0.08"),
        free_shipping_threshold=_decimal("BOOKSTORE_FREE_SHIPPING_THRESHOLD", "50"),
        flat_shipping_fee=_decimal("BOOKSTORE_FLAT_SHIPPING_FEE", "199"),
        esewa_secret_key=os.environ.get("ESEWA_SECRET_KEY", ESEWA_TEST_SECRET),
        esewa_product_code=os.environ.get("ESEWA_PRODUCT_CODE", ESEWA_TEST_PRODUCT_CODE),
        esewa_form_url=os.environ.get("ESEWA_FORM_URL", ESEWA_TEST_FORM_URL),
        esewa_status_url=os.environ.get("ESEWA_STATUS_URL", ESEWA_TEST_STATUS_URL),
        esewa_success_url=os.environ.get("ESEWA_SUCCESS_URL", "http://localhost:3000/payment/success"),
        esewa_failure_url=os.environ.get("ESEWA_FAILURE_URL", "http://localhost:3000/payment/failure"),
    )
