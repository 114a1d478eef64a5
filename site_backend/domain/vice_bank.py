"""
Vice bank models.

Users earn tokens by logging deposits against an Action ("30 minutes of
exercise = 1 token") and spend them on purchases priced by a PurchasePrice.
Every record except the user carries `vbUserId`, the vice bank user it
belongs to.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from site_backend.core.errors import InvalidInputError
from site_backend.domain.validation import (
    ensure_valid,
    format_date,
    is_iso_date,
    is_number,
    is_str,
    parse_date,
)
from site_backend.repositories.entity_store import EntityCodec


def _positive(value: Any) -> bool:
    return is_number(value) and value > 0


def _non_negative(value: Any) -> bool:
    return is_number(value) and value >= 0


_USER_FIELDS = {"id": is_str, "name": is_str, "currentTokens": is_number}
_ACTION_FIELDS = {
    "id": is_str,
    "vbUserId": is_str,
    "name": is_str,
    "conversionUnit": is_str,
    "depositsPer": _positive,
    "tokensPer": _non_negative,
    "minDeposit": _non_negative,
}
_ACTION_OPTIONAL = {"maxDeposit": _positive}
_DEPOSIT_FIELDS = {
    "id": is_str,
    "vbUserId": is_str,
    "date": is_iso_date,
    "depositQuantity": _non_negative,
    "conversionRate": _non_negative,
    "actionName": is_str,
}
_DEPOSIT_OPTIONAL = {"actionId": is_str}
_PRICE_FIELDS = {"id": is_str, "vbUserId": is_str, "name": is_str, "price": _non_negative}
_PURCHASE_FIELDS = {
    "id": is_str,
    "vbUserId": is_str,
    "purchasePriceId": is_str,
    "date": is_iso_date,
    "purchasedQuantity": _positive,
}


@dataclass
class ViceBankUser:
    id: str
    name: str
    current_tokens: float = 0

    @classmethod
    def from_json(cls, value: Any) -> "ViceBankUser":
        data = ensure_valid("ViceBankUser", value, _USER_FIELDS)
        return cls(id=data["id"], name=data["name"], current_tokens=data["currentTokens"])

    def with_tokens(self, delta: float) -> "ViceBankUser":
        return replace(self, current_tokens=self.current_tokens + delta)

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name, "currentTokens": self.current_tokens}


@dataclass
class Action:
    id: str
    vb_user_id: str
    name: str
    conversion_unit: str
    deposits_per: float
    tokens_per: float
    min_deposit: float
    max_deposit: Optional[float] = None

    @classmethod
    def from_json(cls, value: Any) -> "Action":
        data = ensure_valid("Action", value, _ACTION_FIELDS, _ACTION_OPTIONAL)
        return cls(
            id=data["id"],
            vb_user_id=data["vbUserId"],
            name=data["name"],
            conversion_unit=data["conversionUnit"],
            deposits_per=data["depositsPer"],
            tokens_per=data["tokensPer"],
            min_deposit=data["minDeposit"],
            max_deposit=data.get("maxDeposit"),
        )

    @property
    def conversion_rate(self) -> float:
        return self.tokens_per / self.deposits_per

    def counted_quantity(self, quantity: float) -> float:
        """The part of a deposit that earns tokens: at least min_deposit, capped at max_deposit."""
        if quantity < self.min_deposit:
            raise InvalidInputError(
                f"Deposit of {quantity} is below the minimum of {self.min_deposit} {self.conversion_unit}",
                ["depositQuantity"],
            )
        return min(quantity, self.max_deposit) if self.max_deposit is not None else quantity

    def tokens_for(self, quantity: float) -> float:
        return self.counted_quantity(quantity) * self.conversion_rate

    def to_json(self) -> dict:
        output = {
            "id": self.id,
            "vbUserId": self.vb_user_id,
            "name": self.name,
            "conversionUnit": self.conversion_unit,
            "depositsPer": self.deposits_per,
            "tokensPer": self.tokens_per,
            "minDeposit": self.min_deposit,
        }
        if self.max_deposit is not None:
            output["maxDeposit"] = self.max_deposit
        return output


@dataclass
class Deposit:
    id: str
    vb_user_id: str
    date: datetime
    deposit_quantity: float
    conversion_rate: float
    action_name: str
    action_id: Optional[str] = None

    @classmethod
    def from_json(cls, value: Any) -> "Deposit":
        data = ensure_valid("Deposit", value, _DEPOSIT_FIELDS, _DEPOSIT_OPTIONAL)
        return cls(
            id=data["id"],
            vb_user_id=data["vbUserId"],
            date=parse_date(data["date"]),
            deposit_quantity=data["depositQuantity"],
            conversion_rate=data["conversionRate"],
            action_name=data["actionName"],
            action_id=data.get("actionId"),
        )

    @property
    def tokens_earned(self) -> float:
        return self.deposit_quantity * self.conversion_rate

    def to_json(self) -> dict:
        output = {
            "id": self.id,
            "vbUserId": self.vb_user_id,
            "date": format_date(self.date),
            "depositQuantity": self.deposit_quantity,
            "conversionRate": self.conversion_rate,
            "actionName": self.action_name,
        }
        if self.action_id is not None:
            output["actionId"] = self.action_id
        return output


@dataclass
class PurchasePrice:
    id: str
    vb_user_id: str
    name: str
    price: float

    @classmethod
    def from_json(cls, value: Any) -> "PurchasePrice":
        data = ensure_valid("PurchasePrice", value, _PRICE_FIELDS)
        return cls(id=data["id"], vb_user_id=data["vbUserId"], name=data["name"], price=data["price"])

    def to_json(self) -> dict:
        return {"id": self.id, "vbUserId": self.vb_user_id, "name": self.name, "price": self.price}


@dataclass
class Purchase:
    id: str
    vb_user_id: str
    purchase_price_id: str
    date: datetime
    purchased_quantity: float

    @classmethod
    def from_json(cls, value: Any) -> "Purchase":
        data = ensure_valid("Purchase", value, _PURCHASE_FIELDS)
        return cls(
            id=data["id"],
            vb_user_id=data["vbUserId"],
            purchase_price_id=data["purchasePriceId"],
            date=parse_date(data["date"]),
            purchased_quantity=data["purchasedQuantity"],
        )

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "vbUserId": self.vb_user_id,
            "purchasePriceId": self.purchase_price_id,
            "date": format_date(self.date),
            "purchasedQuantity": self.purchased_quantity,
        }


def _by_id(entity) -> str:
    return entity.id


VICE_BANK_USER_CODEC = EntityCodec("ViceBankUser", ViceBankUser.from_json, ViceBankUser.to_json, _by_id)
ACTION_CODEC = EntityCodec("Action", Action.from_json, Action.to_json, _by_id)
DEPOSIT_CODEC = EntityCodec("Deposit", Deposit.from_json, Deposit.to_json, _by_id)
PURCHASE_PRICE_CODEC = EntityCodec("PurchasePrice", PurchasePrice.from_json, PurchasePrice.to_json, _by_id)
PURCHASE_CODEC = EntityCodec("Purchase", Purchase.from_json, Purchase.to_json, _by_id)
