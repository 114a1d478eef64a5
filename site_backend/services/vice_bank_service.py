"""
Vice bank use cases.

Each record type lives in its own store (own backing file). Deposits credit
the owning user's token balance and purchases debit it; the two writes are
separate store mutations, so a failed second write leaves the first applied.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Generic, List, TypeVar

from site_backend.core.errors import InvalidInputError, NotFoundError
from site_backend.domain.validation import utcnow
from site_backend.domain.vice_bank import (
    ACTION_CODEC,
    DEPOSIT_CODEC,
    PURCHASE_CODEC,
    PURCHASE_PRICE_CODEC,
    VICE_BANK_USER_CODEC,
    Action,
    Deposit,
    Purchase,
    PurchasePrice,
    ViceBankUser,
)
from site_backend.repositories.entity_store import EntityCodec, EntityStore
from site_backend.repositories.persistence import build_persistence, open_store
from site_backend.services.pagination import DEFAULT_PAGINATION, Page, paginate

T = TypeVar("T")

BASE_NAMES = {
    "users": "vice_bank_users",
    "actions": "action_data",
    "deposits": "deposit_data",
    "purchase_prices": "purchase_price_data",
    "purchases": "purchase_data",
}


class ViceBankCollection(Generic[T]):
    """CRUD over one per-user record type (everything except users)."""

    def __init__(self, store: EntityStore[T]) -> None:
        self.store = store

    def get(self, user_id: str, page: int = 1, pagination: int = DEFAULT_PAGINATION) -> Page[T]:
        items = [item for item in self.store.entities_list if item.vb_user_id == user_id]
        if items and hasattr(items[0], "date"):
            items.sort(key=lambda item: item.date, reverse=True)
        return paginate(items, page, pagination)

    def get_by_id(self, item_id: str) -> T:
        return self.store.get(item_id)

    def add(self, item: T) -> T:
        return self.store.add(replace(item, id=str(uuid.uuid4())))

    def update(self, item: T) -> T:
        return self.store.update(item)

    def delete(self, item_id: str) -> T:
        return self.store.delete(item_id)

    def backup(self) -> None:
        self.store.backup()


class ViceBankService:
    def __init__(
        self,
        users: EntityStore[ViceBankUser] | None = None,
        actions: EntityStore[Action] | None = None,
        deposits: EntityStore[Deposit] | None = None,
        purchase_prices: EntityStore[PurchasePrice] | None = None,
        purchases: EntityStore[Purchase] | None = None,
    ) -> None:
        self.users = users if users is not None else EntityStore(VICE_BANK_USER_CODEC)
        self.actions = ViceBankCollection(actions if actions is not None else EntityStore(ACTION_CODEC))
        self.deposits = ViceBankCollection(deposits if deposits is not None else EntityStore(DEPOSIT_CODEC))
        self.purchase_prices = ViceBankCollection(
            purchase_prices if purchase_prices is not None else EntityStore(PURCHASE_PRICE_CODEC)
        )
        self.purchases = ViceBankCollection(purchases if purchases is not None else EntityStore(PURCHASE_CODEC))

    @classmethod
    def open(cls, backend: str, path: str | Path) -> "ViceBankService":
        def _open(codec: EntityCodec, kind: str) -> EntityStore:
            return open_store(codec, build_persistence(backend, path=path, base_name=BASE_NAMES[kind]))

        return cls(
            users=_open(VICE_BANK_USER_CODEC, "users"),
            actions=_open(ACTION_CODEC, "actions"),
            deposits=_open(DEPOSIT_CODEC, "deposits"),
            purchase_prices=_open(PURCHASE_PRICE_CODEC, "purchase_prices"),
            purchases=_open(PURCHASE_CODEC, "purchases"),
        )

    # ------------------------------ users ------------------------------
    def get_users(self, page: int = 1, pagination: int = DEFAULT_PAGINATION) -> Page[ViceBankUser]:
        users = sorted(self.users.entities_list, key=lambda user: user.name.lower())
        return paginate(users, page, pagination)

    def get_user(self, user_id: str) -> ViceBankUser:
        return self.users.get(user_id)

    def add_user(self, name: str) -> ViceBankUser:
        return self.users.add(ViceBankUser(id=str(uuid.uuid4()), name=name, current_tokens=0))

    def rename_user(self, user_id: str, name: str) -> ViceBankUser:
        with self.users.lock:
            return self.users.update(replace(self.users.get(user_id), name=name))

    def delete_user(self, user_id: str) -> ViceBankUser:
        return self.users.delete(user_id)

    def _adjust_tokens(self, user_id: str, delta: float) -> ViceBankUser:
        with self.users.lock:
            return self.users.update(self.users.get(user_id).with_tokens(delta))

    def _owned(self, collection: ViceBankCollection, item_id: str, user_id: str):
        item = collection.get_by_id(item_id)
        if item.vb_user_id != user_id:
            raise NotFoundError(f"{collection.store.codec.name} {item_id} does not exist")
        return item

    def update_owned(self, collection: ViceBankCollection[T], item: T) -> T:
        """Replace a record; it must exist, keep its owner, and the owner must exist."""
        with self.users.lock:
            self.get_user(item.vb_user_id)
            current = collection.get_by_id(item.id)
            if current.vb_user_id != item.vb_user_id:
                raise InvalidInputError("Records cannot change owner", ["vbUserId"])
            return collection.update(item)

    # Token balance changes hold the users lock from check to write.

    # ----------------------------- deposits ----------------------------
    def add_deposit(self, user_id: str, action_id: str, quantity: float, date: datetime | None = None) -> Deposit:
        with self.users.lock:
            self.get_user(user_id)
            action = self._owned(self.actions, action_id, user_id)
            deposit = self.deposits.add(
                Deposit(
                    id="",
                    vb_user_id=user_id,
                    date=date or utcnow(),
                    deposit_quantity=action.counted_quantity(quantity),
                    conversion_rate=action.conversion_rate,
                    action_name=action.name,
                    action_id=action.id,
                )
            )
            self._adjust_tokens(user_id, deposit.tokens_earned)
        return deposit

    def delete_deposit(self, user_id: str, deposit_id: str) -> Deposit:
        with self.users.lock:
            self._owned(self.deposits, deposit_id, user_id)
            deposit = self.deposits.delete(deposit_id)
            if self.users.contains(user_id):
                self._adjust_tokens(user_id, -deposit.tokens_earned)
        return deposit

    # ----------------------------- purchases ---------------------------
    def add_purchase(self, user_id: str, purchase_price_id: str, quantity: float, date: datetime | None = None) -> Purchase:
        if quantity <= 0:
            raise InvalidInputError("Purchased quantity must be positive", ["purchasedQuantity"])
        with self.users.lock:
            user = self.get_user(user_id)
            price = self._owned(self.purchase_prices, purchase_price_id, user_id)
            cost = price.price * quantity
            if cost > user.current_tokens:
                raise InvalidInputError(
                    f"{user.name} has {user.current_tokens} tokens, {cost} needed", ["purchasedQuantity"]
                )
            purchase = self.purchases.add(
                Purchase(
                    id="",
                    vb_user_id=user_id,
                    purchase_price_id=price.id,
                    date=date or utcnow(),
                    purchased_quantity=quantity,
                )
            )
            self._adjust_tokens(user_id, -cost)
        return purchase

    def delete_purchase(self, user_id: str, purchase_id: str) -> Purchase:
        with self.users.lock:
            self._owned(self.purchases, purchase_id, user_id)
            purchase = self.purchases.delete(purchase_id)
            try:
                price = self.purchase_prices.get_by_id(purchase.purchase_price_id)
            except NotFoundError:
                return purchase
            if self.users.contains(user_id):
                self._adjust_tokens(user_id, price.price * purchase.purchased_quantity)
        return purchase

    def stores(self) -> List[EntityStore]:
        return [
            self.users,
            self.actions.store,
            self.deposits.store,
            self.purchase_prices.store,
            self.purchases.store,
        ]

    def backup(self) -> None:
        for store in self.stores():
            store.backup()
