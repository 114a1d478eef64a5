from __future__ import annotations

from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request

from site_backend.core.errors import InvalidInputError
from site_backend.domain.validation import is_iso_date, is_number, is_str, parse_date
from site_backend.domain.vice_bank import Action, PurchasePrice
from site_backend.routers.deps import get_services, http_errors, int_param, json_body, require_auth
from site_backend.services.pagination import DEFAULT_PAGE, DEFAULT_PAGINATION, Page
from site_backend.services.vice_bank_service import ViceBankCollection, ViceBankService

router = APIRouter(prefix="/api/vice_bank", tags=["vice_bank"], dependencies=[Depends(require_auth)])


def _vb(request: Request) -> ViceBankService:
    return get_services(request).vice_bank


def _require_user_id(user_id: str | None) -> str:
    if not user_id or not user_id.strip():
        raise HTTPException(400, "userId is required")
    return user_id


def _page_json(key: str, result: Page) -> dict:
    return {key: [item.to_json() for item in result.items], "morePages": result.more_pages}


def _field(body: Any, name: str, check: Callable[[Any], bool]) -> Any:
    if not isinstance(body, dict) or not check(body.get(name)):
        raise InvalidInputError(f"Invalid {name}", [name])
    return body[name]


def _optional_date(body: dict):
    value = body.get("date")
    if value is None:
        return None
    if not is_iso_date(value):
        raise InvalidInputError("Invalid date", ["date"])
    return parse_date(value)


# ------------------------------ users ------------------------------
@router.get("/users")
def get_users(request: Request, page: str | None = None, pagination: str | None = None):
    result = _vb(request).get_users(int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION))
    return _page_json("users", result)


@router.get("/users/{user_id}")
def get_user(user_id: str, request: Request):
    with http_errors(not_found="User Not Found"):
        return _vb(request).get_user(user_id).to_json()


@router.post("/users")
def add_user(request: Request, body: Any = Depends(json_body)):
    with http_errors(invalid="Invalid User Input"):
        user = _vb(request).add_user(_field(body, "name", is_str))
    return user.to_json()


@router.put("/users/{user_id}")
def update_user(user_id: str, request: Request, body: Any = Depends(json_body)):
    with http_errors(not_found="User Not Found", invalid="Invalid User Input"):
        user = _vb(request).rename_user(user_id, _field(body, "name", is_str))
    return user.to_json()


@router.delete("/users/{user_id}")
def delete_user(user_id: str, request: Request):
    with http_errors(not_found="User Not Found"):
        return _vb(request).delete_user(user_id).to_json()


# ---------------------- actions / purchase prices ----------------------
def _register_collection(path: str, key: str, attr: str, model) -> None:
    """Plain CRUD routes for a per-user definition collection."""

    def _collection(request: Request) -> ViceBankCollection:
        return getattr(_vb(request), attr)

    @router.get(f"/{path}", name=f"get_{attr}")
    def get_items(request: Request, userId: str | None = None, page: str | None = None, pagination: str | None = None):
        result = _collection(request).get(
            _require_user_id(userId), int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION)
        )
        return _page_json(key, result)

    @router.post(f"/{path}", name=f"add_{attr}")
    def add_item(request: Request, body: Any = Depends(json_body)):
        with http_errors(not_found="User Not Found", invalid=f"Invalid {model.__name__} Input"):
            item = model.from_json({**body, "id": ""} if isinstance(body, dict) else body)
            _vb(request).get_user(item.vb_user_id)
            saved = _collection(request).add(item)
        return saved.to_json()

    @router.put(f"/{path}/{{item_id}}", name=f"update_{attr}")
    def update_item(item_id: str, request: Request, body: Any = Depends(json_body)):
        with http_errors(not_found=f"User or {model.__name__} Not Found", invalid=f"Invalid {model.__name__} Input"):
            item = model.from_json({**body, "id": item_id} if isinstance(body, dict) else body)
            saved = _vb(request).update_owned(_collection(request), item)
        return saved.to_json()

    @router.delete(f"/{path}/{{item_id}}", name=f"delete_{attr}")
    def delete_item(item_id: str, request: Request):
        with http_errors(not_found=f"{model.__name__} Not Found"):
            return _collection(request).delete(item_id).to_json()


_register_collection("actions", "actions", "actions", Action)
_register_collection("purchase_prices", "purchasePrices", "purchase_prices", PurchasePrice)


# ----------------------------- deposits -----------------------------
@router.get("/deposits")
def get_deposits(request: Request, userId: str | None = None, page: str | None = None, pagination: str | None = None):
    result = _vb(request).deposits.get(
        _require_user_id(userId), int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION)
    )
    return _page_json("deposits", result)


@router.post("/deposits")
def add_deposit(request: Request, body: Any = Depends(json_body)):
    with http_errors(not_found="User or Action Not Found", invalid="Invalid Deposit Input"):
        deposit = _vb(request).add_deposit(
            _field(body, "vbUserId", is_str),
            _field(body, "actionId", is_str),
            _field(body, "depositQuantity", is_number),
            _optional_date(body),
        )
    return deposit.to_json()


@router.delete("/deposits/{deposit_id}")
def delete_deposit(deposit_id: str, request: Request, userId: str | None = None):
    with http_errors(not_found="Deposit Not Found"):
        return _vb(request).delete_deposit(_require_user_id(userId), deposit_id).to_json()


# ----------------------------- purchases -----------------------------
@router.get("/purchases")
def get_purchases(request: Request, userId: str | None = None, page: str | None = None, pagination: str | None = None):
    result = _vb(request).purchases.get(
        _require_user_id(userId), int_param(page, DEFAULT_PAGE), int_param(pagination, DEFAULT_PAGINATION)
    )
    return _page_json("purchases", result)


@router.post("/purchases")
def add_purchase(request: Request, body: Any = Depends(json_body)):
    with http_errors(not_found="User or Purchase Price Not Found", invalid="Invalid Purchase Input"):
        purchase = _vb(request).add_purchase(
            _field(body, "vbUserId", is_str),
            _field(body, "purchasePriceId", is_str),
            _field(body, "purchasedQuantity", is_number),
            _optional_date(body),
        )
    return purchase.to_json()


@router.delete("/purchases/{purchase_id}")
def delete_purchase(purchase_id: str, request: Request, userId: str | None = None):
    with http_errors(not_found="Purchase Not Found"):
        return _vb(request).delete_purchase(_require_user_id(userId), purchase_id).to_json()
