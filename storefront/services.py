"""One function per collaborator operation.

Payloads for create/update are passed through as given (wire keys); reads are
validated into ``schemas`` records. Any failure surfaces as ``ServiceError``.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from . import schemas
from .client import ServiceClient, ServiceError

ACCOUNTS = "/api/accounts"
CATALOG = "/api/catalog"
REVIEW = "/api/review"

M = TypeVar("M", bound=BaseModel)


def _one(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ServiceError(f"unexpected {model.__name__} payload") from e


def _many(model: Type[M], data: Any) -> List[M]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise ServiceError(f"expected a list of {model.__name__}")
    return [_one(model, item) for item in data]


# -------------------- accounts --------------------

def list_users(api: ServiceClient) -> List[schemas.User]:
    return _many(schemas.User, api.get(f"{ACCOUNTS}/users"))


def get_user(api: ServiceClient, user_id: int) -> schemas.User:
    return _one(schemas.User, api.get(f"{ACCOUNTS}/users/{user_id}"))


def create_user(api: ServiceClient, payload: Dict[str, Any]) -> schemas.User:
    return _one(schemas.User, api.post(f"{ACCOUNTS}/users", json=payload))


def update_user(api: ServiceClient, user_id: int, payload: Dict[str, Any]) -> schemas.User:
    return _one(schemas.User, api.put(f"{ACCOUNTS}/users/{user_id}", json=payload))


def delete_user(api: ServiceClient, user_id: int) -> None:
    api.delete(f"{ACCOUNTS}/users/{user_id}")


# -------------------- catalog --------------------

def list_products(api: ServiceClient) -> List[schemas.Product]:
    return _many(schemas.Product, api.get(f"{CATALOG}/products"))


def get_product(api: ServiceClient, product_id: int) -> schemas.Product:
    return _one(schemas.Product, api.get(f"{CATALOG}/products/{product_id}"))


def create_product(api: ServiceClient, payload: Dict[str, Any]) -> schemas.Product:
    return _one(schemas.Product, api.post(f"{CATALOG}/admin/products", json=payload))


def update_product(api: ServiceClient, product_id: int, payload: Dict[str, Any]) -> schemas.Product:
    return _one(schemas.Product, api.put(f"{CATALOG}/admin/products/{product_id}", json=payload))


def delete_product(api: ServiceClient, product_id: int) -> None:
    api.delete(f"{CATALOG}/admin/products/{product_id}")


# -------------------- review --------------------

def list_recommendations(api: ServiceClient, user_id: Optional[int] = None) -> List[schemas.Recommendation]:
    params = {"userId": user_id} if user_id is not None else {"name": "all"}
    return _many(schemas.Recommendation, api.get(f"{REVIEW}/recommendations", params=params))


def create_recommendation(api: ServiceClient, user_id: int, product_id: int, rating: int) -> schemas.Recommendation:
    data = api.post(f"{REVIEW}/{user_id}/recommendations/{product_id}", params={"rating": rating})
    return _one(schemas.Recommendation, data)


def delete_recommendation(api: ServiceClient, recommendation_id: int) -> None:
    api.delete(f"{REVIEW}/recommendations/{recommendation_id}")


# -------------------- shop --------------------
# The shop service exposes no admin order endpoints yet: listing yields
# nothing and status updates always fail.

def list_orders(api: ServiceClient) -> List[schemas.Order]:
    return []


def update_order_status(api: ServiceClient, order_id: int, status: str) -> schemas.Order:
    raise ServiceError("order status update not implemented")
