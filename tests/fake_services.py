"""In-memory stand-in for the accounts, catalog and review services.

Only the HTTP contract the storefront relies on is implemented. Set
``store.failing = True`` to make every call answer 500.
"""
import itertools

from fastapi import Depends, FastAPI, HTTPException


class FakeStore:
    def __init__(self):
        self.reset()

    def reset(self):
        self.users = {}
        self.products = {}
        self.recommendations = {}
        self.failing = False
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def add_user(self, **fields) -> dict:
        user = {"id": self.next_id(), "active": 1, **fields}
        self.users[user["id"]] = user
        return user

    def add_product(self, **fields) -> dict:
        product = {"id": self.next_id(), "availability": 0, **fields}
        self.products[product["id"]] = product
        return product

    def add_recommendation(self, user_id: int, product_id: int, rating: int) -> dict:
        rec = {
            "id": self.next_id(),
            "rating": rating,
            "user": self.users[user_id],
            "product": self.products[product_id],
        }
        self.recommendations[rec["id"]] = rec
        return rec


def create_app(store: FakeStore) -> FastAPI:
    app = FastAPI(title="Fake collaborator services")

    def available():
        if store.failing:
            raise HTTPException(status_code=500, detail="service unavailable")

    def lookup(table: dict, item_id: int, what: str) -> dict:
        if item_id not in table:
            raise HTTPException(status_code=404, detail=f"{what} not found")
        return table[item_id]

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # -------------------- accounts --------------------
    @app.get("/api/accounts/users", dependencies=[Depends(available)])
    async def list_users():
        return list(store.users.values())

    @app.get("/api/accounts/users/{user_id}", dependencies=[Depends(available)])
    async def get_user(user_id: int):
        return lookup(store.users, user_id, "user")

    @app.post("/api/accounts/users", dependencies=[Depends(available)])
    async def create_user(payload: dict):
        name = payload.get("userName")
        if not name:
            raise HTTPException(status_code=400, detail="userName required")
        if any(u.get("userName") == name for u in store.users.values()):
            raise HTTPException(status_code=409, detail="username taken")
        return store.add_user(**{k: v for k, v in payload.items() if k != "id"})

    @app.put("/api/accounts/users/{user_id}", dependencies=[Depends(available)])
    async def update_user(user_id: int, payload: dict):
        user = lookup(store.users, user_id, "user")
        user.update({k: v for k, v in payload.items() if k != "id"})
        return user

    @app.delete("/api/accounts/users/{user_id}", dependencies=[Depends(available)])
    async def delete_user(user_id: int):
        lookup(store.users, user_id, "user")
        del store.users[user_id]
        for rid in [r["id"] for r in store.recommendations.values() if r["user"]["id"] == user_id]:
            del store.recommendations[rid]

    # -------------------- catalog --------------------
    @app.get("/api/catalog/products", dependencies=[Depends(available)])
    async def list_products():
        return list(store.products.values())

    @app.get("/api/catalog/products/{product_id}", dependencies=[Depends(available)])
    async def get_product(product_id: int):
        return lookup(store.products, product_id, "product")

    @app.post("/api/catalog/admin/products", dependencies=[Depends(available)])
    async def create_product(payload: dict):
        if not payload.get("productName"):
            raise HTTPException(status_code=400, detail="productName required")
        return store.add_product(**{k: v for k, v in payload.items() if k != "id"})

    @app.put("/api/catalog/admin/products/{product_id}", dependencies=[Depends(available)])
    async def update_product(product_id: int, payload: dict):
        product = lookup(store.products, product_id, "product")
        product.update({k: v for k, v in payload.items() if k != "id"})
        return product

    @app.delete("/api/catalog/admin/products/{product_id}", dependencies=[Depends(available)])
    async def delete_product(product_id: int):
        lookup(store.products, product_id, "product")
        del store.products[product_id]

    # -------------------- review --------------------
    @app.get("/api/review/recommendations", dependencies=[Depends(available)])
    async def list_recommendations(name: str | None = None, userId: int | None = None):
        recs = list(store.recommendations.values())
        if userId is not None:
            recs = [r for r in recs if r["user"]["id"] == userId]
        return recs

    @app.post("/api/review/{user_id}/recommendations/{product_id}", dependencies=[Depends(available)])
    async def create_recommendation(user_id: int, product_id: int, rating: int):
        lookup(store.users, user_id, "user")
        lookup(store.products, product_id, "product")
        if not 1 <= rating <= 5:
            raise HTTPException(status_code=400, detail="rating must be 1..5")
        return store.add_recommendation(user_id, product_id, rating)

    @app.delete("/api/review/recommendations/{rec_id}", dependencies=[Depends(available)])
    async def delete_recommendation(rec_id: int):
        lookup(store.recommendations, rec_id, "recommendation")
        del store.recommendations[rec_id]

    return app
