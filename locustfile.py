import random
import re

from locust import HttpUser, task, between


class ShopperUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Remember the catalog's product ids for cart traffic
        self.product_ids = []
        r = self.client.get("/products")
        if r.status_code == 200:
            self.product_ids = [int(pid) for pid in _product_ids(r.text)]

    @task(3)
    def browse_products(self):
        category = random.choice(["All", "Electronics", "Clothing", "Books", "Home"])
        self.client.get("/products", params={"category": category, "q": random.choice(["", "pro", "lamp"])}, name="/products")

    @task(2)
    def add_to_cart(self):
        if not self.product_ids:
            return
        self.client.post("/cart/items", data={"product_id": random.choice(self.product_ids)}, name="/cart/items")

    @task(1)
    def view_cart(self):
        self.client.get("/cart")

    @task(1)
    def admin_products(self):
        self.client.get("/admin/products")


def _product_ids(html: str):
    return re.findall(r'data-product-id="(\d+)"', html)
