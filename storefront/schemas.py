from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, PositiveInt
from pydantic.config import ConfigDict


class WireModel(BaseModel):
    # Attribute names are snake_case; aliases are the services' JSON keys.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UserRole(WireModel):
    id: Optional[int] = None
    role_name: Optional[str] = Field(default=None, alias="roleName")


class UserDetails(WireModel):
    id: Optional[int] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class User(WireModel):
    id: int
    user_name: str = Field(..., alias="userName")
    # Only ever sent on create/update; the accounts service may echo it back.
    user_password: Optional[str] = Field(default=None, alias="userPassword")
    active: int = 0
    user_details: Optional[UserDetails] = Field(default=None, alias="userDetails")
    role: Optional[UserRole] = None


class Product(WireModel):
    id: int
    product_name: str = Field(..., alias="productName")
    price: float = Field(default=0.0, ge=0)
    # The catalog service spells this key "discription".
    description: Optional[str] = Field(default=None, alias="discription")
    category: Optional[str] = None
    availability: int = Field(default=0, ge=0)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


class Recommendation(WireModel):
    id: int
    rating: int = Field(..., ge=1, le=5)
    product: Product
    user: User


class CartItem(WireModel):
    id: int
    product: Product
    quantity: PositiveInt
    user_id: int = Field(..., alias="userId")


class CartLine(WireModel):
    """What the session cookie keeps per cart item; the product is looked up on render."""
    id: int
    product_id: int = Field(..., alias="productId")
    quantity: PositiveInt
    user_id: int = Field(..., alias="userId")


class OrderItem(WireModel):
    id: int
    product: Product
    quantity: PositiveInt
    price: float


class Order(WireModel):
    id: int
    user_id: int = Field(..., alias="userId")
    items: List[OrderItem] = []
    total_amount: Optional[float] = Field(default=None, alias="totalAmount")
    status: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
