"""
Database Schemas for the Portfolio Apps

Each Pydantic model corresponds to one MongoDB collection.
Collection name is the lowercase of the class name; stored field names are
the camelCase aliases (reviewCount, totalAmount, ...).
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

Category = Literal["electronics", "furniture", "clothing", "books"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "completed", "failed", "refunded"]
PaymentMethod = Literal["credit_card", "paypal", "stripe"]
TaskStatus = Literal["todo", "in-progress", "completed"]
TaskPriority = Literal["low", "medium", "high"]
Plan = Literal["basic", "pro", "enterprise"]
UserStatus = Literal["active", "inactive", "suspended"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


# ---------- E-commerce ----------

class Product(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: Category
    image: str = Field(..., description="Image URL")
    stock: int = Field(0, ge=0)
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    featured: bool = False
    discount: Optional[float] = Field(None, ge=0, le=100, description="Percent off")
    tags: List[str] = Field(default_factory=list)


class CartItemRequest(CamelModel):
    user: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)


class ShippingAddress(CamelModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)


class OrderItem(CamelModel):
    product: str = Field(..., description="Product id")
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0, description="Unit price captured at purchase time")


class Order(CamelModel):
    user: str
    items: List[OrderItem]
    total_amount: float = Field(..., ge=0)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    status: OrderStatus = "pending"
    payment_status: PaymentStatus = "pending"
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None


class OrderCreateRequest(CamelModel):
    user: str = Field(..., min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod


class OrderUpdate(CamelModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tracking_number: Optional[str] = None


# ---------- Task manager ----------

class Task(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: TaskStatus = "todo"
    priority: TaskPriority = "medium"
    due_date: Optional[datetime] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None


# ---------- SaaS dashboard ----------

class User(CamelModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    plan: Plan = "basic"
    status: UserStatus = "active"
    joined_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
    subscription_id: Optional[str] = None


class Subscriptions(CamelModel):
    basic: int = Field(0, ge=0)
    pro: int = Field(0, ge=0)
    enterprise: int = Field(0, ge=0)


class Metrics(CamelModel):
    page_views: int = Field(0, ge=0)
    unique_visitors: int = Field(0, ge=0)
    average_session_duration: float = Field(0, ge=0)


class Analytics(CamelModel):
    date: datetime
    active_users: int = Field(0, ge=0)
    new_users: int = Field(0, ge=0)
    revenue: float = Field(0, ge=0)
    subscriptions: Subscriptions = Field(default_factory=Subscriptions)
    metrics: Metrics = Field(default_factory=Metrics)


class AnalyticsUpdate(CamelModel):
    active_users: Optional[int] = Field(None, ge=0)
    new_users: Optional[int] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)
    subscriptions: Optional[Subscriptions] = None
    metrics: Optional[Metrics] = None


# ---------- Operator ----------

class TokenRequest(BaseModel):
    key: str
