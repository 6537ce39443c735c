"""
Database Schemas

MongoDB collection schemas and request bodies, as Pydantic models.
Collections used by the API:
- Plant -> "plants" collection
- User -> "users" collection
- Order -> "orders" collection
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

Role = Literal["customer", "seller", "admin"]
Status = Literal["requested", "verified"]


class Plant(BaseModel):
    """
    Plants collection schema
    Collection name: "plants"
    """
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, description="Plant name")
    image: str = Field(..., min_length=1, description="Image URL")
    price: float = Field(..., ge=0, description="Price in dollars")
    quantity: int = Field(..., ge=0, description="Units in stock")
    category: Optional[str] = None
    description: Optional[str] = None


class User(BaseModel):
    """
    Users collection schema
    Collection name: "users"
    """
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="Email address, unique")
    image: str = Field(..., description="Avatar URL")
    role: Role = Field("customer", description="Role: customer | seller | admin")
    status: Optional[Status] = Field(None, description="Seller request status: requested | verified")
    created_at: Optional[datetime] = None
    last_login_time: Optional[datetime] = None


class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)


class LastLoginUpdate(BaseModel):
    last_login_time: Optional[datetime] = None


class RoleUpdate(BaseModel):
    role: Role


class OrderCustomer(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: Optional[EmailStr] = None
    name: Optional[str] = None
    image: Optional[str] = None


class OrderRequest(BaseModel):
    """
    Body of POST /orders. Clients send the purchaser either as a top-level
    email or nested under customer.email; both end up in `email`.
    Any additional fields are kept and stored with the order.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    email: Optional[EmailStr] = None
    customer: Optional[OrderCustomer] = None
    plant_id: Optional[str] = Field(None, alias="plantId")
    quantity: int = Field(1, ge=1, description="Units purchased")
    transaction_id: Optional[str] = Field(None, alias="transactionId")

    @model_validator(mode="after")
    def use_customer_email(self):
        if not self.email and self.customer is not None and self.customer.email:
            self.email = self.customer.email
        return self


class PaymentIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plant_id: str = Field(..., alias="plantId")
    quantity: int = Field(..., ge=1)


class SessionClaims(BaseModel):
    model_config = ConfigDict(extra="allow")

    email: EmailStr
