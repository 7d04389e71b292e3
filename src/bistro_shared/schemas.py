"""
Pydantic schemas for request validation.

Field names follow the camelCase JSON used by the clients; the Python
attributes are snake_case.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bistro_shared.constants import Roles
from bistro_shared.errors import ValidationError
from bistro_shared.validation import validate_password, validate_role


def _check(validator, value) -> None:
    """Run a domain validator, reporting failures the way pydantic expects."""
    try:
        validator(value)
    except ValidationError as exc:
        raise ValueError(exc.message) from exc


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CredentialsModel(BaseModel):
    """
    Base for payloads carrying a password. Passwords are kept exactly as
    sent, so only the listed identity fields are stripped.
    """

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "email", "role", mode="before", check_fields=False)
    @classmethod
    def strip_identity_fields(cls, v):
        return v.strip() if isinstance(v, str) else v


class LoginRequest(CredentialsModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class OrderLineRequest(RequestModel):
    menu_item: int = Field(..., alias="menuItem")
    quantity: int = Field(default=1, ge=1)
    special_instructions: str = Field(default="", alias="specialInstructions", max_length=500)


class CreateOrderRequest(RequestModel):
    table_number: int = Field(..., alias="tableNumber", ge=1)
    items: list[OrderLineRequest] = Field(..., min_length=1)


class AddOrderItemsRequest(RequestModel):
    items: list[OrderLineRequest] = Field(default_factory=list)


class UpdateOrderStatusRequest(RequestModel):
    status: str


class UpdatePaymentStatusRequest(RequestModel):
    payment_status: str = Field(..., alias="paymentStatus")


class CreateTableRequest(RequestModel):
    number: int = Field(..., ge=1)
    capacity: int = Field(..., ge=1)


class UpdateTableRequest(RequestModel):
    number: int | None = Field(None, ge=1)
    capacity: int | None = Field(None, ge=1)
    status: str | None = None


class CreateMenuItemRequest(RequestModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = ""
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=80)
    image: str | None = None
    is_available: bool = Field(default=True, alias="isAvailable")


class UpdateMenuItemRequest(RequestModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    category: str | None = Field(None, min_length=1, max_length=80)
    image: str | None = None
    is_available: bool | None = Field(None, alias="isAvailable")


class CreateUserRequest(CredentialsModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str
    role: str = Field(default=Roles.WAITER.value)
    is_active: bool = Field(default=True, alias="isActive")

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        _check(validate_password, v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role_value(cls, v: str) -> str:
        _check(validate_role, v)
        return v


class UpdateUserRequest(CredentialsModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    password: str | None = None
    role: str | None = None
    is_active: bool | None = Field(None, alias="isActive")

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str | None) -> str | None:
        if v is not None:
            _check(validate_password, v)
        return v

    @field_validator("role")
    @classmethod
    def validate_role_value(cls, v: str | None) -> str | None:
        if v is not None:
            _check(validate_role, v)
        return v
