"""
Database Schemas for the Budget API

Each Pydantic model maps to a MongoDB collection (lowercased class name).
- User -> "user"
- Budget -> "budget"
- Income -> "income"
- Expense -> "expense"
- Saving -> "saving"

The collection schemas double as the create payloads. Partial updates use
the *Update models: only fields present in the request are applied, and an
explicit null is only accepted for fields that are optional on the record.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    constr,
    field_validator,
)

OBJECT_ID_PATTERN = r"^[0-9a-f]{24}$"

NonEmptyStr = constr(strip_whitespace=True, min_length=1)
ObjectIdStr = constr(pattern=OBJECT_ID_PATTERN)


def _reject_null(value):
    if value is None:
        raise ValueError("cannot be null")
    return value


# --- Users ---

class User(BaseModel):
    """
    Users collection schema
    Collection name: "user"
    """
    name: NonEmptyStr = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Email address, unique")
    password_hash: str = Field(..., description="Hashed password, never returned")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserCreate(BaseModel):
    name: NonEmptyStr = Field(..., description="Full name")
    email: EmailStr = Field(..., description="Email address")
    password: constr(min_length=6) = Field(..., description="At least 6 characters")


class UserUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[NonEmptyStr] = None
    email: Optional[EmailStr] = None
    password: Optional[constr(min_length=6)] = None

    @field_validator("name", "email", "password")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class UserPublic(BaseModel):
    id: str
    name: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: constr(min_length=1)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


# --- Budgets ---

class Budget(BaseModel):
    """
    Monthly budgets
    Collection name: "budget"
    """
    user_id: Optional[ObjectIdStr] = Field(
        None,
        validation_alias=AliasChoices("user_id", "user"),
        description="Owner user id as string, defaults to the caller",
    )
    month: int = Field(..., ge=1, le=12, description="Month number, 1-12")
    year: int = Field(..., ge=2000, description="Four digit year")
    created_at: Optional[datetime] = None


class BudgetUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, ge=2000)

    @field_validator("month", "year")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


# --- Budget children ---

class Income(BaseModel):
    """
    Income expected or received within a budget
    Collection name: "income"
    """
    budget_id: ObjectIdStr = Field(
        ...,
        validation_alias=AliasChoices("budget_id", "budget"),
        description="Parent budget id as string",
    )
    type: NonEmptyStr = Field(..., description="Kind of income, e.g. salary")
    amount: float = Field(..., ge=0)
    source: NonEmptyStr = Field(..., description="Who pays it")
    expected_date: Optional[date] = None
    received_date: Optional[date] = None


class IncomeUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Optional[NonEmptyStr] = None
    amount: Optional[float] = Field(None, ge=0)
    source: Optional[NonEmptyStr] = None
    expected_date: Optional[date] = None
    received_date: Optional[date] = None

    @field_validator("type", "amount", "source")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class Expense(BaseModel):
    """
    Planned and actual spending within a budget
    Collection name: "expense"
    """
    budget_id: ObjectIdStr = Field(
        ...,
        validation_alias=AliasChoices("budget_id", "budget"),
        description="Parent budget id as string",
    )
    name: NonEmptyStr = Field(..., description="What the money is for")
    budgeted_amount: float = Field(..., ge=0)
    actual_amount: Optional[float] = Field(None, ge=0)
    priority_level: Optional[int] = Field(None, ge=1, le=5, description="1 (highest) to 5")
    expected_date: Optional[date] = None
    paid: bool = False
    paid_date: Optional[date] = None
    recurring: bool = False


class ExpenseUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[NonEmptyStr] = None
    budgeted_amount: Optional[float] = Field(None, ge=0)
    actual_amount: Optional[float] = Field(None, ge=0)
    priority_level: Optional[int] = Field(None, ge=1, le=5)
    expected_date: Optional[date] = None
    paid: Optional[bool] = None
    paid_date: Optional[date] = None
    recurring: Optional[bool] = None

    @field_validator("name", "budgeted_amount", "paid", "recurring")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class Saving(BaseModel):
    """
    Savings goals within a budget
    Collection name: "saving"
    """
    budget_id: ObjectIdStr = Field(
        ...,
        validation_alias=AliasChoices("budget_id", "budget"),
        description="Parent budget id as string",
    )
    target_amount: float = Field(..., ge=0)
    saving_method: NonEmptyStr = Field(..., description="e.g. transfer, cash jar")
    actual_saved_amount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class SavingUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target_amount: Optional[float] = Field(None, ge=0)
    saving_method: Optional[NonEmptyStr] = None
    actual_saved_amount: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator("target_amount", "saving_method")
    @classmethod
    def not_null(cls, v):
        return _reject_null(v)


class Message(BaseModel):
    """Acknowledgment body for deletes"""
    message: str
