"""
HTTP routes, one APIRouter per resource prefix.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, Path, Request

from auth import AuthService, Identity, get_auth_service, get_current_user
from handlers import BudgetHandler, ChildHandler, UserHandler
from policy import OwnershipPolicy
from schemas import (
    OBJECT_ID_PATTERN,
    AuthResponse,
    Budget,
    BudgetUpdate,
    Expense,
    ExpenseUpdate,
    Income,
    IncomeUpdate,
    LoginRequest,
    Message,
    Saving,
    SavingUpdate,
    UserCreate,
    UserPublic,
    UserUpdate,
)

RecordId = Annotated[str, Path(pattern=OBJECT_ID_PATTERN)]
CurrentUser = Annotated[Identity, Depends(get_current_user)]


def get_policy(request: Request) -> OwnershipPolicy:
    return OwnershipPolicy(request.app.state.store)


# --- Users ---
users = APIRouter(prefix="/api/users", tags=["users"])


def get_user_handler(request: Request, policy: OwnershipPolicy = Depends(get_policy)) -> UserHandler:
    return UserHandler(request.app.state.store, policy)


@users.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.login(payload)
    return {"message": "Login successful", "token": token, "user": user}


@users.post("", status_code=201, response_model=AuthResponse, include_in_schema=False)


@users.post("/", status_code=201, response_model=AuthResponse)
def register(payload: UserCreate, auth: AuthService = Depends(get_auth_service)):
    user, token = auth.register(payload)
    return {"message": "User created", "token": token, "user": user}


@users.get("", response_model=List[UserPublic], include_in_schema=False)


@users.get("/", response_model=List[UserPublic])
def list_users(caller: CurrentUser, handler: UserHandler = Depends(get_user_handler)):
    return handler.list(caller)


@users.get("/{id}", response_model=UserPublic)
def get_user(id: RecordId, caller: CurrentUser, handler: UserHandler = Depends(get_user_handler)):
    return handler.get(caller, id)


@users.patch("/{id}", response_model=UserPublic)
def update_user(id: RecordId, payload: UserUpdate, caller: CurrentUser,
                handler: UserHandler = Depends(get_user_handler)):
    return handler.update(caller, id, payload)


@users.delete("/{id}", response_model=Message)
def delete_user(id: RecordId, caller: CurrentUser, handler: UserHandler = Depends(get_user_handler)):
    return handler.delete(caller, id)


# --- Budgets ---
budgets = APIRouter(prefix="/api/budgets", tags=["budgets"])


def get_budget_handler(request: Request, policy: OwnershipPolicy = Depends(get_policy)) -> BudgetHandler:
    return BudgetHandler(request.app.state.store, policy)


@budgets.get("", include_in_schema=False)


@budgets.get("/")
def list_budgets(caller: CurrentUser, handler: BudgetHandler = Depends(get_budget_handler)):
    return handler.list(caller)


@budgets.get("/user/{user_id}")
def list_budgets_by_user(user_id: RecordId, caller: CurrentUser,
                         handler: BudgetHandler = Depends(get_budget_handler)):
    return handler.list_by_user(caller, user_id)


@budgets.get("/{id}")
def get_budget(id: RecordId, caller: CurrentUser, handler: BudgetHandler = Depends(get_budget_handler)):
    return handler.get(caller, id)


@budgets.post("", status_code=201, include_in_schema=False)


@budgets.post("/", status_code=201)
def create_budget(payload: Budget, caller: CurrentUser, handler: BudgetHandler = Depends(get_budget_handler)):
    return handler.create(caller, payload)


@budgets.patch("/{id}")
def update_budget(id: RecordId, payload: BudgetUpdate, caller: CurrentUser,
                  handler: BudgetHandler = Depends(get_budget_handler)):
    return handler.update(caller, id, payload)


@budgets.delete("/{id}", response_model=Message)
def delete_budget(id: RecordId, caller: CurrentUser, handler: BudgetHandler = Depends(get_budget_handler)):
    return handler.delete(caller, id)


# --- Incomes, expenses, savings ---

def child_router(prefix: str, collection: str, label: str, create_model, update_model) -> APIRouter:
    """Build the standard route set for a collection owned through a budget."""
    router = APIRouter(prefix=prefix, tags=[collection])

    def get_handler(request: Request, policy: OwnershipPolicy = Depends(get_policy)) -> ChildHandler:
        return ChildHandler(request.app.state.store, policy, collection, label)

    @router.get("", include_in_schema=False)

    @router.get("/")
    def list_records(caller: CurrentUser, handler: ChildHandler = Depends(get_handler)):
        return handler.list(caller)

    @router.get("/budget/{budget_id}")
    def list_by_budget(budget_id: RecordId, caller: CurrentUser, handler: ChildHandler = Depends(get_handler)):
        return handler.list_by_budget(caller, budget_id)

    @router.get("/{id}")
    def get_record(id: RecordId, caller: CurrentUser, handler: ChildHandler = Depends(get_handler)):
        return handler.get(caller, id)

    @router.post("", status_code=201, include_in_schema=False)

    @router.post("/", status_code=201)
    def create_record(payload: create_model, caller: CurrentUser, handler: ChildHandler = Depends(get_handler)):
        return handler.create(caller, payload)

    @router.patch("/{id}")
    def update_record(id: RecordId, payload: update_model, caller: CurrentUser,
                      handler: ChildHandler = Depends(get_handler)):
        return handler.update(caller, id, payload)

    @router.delete("/{id}", response_model=Message)
    def delete_record(id: RecordId, caller: CurrentUser, handler: ChildHandler = Depends(get_handler)):
        return handler.delete(caller, id)

    return router


incomes = child_router("/api/incomes", "income", "Income", Income, IncomeUpdate)
expenses = child_router("/api/expenses", "expense", "Expense", Expense, ExpenseUpdate)
savings = child_router("/api/savings", "saving", "Saving", Saving, SavingUpdate)

ROUTERS = (users, budgets, incomes, expenses, savings)
