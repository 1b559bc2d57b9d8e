"""
Webhook DTOs (Pydantic v2): Click SHOP-API callbacks and the Payme
merchant API (JSON-RPC).
"""
from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


RequestId = Union[int, str]


# --- Click ---------------------------------------------------------------

class ClickWebhookAction(IntEnum):
    PREPARE = 0
    COMPLETE = 1


class ClickWebhookBody(BaseModel):
    # Click posts form fields; numbers are kept as the exact strings signed
    click_trans_id: str
    service_id: str
    click_paydoc_id: str = ""
    merchant_trans_id: str  # order id on our side
    amount: str
    action: ClickWebhookAction
    error: int = 0
    error_note: str = ""
    sign_time: str
    sign_string: str
    # present for the complete action only
    merchant_prepare_id: Optional[str] = None

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lstrip("-").isdigit():
            return int(v)
        return v


class ClickWebhookResponse(BaseModel):
    click_trans_id: str
    merchant_trans_id: str
    merchant_prepare_id: Optional[Union[int, str]] = None
    merchant_confirm_id: Optional[Union[int, str]] = None
    error: int
    error_note: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# --- Payme merchant API -------------------------------------------------

class PaymeWebhookMethod:
    CHECK_PERFORM_TRANSACTION = "CheckPerformTransaction"
    CREATE_TRANSACTION = "CreateTransaction"
    PERFORM_TRANSACTION = "PerformTransaction"
    CANCEL_TRANSACTION = "CancelTransaction"
    CHECK_TRANSACTION = "CheckTransaction"
    GET_STATEMENT = "GetStatement"


class _PaymeModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PaymeAccount(_PaymeModel):
    order_id: str


class PaymeJsonRpcRequest(_PaymeModel):
    id: Optional[RequestId] = None
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


class CheckPerformTransactionParams(_PaymeModel):
    amount: int  # tiyin
    account: PaymeAccount


class CreateTransactionParams(_PaymeModel):
    id: str  # Payme transaction id
    time: int
    amount: int  # tiyin
    account: PaymeAccount


class PerformTransactionParams(_PaymeModel):
    id: str


class CancelTransactionParams(_PaymeModel):
    id: str
    reason: int


class CheckTransactionParams(_PaymeModel):
    id: str


class GetStatementParams(_PaymeModel):
    from_: int = Field(alias="from")
    to: int


class CheckPerformTransactionResult(_PaymeModel):
    allow: bool = True
    detail: Optional[Any] = None


class CreateTransactionResult(_PaymeModel):
    create_time: int
    transaction: str  # our internal transaction id
    state: int


class PerformTransactionResult(_PaymeModel):
    perform_time: int
    transaction: str
    state: int


class CancelTransactionResult(_PaymeModel):
    cancel_time: int
    transaction: str
    state: int


class CheckTransactionResult(_PaymeModel):
    create_time: int
    perform_time: int = 0
    cancel_time: int = 0
    transaction: str
    state: int
    reason: Optional[int] = None


class StatementTransaction(_PaymeModel):
    id: str
    time: int
    amount: int
    account: PaymeAccount
    create_time: int
    perform_time: int = 0
    cancel_time: int = 0
    transaction: str
    state: int
    reason: Optional[int] = None
    receivers: Optional[list[Any]] = None


class GetStatementResult(_PaymeModel):
    transactions: list[StatementTransaction] = Field(default_factory=list)


PAYME_PARAMS_BY_METHOD: dict[str, type[BaseModel]] = {
    PaymeWebhookMethod.CHECK_PERFORM_TRANSACTION: CheckPerformTransactionParams,
    PaymeWebhookMethod.CREATE_TRANSACTION: CreateTransactionParams,
    PaymeWebhookMethod.PERFORM_TRANSACTION: PerformTransactionParams,
    PaymeWebhookMethod.CANCEL_TRANSACTION: CancelTransactionParams,
    PaymeWebhookMethod.CHECK_TRANSACTION: CheckTransactionParams,
    PaymeWebhookMethod.GET_STATEMENT: GetStatementParams,
}
