"""
Merchant business logic ports used by the webhook components.

The webhook handlers only authenticate, route and shape responses; all
transaction state lives behind these protocols and is owned by the caller.
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from application.dtos.webhooks import (
    CancelTransactionParams,
    CheckPerformTransactionParams,
    CheckTransactionParams,
    ClickWebhookBody,
    ClickWebhookResponse,
    CreateTransactionParams,
    GetStatementParams,
    PerformTransactionParams,
    RequestId,
)


# {"result": <dict | BaseModel>} or {"error": {"code": ..., "message": {...}, "data": ...}}
PaymeLogicResponse = dict[str, Any]


@runtime_checkable
class PaymeWebhookLogic(Protocol):
    """Six Payme merchant API operations.

    Implementations may also raise ``PaymeError``; the handler turns it into
    a JSON-RPC error.
    """

    async def check_perform_transaction(
        self, params: CheckPerformTransactionParams, request_id: Optional[RequestId] = None
    ) -> PaymeLogicResponse: ...

    async def create_transaction(
        self, params: CreateTransactionParams, request_id: Optional[RequestId] = None
    ) -> PaymeLogicResponse: ...

    async def perform_transaction(
        self, params: PerformTransactionParams, request_id: Optional[RequestId] = None
    ) -> PaymeLogicResponse: ...

    async def cancel_transaction(
        self, params: CancelTransactionParams, request_id: Optional[RequestId] = None
    ) -> PaymeLogicResponse: ...

    async def check_transaction(
        self, params: CheckTransactionParams, request_id: Optional[RequestId] = None
    ) -> PaymeLogicResponse: ...

    async def get_statement(
        self, params: GetStatementParams, request_id: Optional[RequestId] = None
    ) -> PaymeLogicResponse: ...


@runtime_checkable
class ClickWebhookLogic(Protocol):
    """Prepare/complete handlers invoked after the Click signature checks out."""

    async def prepare(self, body: ClickWebhookBody) -> ClickWebhookResponse: ...

    async def complete(self, body: ClickWebhookBody) -> ClickWebhookResponse: ...
