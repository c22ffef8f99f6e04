"""
agent/operations.py

OperationDispatcher
-------------------

Maps an operation name and parameter bag to exactly one backing-store call:

- getUserDetails:        one client record by clientId / PAN / name / mobile
- calculateAUM:          sum of current value across matching valuations
- getTransactionDetails: recent transactions for a client (clientId required)

Store failures come back as NotFound(kind="error"); an operation name outside
the closed set raises UnsupportedOperationError.
"""

import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, Callable, Dict, Optional

from ..db.repository import CLIENTS, DESC, TRANSACTIONS, VALUATIONS, Between, Contains, Exact
from ..errors import StoreError, UnsupportedOperationError
from ..schemas.results import (
    NOT_FOUND_ERROR,
    NOT_FOUND_MISSING_PARAMETER,
    AggregateValue,
    NotFound,
    Operation,
    OperationResult,
    RecordList,
    SingleRecord,
)

logger = logging.getLogger("fundbot.agent.operations")

DEFAULT_TRANSACTION_LIMIT = 10

STORE_ERROR_REASON = "Something went wrong while fetching the data. Please try again later."


def to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a stored amount; None for missing or non-numeric values."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        if isinstance(value, str):
            return Decimal(value.replace(",", "").strip())
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def valuation_amount(record: Dict[str, Any]) -> Decimal:
    """Current value if present, otherwise units x purchase NAV."""
    current = to_decimal(record.get("cur_val"))
    if current is not None:
        return current
    units = to_decimal(record.get("units"))
    nav = to_decimal(record.get("pur_nav"))
    if units is None or nav is None:
        logger.warning("Valuation record without usable value: %s", record)
        return Decimal("0")
    return units * nav


class OperationDispatcher:
    def __init__(self, repository: Any, default_limit: int = DEFAULT_TRANSACTION_LIMIT) -> None:
        self.repository = repository
        self.default_limit = default_limit
        self._operations: Dict[str, Callable[[Dict[str, Any]], Awaitable[OperationResult]]] = {
            Operation.GET_USER_DETAILS.value: self.get_user_details,
            Operation.CALCULATE_AUM.value: self.calculate_aum,
            Operation.GET_TRANSACTION_DETAILS.value: self.get_transaction_details,
        }

    @property
    def operations(self):
        return tuple(self._operations)

    async def dispatch(self, operation: str, params: Dict[str, Any]) -> OperationResult:
        handler = self._operations.get(operation)
        if handler is None:
            logger.error("Unsupported operation requested: %r", operation)
            raise UnsupportedOperationError(operation)

        logger.info("Dispatching %s with %s", operation, params)
        try:
            result = await handler(dict(params or {}))
        except (StoreError, OSError, asyncio.TimeoutError) as e:
            logger.exception("Store failure during %s: %s", operation, e)
            return NotFound(reason=STORE_ERROR_REASON, kind=NOT_FOUND_ERROR)
        logger.info("%s -> %s", operation, type(result).__name__)
        return result

    async def get_user_details(self, params: Dict[str, Any]) -> OperationResult:
        filters: Dict[str, Any] = {}
        if params.get("clientId"):
            filters["clientId"] = Exact(params["clientId"])
        if params.get("PAN"):
            filters["pan"] = Contains(params["PAN"])
        if params.get("name"):
            filters["name"] = Contains(params["name"])
        if params.get("mobile"):
            filters["mobile"] = Exact(params["mobile"])

        if not filters:
            return NotFound(
                reason="Please provide a client ID, PAN, name or mobile number to look up a user.",
                kind=NOT_FOUND_MISSING_PARAMETER,
            )

        record = await self.repository.find_one(CLIENTS, filters)
        if not record:
            return NotFound(reason="No user found matching the provided details.")
        return SingleRecord(fields=record)

    async def calculate_aum(self, params: Dict[str, Any]) -> OperationResult:
        filters: Dict[str, Any] = {
            key: Exact(params[key])
            for key in ("arn_id", "agentCode", "clientId")
            if params.get(key)
        }

        records = await self.repository.find_all(VALUATIONS, filters)
        if not records:
            return NotFound(reason="No AUM data found for the given criteria.")

        total = sum((valuation_amount(r) for r in records), Decimal("0"))
        return AggregateValue(total=total, count=len(records))

    async def get_transaction_details(self, params: Dict[str, Any]) -> OperationResult:
        client_id = params.get("clientId")
        if not client_id:
            return NotFound(
                reason="Client ID is required to fetch transaction details.",
                kind=NOT_FOUND_MISSING_PARAMETER,
            )

        filters: Dict[str, Any] = {"clientId": Exact(client_id)}
        if params.get("transactionType"):
            filters["appTransType"] = Exact(params["transactionType"])
        if params.get("dateFrom") or params.get("dateTo"):
            filters["transDate"] = Between(params.get("dateFrom"), params.get("dateTo"))

        limit = params.get("limit") or self.default_limit
        items = await self.repository.find_all(
            TRANSACTIONS,
            filters,
            sort=[("transDate", DESC), ("procDate", DESC)],
            limit=limit,
        )
        if not items:
            return NotFound(reason=f"No transactions found for client {client_id}.")
        return RecordList(
            items=items,
            count=len(items),
            client_id=str(client_id),
            filters={k: v for k, v in params.items() if k != "clientId"},
        )
