"""
Result formatting for the query pipeline.

format_result() is total over the OperationResult union: every variant of
every operation renders to a non-empty message.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from ..schemas.results import (
    AggregateValue,
    NotFound,
    Operation,
    OperationResult,
    RecordList,
    SingleRecord,
)

logger = logging.getLogger("fundbot.agent.formatter")

CURRENCY = "₹"
NA = "N/A"

NO_DATA_MESSAGES = {
    Operation.GET_USER_DETAILS.value: "Sorry, no user details were found.",
    Operation.CALCULATE_AUM.value: "No AUM data found.",
    Operation.GET_TRANSACTION_DETAILS.value: "No transaction data found.",
}
GENERIC_NO_DATA = "No data found."

_DOB_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d")


def parse_date(value: Any) -> Optional[date]:
    """Accepts date/datetime objects and the common string layouts."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DOB_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def calculate_age(dob: Any, today: Optional[date] = None) -> Optional[int]:
    """
    Full elapsed years since dob, one less if today's month/day precedes
    the birth month/day. None when dob cannot be parsed.
    """
    born = parse_date(dob)
    if born is None:
        return None
    today = today or date.today()
    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def format_amount(value: Any) -> str:
    """Fixed two-decimal currency string, e.g. '₹200.50'."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return f"{CURRENCY}{value:.2f}"


def _or_na(value: Any) -> Any:
    if value is None or value == "":
        return NA
    return value


def _display(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    return str(value)


def format_not_found(operation: str, result: NotFound) -> str:
    reason = (result.reason or "").strip()
    return reason or NO_DATA_MESSAGES.get(operation, GENERIC_NO_DATA)


def format_user_details(record: SingleRecord, today: Optional[date] = None) -> str:
    fields = record.fields or {}
    name = fields.get("name")
    if not name:
        return format_not_found(Operation.GET_USER_DETAILS.value, NotFound())

    dob = fields.get("DOB")
    age = calculate_age(dob, today=today) if dob else None
    city = fields.get("city")

    headline = str(name)
    if age is not None:
        headline += f" ({age} years old)"
    if city:
        headline += f" from {city}"

    lines: List[str] = ["User Details Found:", "", headline, "", "Complete Information:"]
    for label, key in (
        ("Date of Birth", "DOB"),
        ("Address", "address"),
        ("City", "city"),
        ("PAN", "pan"),
        ("Mobile", "mobile"),
        ("Email", "email"),
    ):
        value = fields.get(key)
        if value:
            lines.append(f"{label}: {_display(value)}")
    return "\n".join(lines)


def format_aum(result: AggregateValue) -> str:
    return f"Total AUM: {format_amount(result.total)} (across {result.count} records)"


def format_transaction(index: int, txn: Dict[str, Any]) -> str:
    fund = txn.get("fundDesc") or "Unknown Fund"
    txn_type = txn.get("appTransDesc") or txn.get("appTransType")
    amount = txn.get("amt")
    amount_text = f"{CURRENCY}{_display(amount)}" if amount not in (None, "") else NA
    return "\n".join([
        f"#{index} {fund}",
        "Date: {} | Amount: {} | Type: {}".format(
            _display(_or_na(txn.get("transDate"))), amount_text, _display(_or_na(txn_type))
        ),
        "Folio: {} | Units: {} | NAV: {} | Status: {}".format(
            _display(_or_na(txn.get("folioNumber"))),
            _display(_or_na(txn.get("unit"))),
            _display(_or_na(txn.get("nav"))),
            _display(_or_na(txn.get("transStatus"))),
        ),
    ])


def format_transactions(result: RecordList) -> str:
    header = (
        f"Transactions for Client {result.client_id}:"
        if result.client_id
        else "Transactions:"
    )
    blocks = [format_transaction(i, t) for i, t in enumerate(result.items, start=1)]
    return header + "\n\n" + "\n---------------\n".join(blocks)


def format_result(operation: str, result: OperationResult, today: Optional[date] = None) -> str:
    """
    Render any OperationResult for the operation that produced it.
    """
    if isinstance(result, NotFound):
        return format_not_found(operation, result)
    if isinstance(result, SingleRecord):
        return format_user_details(result, today=today)
    if isinstance(result, AggregateValue):
        return format_aum(result)
    if isinstance(result, RecordList):
        if not result.items:
            # Zero rows normally arrive as NotFound
            return format_not_found(operation, NotFound())
        return format_transactions(result)
    raise TypeError(f"Unknown result type: {type(result).__name__}")
