"""
Pipeline value types: intent labels, operation names, parameter models,
the operation directive and the OperationResult tagged union.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class IntentLabel(str, Enum):
    USER_QUERY = "USER_QUERY"
    GENERAL_SHORT = "GENERAL_SHORT"
    GENERAL_LONG = "GENERAL_LONG"


class Operation(str, Enum):
    GET_USER_DETAILS = "getUserDetails"
    CALCULATE_AUM = "calculateAUM"
    GET_TRANSACTION_DETAILS = "getTransactionDetails"


# ---------------------------------------------------------------------------
# Parameter models (one per operation)
# ---------------------------------------------------------------------------

class _Params(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, str_strip_whitespace=True)


class UserDetailsParams(_Params):
    clientId: Optional[str] = Field(default=None, validation_alias=AliasChoices("clientId", "client_id", "clientid"))
    PAN: Optional[str] = Field(default=None, validation_alias=AliasChoices("PAN", "pan"))
    name: Optional[str] = None
    mobile: Optional[str] = None


class AUMParams(_Params):
    clientId: Optional[str] = Field(default=None, validation_alias=AliasChoices("clientId", "client_id", "clientid"))
    arn_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("arn_id", "arnId", "ARN"))
    agentCode: Optional[str] = Field(default=None, validation_alias=AliasChoices("agentCode", "agent_code"))


class TransactionParams(_Params):
    clientId: Optional[str] = Field(default=None, validation_alias=AliasChoices("clientId", "client_id", "clientid"))
    limit: Optional[int] = Field(default=None, ge=1)
    transactionType: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("transactionType", "transaction_type")
    )
    dateFrom: Optional[date] = Field(default=None, validation_alias=AliasChoices("dateFrom", "date_from"))
    dateTo: Optional[date] = Field(default=None, validation_alias=AliasChoices("dateTo", "date_to"))


PARAMETER_MODELS: Dict[str, Type[_Params]] = {
    Operation.GET_USER_DETAILS.value: UserDetailsParams,
    Operation.CALCULATE_AUM.value: AUMParams,
    Operation.GET_TRANSACTION_DETAILS.value: TransactionParams,
}


def allowed_fields(operation: str) -> List[str]:
    """Field names accepted by an operation (empty for unknown operations)."""
    model = PARAMETER_MODELS.get(operation)
    if model is None:
        return []
    return list(model.model_fields.keys())


class OperationDirective(BaseModel):
    """One operation to run for the current turn."""
    operation: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    rationale: str = ""


# ---------------------------------------------------------------------------
# OperationResult union
# ---------------------------------------------------------------------------

NOT_FOUND_NO_MATCH = "no_match"
NOT_FOUND_MISSING_PARAMETER = "missing_parameter"
NOT_FOUND_ERROR = "error"


@dataclass(frozen=True)
class NotFound:
    reason: Optional[str] = None
    kind: str = NOT_FOUND_NO_MATCH


@dataclass(frozen=True)
class SingleRecord:
    fields: Dict[str, Any]


@dataclass(frozen=True)
class AggregateValue:
    total: Decimal
    count: int


@dataclass(frozen=True)
class RecordList:
    items: List[Dict[str, Any]]
    count: int
    client_id: Optional[str] = None
    filters: Dict[str, Any] = field(default_factory=dict)


OperationResult = Union[NotFound, SingleRecord, AggregateValue, RecordList]
