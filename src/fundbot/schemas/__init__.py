"""
Schemas for fundbot
"""

from .api_models import ChatRequest, ChatResponse, ErrorResponse  # noqa: F401
from .results import (  # noqa: F401
    AggregateValue,
    IntentLabel,
    NotFound,
    Operation,
    OperationDirective,
    OperationResult,
    RecordList,
    SingleRecord,
)
