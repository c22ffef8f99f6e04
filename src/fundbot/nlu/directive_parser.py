"""
Directive parsing

Turns model output into an OperationDirective. Structured parsing comes
first: a JSON envelope such as

    {"type": "database_query", "function": "getUserDetails",
     "parameters": {"PAN": "ABGPA5303H"}, "explanation": "..."}

or {"function": ..., "input": ...}. When the whole reply is not parseable,
the legacy ACTION block is located by its "function"/"input" keys and only
its input payload is parsed. A bare (non-JSON) input string is mapped to a
parameter by shape: PAN, mobile, client id, otherwise name.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from ..errors import DirectiveParseError, NoDirectiveFound
from ..guards.json_clean import extract_first_balanced_block, extract_json_payload, loads_lenient
from ..schemas.results import PARAMETER_MODELS, Operation, OperationDirective, allowed_fields
from .entity_resolver import classify_bare_input

logger = logging.getLogger("fundbot.agent.directive")

GENERAL_RESPONSE = "general_response"

_ACTION_BLOCK = re.compile(
    r"[\"']?function[\"']?\s*:\s*[\"']?(?P<function>[A-Za-z_]\w*)[\"']?\s*,\s*[\"']?input[\"']?\s*:\s*",
    re.IGNORECASE,
)
_AUM_KEYWORDS = re.compile(r"\b(aum|assets\s+under\s+management)\b", re.IGNORECASE)
_TRANSACTION_KEYWORDS = re.compile(r"\btransactions?\b", re.IGNORECASE)

# Filters that narrow a result rather than identify a record
ENRICHABLE_FIELDS = {"limit", "transactionType"}


class DirectiveEnvelope(BaseModel):
    """Accepted shapes of a model directive."""
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    function: Optional[str] = Field(default=None, validation_alias=AliasChoices("function", "tool_name"))
    parameters: Optional[Any] = Field(default=None, validation_alias=AliasChoices("parameters", "params", "tool_input"))
    input: Optional[Any] = None
    explanation: str = Field(default="", validation_alias=AliasChoices("explanation", "thought", "rationale"))
    answer: Optional[str] = None


def build_directive(operation: str, bag: Dict[str, Any], rationale: str = "") -> OperationDirective:
    """
    Validate a raw parameter bag against the operation's parameter model.
    Unknown keys are dropped; unknown operations keep an empty bag so the
    dispatcher can reject them.

    Raises:
        DirectiveParseError: a known field has an invalid value.
    """
    model = PARAMETER_MODELS.get(operation)
    if model is None:
        logger.warning("Directive names unknown operation %r", operation)
        return OperationDirective(operation=operation, parameters={}, rationale=rationale)
    try:
        params = model.model_validate(bag).model_dump(exclude_none=True)
    except ValidationError as e:
        raise DirectiveParseError(f"Invalid parameters for {operation}: {e.errors()}") from e
    return OperationDirective(operation=operation, parameters=params, rationale=rationale)


def _payload_to_bag(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        dicts = [v for v in value if isinstance(v, dict)]
        if not dicts:
            raise DirectiveParseError("List payload contains no parameter object")
        return dicts[0]
    if isinstance(value, str):
        text = value.strip()
        if text.startswith(("{", "[")):
            try:
                return _payload_to_bag(loads_lenient(text))
            except ValueError as e:
                raise DirectiveParseError(str(e)) from e
        if not text:
            return {}
        return classify_bare_input(text)
    if value is None:
        return {}
    return classify_bare_input(str(value))


def _from_envelope(data: Dict[str, Any]) -> Optional[OperationDirective]:
    try:
        envelope = DirectiveEnvelope.model_validate(data)
    except ValidationError as e:
        logger.debug("Envelope validation failed: %s", e)
        return None

    if (envelope.type or "").lower() == GENERAL_RESPONSE or (not envelope.function and envelope.answer):
        raise NoDirectiveFound("model answered directly", answer=envelope.answer)
    if not envelope.function:
        return None

    if envelope.parameters is not None:
        bag = _payload_to_bag(envelope.parameters)
    else:
        bag = _payload_to_bag(envelope.input)
    return build_directive(envelope.function, bag, envelope.explanation)


def _from_action_block(text: str) -> OperationDirective:
    match = _ACTION_BLOCK.search(text)
    if not match:
        raise NoDirectiveFound("no action present")

    rest = text[match.end():].lstrip()
    if rest.startswith(("{", "[")):
        block, _span, truncated = extract_first_balanced_block(rest)
        if truncated:
            raise DirectiveParseError("Action input is truncated")
        try:
            value: Any = loads_lenient(block)
        except ValueError as e:
            raise DirectiveParseError(str(e)) from e
    elif rest.startswith('"'):
        try:
            value, _end = json.JSONDecoder().raw_decode(rest)
        except ValueError as e:
            raise DirectiveParseError("Unterminated action input string") from e
    else:
        value = re.split(r"[,}\n]", rest, maxsplit=1)[0].strip().strip("'\"")

    return build_directive(match.group("function"), _payload_to_bag(value), "")


def parse_directive(raw: str) -> OperationDirective:
    """
    Parse model output into an OperationDirective.

    Raises:
        NoDirectiveFound: no directive in the output (may carry an answer).
        DirectiveParseError: a directive was found but is malformed.
    """
    text = (raw or "").strip()
    if not text:
        raise NoDirectiveFound("empty model output")

    payload = extract_json_payload(text)
    if payload is not None:
        try:
            data = loads_lenient(payload)
        except ValueError:
            data = None
            logger.info("Structured directive parse failed; trying action block")
        if isinstance(data, dict):
            directive = _from_envelope(data)
            if directive is not None:
                logger.info(
                    "Parsed structured directive operation=%s params=%s",
                    directive.operation,
                    directive.parameters,
                )
                return directive

    directive = _from_action_block(text)
    logger.info("Parsed action block operation=%s params=%s", directive.operation, directive.parameters)
    return directive


def enrich_parameters(directive: OperationDirective, detected: Dict[str, Any]) -> OperationDirective:
    """
    Add fields the model omitted but the free-text extractor found, when the
    operation accepts them. Values from the model always win.
    """
    accepted = set(allowed_fields(directive.operation)) & ENRICHABLE_FIELDS
    if directive.operation == Operation.GET_TRANSACTION_DETAILS.value:
        # Required for this operation, so a detected id is better than none
        accepted.add("clientId")
    extra = {
        k: v for k, v in (detected or {}).items()
        if k in accepted and k not in directive.parameters
    }
    if not extra:
        return directive
    logger.info("Enriching %s parameters with detected %s", directive.operation, extra)
    try:
        return build_directive(directive.operation, {**extra, **directive.parameters}, directive.rationale)
    except DirectiveParseError:
        logger.warning("Detected parameters %s rejected for %s; keeping model parameters", extra, directive.operation)
        return directive


def synthesize_directive(query: str, detected: Dict[str, Any]) -> Optional[OperationDirective]:
    """
    Build a directive straight from detected parameters, without the model.
    Returns None when the query carries nothing to look up.
    """
    text = query or ""
    if _AUM_KEYWORDS.search(text):
        operation = Operation.CALCULATE_AUM.value
    elif _TRANSACTION_KEYWORDS.search(text):
        operation = Operation.GET_TRANSACTION_DETAILS.value
    elif any(k in detected for k in ("PAN", "mobile", "clientId")):
        operation = Operation.GET_USER_DETAILS.value
    else:
        return None

    accepted = allowed_fields(operation)
    bag = {k: v for k, v in detected.items() if k in accepted}
    if not bag:
        return None
    try:
        return build_directive(operation, bag, "synthesized from detected parameters")
    except DirectiveParseError:
        logger.warning("Could not synthesize %s from %s", operation, bag)
        return None
