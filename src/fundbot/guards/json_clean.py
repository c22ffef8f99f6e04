"""
JSON extraction helpers for model output.

Models wrap JSON in prose or ```json fences, or emit Python-style dicts.
These helpers locate the payload and parse it leniently:

- extract_json_payload(text) -> the raw JSON text to parse, or None
- extract_first_balanced_block(text) -> first balanced {...} or [...] block
- loads_lenient(payload) -> parsed value (json first, then literal_eval)
"""

import ast
import json
import re
from typing import Any, Optional, Tuple

_CODE_FENCE_RE = re.compile(r"```(\w+)?\s*([\s\S]*?)```", re.MULTILINE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def _loads_ok(s: str) -> bool:
    try:
        json.loads(s)
        return True
    except (TypeError, ValueError):
        return False


def _try_parseable_as_is(s: str) -> Tuple[str, bool]:
    """Return the original or trailing-comma-stripped string if json.loads succeeds."""
    if _loads_ok(s):
        return s, True
    normalized = _TRAILING_COMMA_RE.sub(r"\1", s)
    if normalized != s and _loads_ok(normalized):
        return normalized, True
    return s, False


def extract_first_balanced_block(text: str) -> Tuple[Optional[str], Tuple[int, int], bool]:
    """
    Return (block, (start, end), truncated) for the first {...} or [...]
    block in text, honouring JSON string quoting. A mismatched closer ends
    the block early; running off the end marks it truncated. Gives
    (None, (0, 0), False) when text has no opening bracket.
    """
    opener = re.search(r"[{\[]", text)
    if opener is None:
        return None, (0, 0), False

    start = opener.start()
    closers = {"{": "}", "[": "]"}
    expected = [closers[text[start]]]
    quoted = escaped = False

    for pos in range(start + 1, len(text)):
        ch = text[pos]
        if quoted:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                quoted = False
        elif ch == '"':
            quoted = True
        elif ch in closers:
            expected.append(closers[ch])
        elif ch in "}]":
            end = pos + 1
            if ch != expected.pop() or not expected:
                return text[start:end], (start, end), False

    return text[start:], (start, len(text)), True


def extract_json_payload(text: str) -> Optional[str]:
    """
    Try to extract a JSON string from raw text: the whole text, then fenced
    code blocks, then the first balanced block. Returns None when no
    JSON-shaped text is present.
    """
    if not isinstance(text, str):
        return None

    direct = text.strip()
    if not direct:
        return None
    payload, ok = _try_parseable_as_is(direct)
    if ok:
        return payload

    for m in _CODE_FENCE_RE.finditer(text):
        body = (m.group(2) or "").strip()
        if not body:
            continue
        payload, ok = _try_parseable_as_is(body)
        if ok:
            return payload

    balanced, _span, _truncated = extract_first_balanced_block(text)
    if balanced is not None:
        payload, _ok = _try_parseable_as_is(balanced)
        # Returned even when unparseable so the caller can report it
        return payload
    return None


def loads_lenient(payload: str) -> Any:
    """
    Parse JSON, falling back to ast.literal_eval for Python-style dicts
    with single quotes or True/False/None.

    Raises:
        ValueError: the payload is neither JSON nor a Python literal.
    """
    try:
        return json.loads(payload)
    except (TypeError, ValueError):
        pass
    try:
        return ast.literal_eval(payload)
    except (ValueError, SyntaxError, TypeError, MemoryError, RecursionError) as e:
        raise ValueError(f"Unparseable payload: {payload[:80]!r}") from e
