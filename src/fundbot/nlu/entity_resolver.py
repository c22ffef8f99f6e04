"""
Entity Resolution Module
Extracts lookup parameters from free-text queries and classifies bare
identifier strings by shape.
"""

import re
from typing import Any, Dict, Optional

PAN_PATTERN = re.compile(r"\b[A-Z]{5}[0-9]{4}[A-Z]\b", re.IGNORECASE)
MOBILE_PATTERN = re.compile(r"\b\d{10}\b")
LIMIT_PATTERN = re.compile(r"\b(?:last|first)\s*(\d+)\b", re.IGNORECASE)
TRANSACTION_TYPE_PATTERN = re.compile(r"\b(purchase|redemption|dividend|switch)\b", re.IGNORECASE)
CLIENT_ID_PHRASE = re.compile(r"\bclient\s*id\b\s*[:#]?\s*([A-Z0-9]{4,})\b", re.IGNORECASE)
CLIENT_NUMBER_PHRASE = re.compile(r"\bclient\s*[:#]?\s*((?=[A-Z0-9]*\d)[A-Z0-9]{4,})\b", re.IGNORECASE)
# Hyphenated codes such as ARN-1001 are not client ids
CLIENT_ID_TOKEN = re.compile(r"(?<![\w-])(?=[A-Z0-9]*\d)[A-Z0-9]{4,}(?![\w-])", re.IGNORECASE)
DATE_PATTERN = re.compile(r"\b\d{4}-\d{2}-\d{2}\b|\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b")

# Whole-string shapes for bare directive input
BARE_PAN = re.compile(r"^[A-Z]{5}[0-9]{4}[A-Z]$", re.IGNORECASE)
BARE_MOBILE = re.compile(r"^\d{10}$")
BARE_CLIENT_ID = re.compile(r"^[A-Za-z0-9]{4,}$")


class EntityResolver:
    """
    Extracts PAN, mobile, client id, result limit and transaction type from
    a raw query. Never fails; returns an empty dict when nothing matches.
    """

    def extract_entities(self, query: str) -> Dict[str, Any]:
        entities: Dict[str, Any] = {}
        text = query or ""

        pan = PAN_PATTERN.search(text)
        if pan:
            entities["PAN"] = pan.group(0).upper()

        mobile = MOBILE_PATTERN.search(text)
        if mobile:
            entities["mobile"] = mobile.group(0)

        limit = LIMIT_PATTERN.search(text)
        if limit:
            entities["limit"] = int(limit.group(1))

        txn_type = TRANSACTION_TYPE_PATTERN.search(text)
        if txn_type:
            entities["transactionType"] = txn_type.group(1).lower()

        client_id = self._find_client_id(text, exclude={entities.get("PAN"), entities.get("mobile")})
        if client_id:
            entities["clientId"] = client_id

        return entities

    @staticmethod
    def _find_client_id(text: str, exclude) -> Optional[str]:
        # An explicit "client id XYZ" / "client 11181" phrase wins
        for pattern in (CLIENT_ID_PHRASE, CLIENT_NUMBER_PHRASE):
            phrase = pattern.search(text)
            if phrase and phrase.group(1).upper() not in exclude:
                return phrase.group(1)

        # Otherwise the first digit-bearing token that is not a limit or a date
        skip_spans = [m.span(1) for m in LIMIT_PATTERN.finditer(text)]
        skip_spans += [m.span() for m in DATE_PATTERN.finditer(text)]
        for match in CLIENT_ID_TOKEN.finditer(text):
            token = match.group(0)
            if token.upper() in exclude:
                continue
            if any(start <= match.start() < end for start, end in skip_spans):
                continue
            return token
        return None


def classify_bare_input(value: str) -> Dict[str, str]:
    """
    Map a bare identifier string to a single-field parameter bag by shape.
    Order matters: PAN, then mobile, then client id, otherwise name.
    """
    text = (value or "").strip().strip("'\"")
    if BARE_PAN.match(text):
        return {"PAN": text}
    if BARE_MOBILE.match(text):
        return {"mobile": text}
    if BARE_CLIENT_ID.match(text):
        return {"clientId": text}
    return {"name": text}


_resolver = EntityResolver()


def detect_parameters(query: str) -> Dict[str, Any]:
    """Module-level shortcut for EntityResolver().extract_entities()."""
    return _resolver.extract_entities(query)
