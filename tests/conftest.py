"""
Shared test fixtures.

No real Gemini or database connections are made: the completion client is a
scripted fake and the record store is the in-memory repository.
"""

from typing import Any, Dict, List, Optional

import pytest

from fundbot.agent.operations import OperationDispatcher
from fundbot.agent.orchestrator import TurnOrchestrator
from fundbot.context.response_cache import ResponseCache
from fundbot.db.repository import InMemoryRecordRepository
from fundbot.errors import CompletionError
from fundbot.nlu.intent_classifier import IntentClassifier
from fundbot.prompts import (
    CLASSIFIER_PROMPT,
    DIRECTIVE_PROMPT,
    GENERAL_LONG_PROMPT,
    GENERAL_SHORT_PROMPT,
    TWO_WAY_CLASSIFIER_PROMPT,
)

PROMPT_KINDS = {
    CLASSIFIER_PROMPT: "classify",
    TWO_WAY_CLASSIFIER_PROMPT: "classify",
    DIRECTIVE_PROMPT: "directive",
    GENERAL_SHORT_PROMPT: "general_short",
    GENERAL_LONG_PROMPT: "general_long",
}


class FakeLLM:
    """
    Scripted completion client. Replies are keyed by prompt kind
    (classify / directive / general_short / general_long); an Exception
    instance as a reply is raised instead of returned.
    """

    def __init__(self, replies: Optional[Dict[str, Any]] = None):
        self.replies = dict(replies or {})
        self.calls: List[Dict[str, Any]] = []

    def calls_of(self, kind: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["kind"] == kind]

    async def complete(self, system_instruction, user_message, max_tokens=256, temperature=0.3):
        kind = PROMPT_KINDS.get(system_instruction, "unknown")
        self.calls.append({
            "kind": kind,
            "message": user_message,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        reply = self.replies.get(kind)
        if reply is None:
            raise CompletionError(f"no scripted reply for {kind}")
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def close(self):
        return None


class CountingRepository(InMemoryRecordRepository):
    """In-memory repository that records every call."""

    def __init__(self, collections=None):
        super().__init__(collections)
        self.calls: List[tuple] = []

    async def find_one(self, collection, filters):
        self.calls.append(("find_one", collection, filters))
        return await super().find_one(collection, filters)

    async def find_all(self, collection, filters, sort=None, limit=None):
        self.calls.append(("find_all", collection, filters, sort, limit))
        return await super().find_all(collection, filters, sort=sort, limit=limit)


SAMPLE_RECORDS = {
    "clients": [
        {
            "clientId": "11181",
            "name": "Arjun Mehta",
            "pan": "ABGPA5303H",
            "mobile": "9876543210",
            "email": "arjun.mehta@example.com",
            "DOB": "1985-03-22",
            "city": "Pune",
            "address": "14 Koregaon Park Road, Pune",
        },
        {
            "clientId": "CL12345",
            "name": "John Smith",
            "pan": "CDQPS7721M",
            "mobile": "9988776655",
            "DOB": "1978-07-30",
            "city": "Mumbai",
        },
    ],
    "valuations": [
        {"clientId": "11181", "arn_id": "ARN-1001", "agentCode": "AG01", "cur_val": "100.5"},
        {"clientId": "11181", "arn_id": "ARN-1001", "agentCode": "AG01", "units": "2", "pur_nav": "50"},
        {"clientId": "CL12345", "arn_id": "ARN-2002", "agentCode": "AG03", "cur_val": "1000"},
    ],
    "transactions": [
        {"clientId": "11181", "fundDesc": "Bluechip Fund", "transDate": "2024-05-10", "procDate": "2024-05-11",
         "amt": "5000.00", "appTransType": "purchase", "folioNumber": "F1", "transStatus": "Processed"},
        {"clientId": "11181", "fundDesc": "Debt Fund", "transDate": "2024-03-28", "procDate": "2024-03-29",
         "amt": "20000.00", "appTransType": "redemption", "folioNumber": "F2", "transStatus": "Processed"},
        {"clientId": "11181", "fundDesc": "Bluechip Fund", "transDate": "2024-04-10", "procDate": "2024-04-11",
         "amt": "5000.00", "appTransType": "purchase", "folioNumber": "F1", "transStatus": "Processed"},
        {"clientId": "11181", "fundDesc": "Liquid Fund", "transDate": "2024-04-10", "procDate": "2024-04-12",
         "amt": "1500.00", "appTransType": "switch", "folioNumber": "F3", "transStatus": "Pending"},
        {"clientId": "11182", "fundDesc": "Flexi Cap Fund", "transDate": "2024-05-02", "procDate": "2024-05-03",
         "amt": "10000.00", "appTransType": "purchase", "folioNumber": "F9", "transStatus": "Processed"},
    ],
}


@pytest.fixture
def repository():
    return CountingRepository(SAMPLE_RECORDS)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def make_orchestrator(repository):
    def _make(llm, cache=None, mode="three_way"):
        return TurnOrchestrator(
            llm_client=llm,
            cache=cache if cache is not None else ResponseCache(),
            classifier=IntentClassifier(llm, mode=mode),
            dispatcher=OperationDispatcher(repository),
        )
    return _make
