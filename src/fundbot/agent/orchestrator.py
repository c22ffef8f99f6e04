"""
agent/orchestrator.py

TurnOrchestrator:
- Runs one query through CACHE_CHECK -> CLASSIFY -> EXTRACT -> DISPATCH
  -> FORMAT -> CACHE_STORE -> DONE.
- Classification, extraction and transport failures fall back to a general
  knowledge answer; an unsupported operation is raised to the caller.
- Only a fully rendered message is written to the cache.
"""

import logging
from enum import Enum
from typing import Any, Optional

from ..context.response_cache import ResponseCache
from ..errors import CompletionError, ExtractionError, NoDirectiveFound
from ..nlu.directive_parser import enrich_parameters, parse_directive, synthesize_directive
from ..nlu.entity_resolver import EntityResolver
from ..nlu.intent_classifier import IntentClassifier
from ..prompts.directive import DIRECTIVE_PROMPT
from ..prompts.general import GENERAL_LONG_PROMPT, GENERAL_SHORT_PROMPT
from ..schemas.results import IntentLabel, OperationDirective
from .formatter import format_result
from .operations import OperationDispatcher

logger = logging.getLogger("fundbot.agent")

APOLOGY_MESSAGE = "I apologize, but I couldn't process your request right now. Please try again."

DIRECTIVE_MAX_TOKENS = 400
GENERAL_SHORT_MAX_TOKENS = 150
GENERAL_LONG_MAX_TOKENS = 1000


class TurnState(str, Enum):
    CACHE_CHECK = "CACHE_CHECK"
    CLASSIFY = "CLASSIFY"
    EXTRACT = "EXTRACT"
    DISPATCH = "DISPATCH"
    FORMAT = "FORMAT"
    CACHE_STORE = "CACHE_STORE"
    FALLBACK_GENERAL = "FALLBACK_GENERAL"
    DONE = "DONE"


class TurnOrchestrator:
    def __init__(
        self,
        llm_client: Any,
        cache: ResponseCache,
        classifier: IntentClassifier,
        dispatcher: OperationDispatcher,
        entity_resolver: Optional[EntityResolver] = None,
    ) -> None:
        self.llm_client = llm_client
        self.cache = cache
        self.classifier = classifier
        self.dispatcher = dispatcher
        self.entity_resolver = entity_resolver or EntityResolver()

    def _enter(self, state: TurnState, detail: str = "") -> None:
        if detail:
            logger.info("TURN -> %s (%s)", state.value, detail)
        else:
            logger.info("TURN -> %s", state.value)

    async def handle_turn(self, query: str) -> str:
        """
        Process one query and return exactly one message.

        Raises:
            UnsupportedOperationError: the directive named an operation
                outside the closed set.
        """
        logger.info("=" * 80)
        logger.info("TURN - Starting | Query: %s", query)

        self._enter(TurnState.CACHE_CHECK)
        cached = self.cache.get(query)
        if cached is not None:
            self._enter(TurnState.DONE, "cache hit")
            return cached

        self._enter(TurnState.CLASSIFY)
        label = await self.classifier.classify(query)
        if label != IntentLabel.USER_QUERY:
            return await self._fallback_general(query, label)

        self._enter(TurnState.EXTRACT)
        detected = self.entity_resolver.extract_entities(query)
        logger.info("Detected parameters: %s", detected)
        try:
            directive = await self._plan(query, detected)
        except NoDirectiveFound as e:
            logger.warning("No directive in model output: %s", e)
            return await self._fallback_general(query, IntentLabel.GENERAL_LONG, answer=e.answer)
        except ExtractionError as e:
            logger.warning("Directive extraction failed: %s", e)
            return await self._fallback_general(query, IntentLabel.GENERAL_LONG)

        self._enter(TurnState.DISPATCH, directive.operation)
        # UnsupportedOperationError propagates to the caller
        result = await self.dispatcher.dispatch(directive.operation, directive.parameters)

        self._enter(TurnState.FORMAT, type(result).__name__)
        message = format_result(directive.operation, result)

        return self._store(query, message)

    async def _plan(self, query: str, detected: dict) -> OperationDirective:
        """
        Ask the model for a directive; synthesize one from detected
        parameters when the model call itself fails.
        """
        try:
            raw = await self.llm_client.complete(
                DIRECTIVE_PROMPT,
                query,
                max_tokens=DIRECTIVE_MAX_TOKENS,
                temperature=0.0,
            )
        except CompletionError as e:
            logger.warning("Directive call failed (%s); synthesizing from detected parameters", e)
            directive = synthesize_directive(query, detected)
            if directive is None:
                raise NoDirectiveFound("directive call failed and nothing detected") from e
            logger.info("Synthesized directive %s %s", directive.operation, directive.parameters)
            return directive

        logger.info("Directive raw response received (length: %d chars)", len(raw))
        directive = parse_directive(raw)
        return enrich_parameters(directive, detected)

    async def _fallback_general(
        self,
        query: str,
        label: IntentLabel,
        answer: Optional[str] = None,
    ) -> str:
        self._enter(TurnState.FALLBACK_GENERAL, label.value)
        if answer and answer.strip():
            return self._store(query, answer.strip())

        short = label == IntentLabel.GENERAL_SHORT
        try:
            reply = await self.llm_client.complete(
                GENERAL_SHORT_PROMPT if short else GENERAL_LONG_PROMPT,
                query,
                max_tokens=GENERAL_SHORT_MAX_TOKENS if short else GENERAL_LONG_MAX_TOKENS,
                temperature=0.3,
            )
        except CompletionError as e:
            logger.error("General completion failed: %s", e)
            self._enter(TurnState.DONE, "apology, not cached")
            return APOLOGY_MESSAGE

        return self._store(query, reply.strip() or APOLOGY_MESSAGE)

    def _store(self, query: str, message: str) -> str:
        self._enter(TurnState.CACHE_STORE)
        if message != APOLOGY_MESSAGE:
            self.cache.put(query, message)
        self._enter(TurnState.DONE)
        logger.info("=" * 80)
        return message
