"""
Intent Classification Module
Classifies a query into a response mode with one constrained LLM call.
"""

import logging
from typing import Any, Dict

from ..errors import CompletionError
from ..prompts.classifier import CLASSIFIER_PROMPT, TWO_WAY_CLASSIFIER_PROMPT
from ..schemas.results import IntentLabel

logger = logging.getLogger("fundbot.agent.classifier")

THREE_WAY = "three_way"
TWO_WAY = "two_way"

_LABELS: Dict[str, Dict[str, IntentLabel]] = {
    THREE_WAY: {
        "USER_QUERY": IntentLabel.USER_QUERY,
        "GENERAL_SHORT": IntentLabel.GENERAL_SHORT,
        "GENERAL_LONG": IntentLabel.GENERAL_LONG,
    },
    TWO_WAY: {
        "USER_QUERY": IntentLabel.USER_QUERY,
        "GENERAL": IntentLabel.GENERAL_LONG,
    },
}

_PROMPTS = {THREE_WAY: CLASSIFIER_PROMPT, TWO_WAY: TWO_WAY_CLASSIFIER_PROMPT}


class IntentClassifier:
    """
    Classifies user queries into USER_QUERY, GENERAL_SHORT or GENERAL_LONG.

    Any upstream failure or unrecognized label degrades to GENERAL_LONG; the
    caller always receives one of the three labels.
    """

    FALLBACK = IntentLabel.GENERAL_LONG

    def __init__(self, llm_client: Any, mode: str = THREE_WAY, max_tokens: int = 10):
        if mode not in _LABELS:
            raise ValueError(f"Unknown classifier mode: {mode}")
        self.llm_client = llm_client
        self.mode = mode
        self.max_tokens = max_tokens
        self.labels = _LABELS[mode]
        self.prompt = _PROMPTS[mode]

    def parse_label(self, raw: str) -> IntentLabel:
        """Map a raw model reply to a label, or the fallback label."""
        cleaned = (raw or "").strip().strip("`'\".").strip().upper()
        label = self.labels.get(cleaned)
        if label is None:
            logger.warning("Unrecognized classification label %r; using %s", raw, self.FALLBACK.value)
            return self.FALLBACK
        return label

    async def classify(self, query: str) -> IntentLabel:
        try:
            raw = await self.llm_client.complete(
                self.prompt,
                query,
                max_tokens=self.max_tokens,
                temperature=0.0,
            )
        except CompletionError as e:
            logger.warning("Classification call failed (%s); using %s", e, self.FALLBACK.value)
            return self.FALLBACK
        except Exception as e:
            logger.exception("Unexpected classification failure: %s", e)
            return self.FALLBACK

        label = self.parse_label(raw)
        logger.info("Classified query as %s (mode=%s)", label.value, self.mode)
        return label
