"""
Natural-language understanding: intent classification, free-text entity
extraction and model directive parsing.
"""

from .entity_resolver import EntityResolver, classify_bare_input, detect_parameters  # noqa: F401
from .intent_classifier import IntentClassifier  # noqa: F401
from .directive_parser import parse_directive, synthesize_directive  # noqa: F401
