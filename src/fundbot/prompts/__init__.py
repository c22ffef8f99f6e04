from .classifier import CLASSIFIER_PROMPT, TWO_WAY_CLASSIFIER_PROMPT  # noqa: F401
from .directive import DIRECTIVE_PROMPT  # noqa: F401
from .general import GENERAL_LONG_PROMPT, GENERAL_SHORT_PROMPT  # noqa: F401
