from snipnet.resonance.explainer.agent import ResonanceExplainer
from snipnet.resonance.explainer.parsing import (
    Explanation,
    ParseResult,
    fallback_explanation,
    parse_explanation,
)

__all__ = [
    "Explanation",
    "ParseResult",
    "ResonanceExplainer",
    "fallback_explanation",
    "parse_explanation",
]
