"""Best-effort parsing of free-form explainer output.

Parsing never raises: the result is tagged with `ok` and always carries a
usable `Explanation`, with deterministic score-derived text filling any field
that could not be recovered.
"""

import json
import re
from dataclasses import dataclass

from pydantic import BaseModel

_LABEL = re.compile(r"\b(thinking|explanation)\b[\"'*]*\s*:", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_TRAILING_ORDINAL = re.compile(r"\n\s*\d+[.)]\s*$")

DEFAULT_THINKING = (
    "Both thoughts explore similar conceptual territories, "
    "creating natural bridges between ideas."
)
FALLBACK_THINKING = (
    "Both thoughts vibrate at similar frequencies, "
    "creating natural cognitive resonance."
)


class Explanation(BaseModel):
    thinking: str
    explanation: str


@dataclass
class ParseResult:
    ok: bool
    value: Explanation


def default_explanation_text(score: float) -> str:
    return (
        f"High semantic similarity ({score:.3f}) indicates shared themes, "
        "concepts, or underlying meaning structures."
    )


def fallback_explanation(score: float) -> Explanation:
    """Deterministic explanation used when the provider cannot be reached."""
    return Explanation(
        thinking=FALLBACK_THINKING,
        explanation=(
            f"Semantic similarity score of {score:.3f} indicates significant "
            "conceptual overlap between these thoughts."
        ),
    )


def _clean(text: str) -> str:
    text = text.strip().strip("\"'*,").strip()
    text = _TRAILING_ORDINAL.sub("", text)
    return text.strip().strip("\"'*,").strip()


def _from_json(text: str) -> dict[str, str]:
    match = _JSON_OBJECT.search(text)
    if match is None:
        return {}
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return {}
    if not isinstance(data, dict):
        return {}

    fields: dict[str, str] = {}
    for key, value in data.items():
        name = str(key).lower()
        if name in ("thinking", "explanation") and isinstance(value, str):
            cleaned = value.strip()
            if cleaned:
                fields[name] = cleaned
    return fields


def _from_labels(text: str) -> dict[str, str]:
    matches = list(_LABEL.finditer(text))
    fields: dict[str, str] = {}
    for i, match in enumerate(matches):
        name = match.group(1).lower()
        if name in fields:
            continue
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        section = _clean(text[match.end() : end])
        if section:
            fields[name] = section
    return fields


def parse_explanation(text: str | None, score: float) -> ParseResult:
    """Split provider output into thinking and explanation.

    Tries a JSON object first, then `thinking:` / `explanation:` labelled
    sections. `ok` is True only when both fields were recovered.
    """
    if not text or not text.strip():
        return ParseResult(ok=False, value=fallback_explanation(score))

    fields = _from_json(text)
    if len(fields) < 2:
        fields = {**_from_labels(text), **fields}

    ok = "thinking" in fields and "explanation" in fields
    return ParseResult(
        ok=ok,
        value=Explanation(
            thinking=fields.get("thinking", DEFAULT_THINKING),
            explanation=fields.get("explanation", default_explanation_text(score)),
        ),
    )
