"""Frequency-based theme and keyword extraction."""

import re
from collections import Counter
from collections.abc import Iterable

_TOKEN = re.compile(r"\w+")


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text.lower())


def _ranked(tokens: list[str]) -> list[tuple[str, int]]:
    # Counter preserves insertion order, so sorting by count alone keeps
    # ties in order of first occurrence.
    return sorted(Counter(tokens).items(), key=lambda item: item[1], reverse=True)


def theme_label(titles: Iterable[str], min_length: int = 4) -> str | None:
    """Most frequent repeated title token, capitalised, or None."""
    tokens = [
        token
        for title in titles
        for token in tokenize(title)
        if len(token) >= min_length
    ]
    ranked = _ranked(tokens)
    if ranked and ranked[0][1] > 1:
        return ranked[0][0].capitalize()
    return None


def extract_keywords(
    texts: Iterable[str],
    count: int = 5,
    min_length: int = 5,
    stopwords: Iterable[str] = (),
) -> list[str]:
    """Top `count` tokens by frequency across texts."""
    excluded = {word.lower() for word in stopwords}
    tokens = [
        token
        for text in texts
        for token in tokenize(text)
        if len(token) >= min_length and token not in excluded
    ]
    return [token for token, _ in _ranked(tokens)[:count]]
