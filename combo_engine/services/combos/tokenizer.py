"""Field tokenizer for App Store metadata.

Each field yields two token lists:

* ``stream``: every normalized word in order, used for literal existence
  and adjacency checks.
* ``keywords``: the stream minus stopwords, numerals, short tokens and
  brand tokens, used as generation input.

Stopwords and brand names are explicit configuration on the tokenizer
instance, never process-wide state.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from combo_engine.core.exceptions import MissingTitleError
from combo_engine.services.combos.constants import DEFAULT_STOPWORDS
from combo_engine.services.combos.types import (
    CANONICAL_FIELD_ORDER,
    FieldTokens,
    MetadataField,
    TokenizedMetadata,
)

APOSTROPHE_PATTERN = re.compile(r"['’`]")
PUNCTUATION_PATTERN = re.compile(r"[^\w\s-]|_")
HYPHEN_RUN_PATTERN = re.compile(r"-{2,}")
NUMERAL_PATTERN = re.compile(r"^[\d.,-]+$")


def normalize_tokens(text: str | None) -> list[str]:
    """Lower-case, strip punctuation except intra-word hyphens, split."""
    if not text:
        return []
    lowered = APOSTROPHE_PATTERN.sub("", text.lower())
    cleaned = PUNCTUATION_PATTERN.sub(" ", lowered)
    tokens: list[str] = []
    for raw in cleaned.split():
        token = HYPHEN_RUN_PATTERN.sub(" ", raw).strip("-")
        # "a--b" splits into two words, "a-b" stays one
        for part in token.split():
            part = part.strip("-")
            if part:
                tokens.append(part)
    return tokens


def normalize_combo_text(text: str) -> str:
    """Canonical lookup key for a combo or keyword string."""
    return " ".join(normalize_tokens(text))


class FieldTokenizer:
    """Tokenizes metadata fields with an injected stopword set and brand list."""

    def __init__(
        self,
        *,
        stopwords: Iterable[str] | None = None,
        brand_names: Iterable[str | None] = (),
        min_token_length: int = 2,
    ) -> None:
        base = DEFAULT_STOPWORDS if stopwords is None else stopwords
        self.stopwords = frozenset(word for raw in base for word in normalize_tokens(raw))
        self.min_token_length = max(1, min_token_length)
        self.brand_tokens = frozenset(
            token for name in brand_names if name for token in normalize_tokens(name)
        )

    def is_keyword(self, token: str) -> bool:
        """Return True when the token is usable as generation input."""
        if len(token) < self.min_token_length:
            return False
        if NUMERAL_PATTERN.match(token):
            return False
        if token in self.stopwords:
            return False
        return token not in self.brand_tokens

    def tokenize_field(self, metadata_field: MetadataField, text: str | None) -> FieldTokens:
        stream = normalize_tokens(text)
        return FieldTokens(
            metadata_field=metadata_field,
            raw_text=text or "",
            stream=stream,
            keywords=[token for token in stream if self.is_keyword(token)],
        )

    def tokenize(
        self,
        *,
        title: str | None,
        subtitle: str | None = None,
        keywords_field: str | None = None,
        promo_text: str | None = None,
    ) -> TokenizedMetadata:
        """Tokenize every field; the title is mandatory."""
        if not title or not normalize_tokens(title):
            raise MissingTitleError()

        texts = {
            MetadataField.TITLE: title,
            MetadataField.SUBTITLE: subtitle,
            MetadataField.KEYWORDS: keywords_field,
            MetadataField.PROMO_TEXT: promo_text,
        }
        fields = {
            metadata_field: self.tokenize_field(metadata_field, texts[metadata_field])
            for metadata_field in CANONICAL_FIELD_ORDER
        }
        return TokenizedMetadata(fields=fields, brand_tokens=self.brand_tokens)
