"""Vague language domain model.

Commit statements must name a concrete action. Phrases such as "try to"
or "think about" signal an intention, not an action, and are banned.

Matching is a case-insensitive substring match after NFKC normalisation,
so fullwidth or compatibility characters cannot slip a phrase past the
check. "start" is not in the default list because it would also match
"startup".
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass

from founder_loop.config.loop_config import DEFAULT_VAGUE_PHRASES


def normalize_for_matching(text: str) -> str:
    """Apply NFKC normalisation and lower-casing for phrase matching.

    Args:
        text: The text to normalise.

    Returns:
        Normalised lowercase text suitable for comparison.
    """
    return unicodedata.normalize("NFKC", text).casefold()


@dataclass(frozen=True)
class VaguePhraseList:
    """Immutable list of banned commit phrases.

    Attributes:
        phrases: Banned phrases (case-insensitive matching).
    """

    phrases: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.phrases:
            raise ValueError("Vague phrase list cannot be empty")

    @classmethod
    def default(cls) -> VaguePhraseList:
        """Create a list with the default banned phrases."""
        return cls(phrases=DEFAULT_VAGUE_PHRASES)

    @property
    def normalized_phrases(self) -> tuple[str, ...]:
        return tuple(normalize_for_matching(p) for p in self.phrases)

    def find_matches(self, text: str) -> tuple[str, ...]:
        """Return every configured phrase contained in ``text``.

        Matched phrases are returned in their configured (original) form.
        """
        normalized = normalize_for_matching(text)
        return tuple(
            original
            for original, phrase in zip(self.phrases, self.normalized_phrases, strict=True)
            if phrase in normalized
        )

    def __len__(self) -> int:
        return len(self.phrases)

    def __iter__(self):
        return iter(self.phrases)
