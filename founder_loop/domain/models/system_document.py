"""System document domain model.

The system document is the Stage 4 artifact: a written playbook of how
the participant's revenue engine works, split into mandatory sections.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import datetime

_WORD_PATTERN = re.compile(r"\S+")


def count_words(text: str) -> int:
    """Count whitespace-separated words."""
    return len(_WORD_PATTERN.findall(text))


@dataclass(frozen=True, eq=True)
class SystemDocument:
    """A submitted system document.

    Attributes:
        sections: (section id, text) pairs in submission order.
        submitted_at: When the document was submitted.
        approved_at: When a mentor approved it, if they have.
    """

    sections: tuple[tuple[str, str], ...]
    submitted_at: datetime
    approved_at: datetime | None = None

    @classmethod
    def from_sections(cls, sections: Mapping[str, str], submitted_at: datetime) -> SystemDocument:
        """Create a document from a section-id to text mapping.

        Section ids are normalised to lower case.
        """
        return cls(
            sections=tuple((name.strip().lower(), text) for name, text in sections.items()),
            submitted_at=submitted_at,
        )

    @property
    def word_counts(self) -> dict[str, int]:
        """Word count per section."""
        return {name: count_words(text) for name, text in self.sections}

    @property
    def total_words(self) -> int:
        """Total word count across all sections."""
        return sum(self.word_counts.values())

    @property
    def is_approved(self) -> bool:
        """True once a mentor approved the document."""
        return self.approved_at is not None

    def with_approval(self, at: datetime) -> SystemDocument:
        """Create new document marked approved."""
        return replace(self, approved_at=at)
