"""System document validation domain service.

A system document passes when every mandatory section reaches the
per-section word minimum and the whole document reaches the total word
minimum. Sections outside the mandatory list are kept and counted toward
the total.
"""

from __future__ import annotations

from collections.abc import Mapping

from founder_loop.config.loop_config import DEFAULT_LOOP_CONFIG, LoopConfig
from founder_loop.domain.errors.validation import SystemDocumentIncompleteError
from founder_loop.domain.models.system_document import count_words
from founder_loop.domain.models.validation_result import ValidationResult


def unmet_document_requirements(
    sections: Mapping[str, str],
    config: LoopConfig = DEFAULT_LOOP_CONFIG,
) -> tuple[str, ...]:
    """List every word requirement the sections do not meet.

    Args:
        sections: Section id to section text. Ids are matched case-insensitively.
        config: Rule set supplying the mandatory sections and minimums.

    Returns:
        Human-readable unmet requirements, mandatory sections first.
    """
    counts = {name.strip().lower(): count_words(text) for name, text in sections.items()}
    unmet: list[str] = []

    for section in config.system_document_sections:
        words = counts.get(section)
        if words is None:
            unmet.append(f"Section '{section}' is missing")
        elif words < config.stage4_min_section_words:
            unmet.append(
                f"Section '{section}' has {words} words "
                f"(minimum {config.stage4_min_section_words})"
            )

    total = sum(counts.values())
    if total < config.stage4_min_total_words:
        unmet.append(
            f"Document has {total} words (minimum {config.stage4_min_total_words})"
        )
    return tuple(unmet)


def validate_system_document(
    sections: Mapping[str, str],
    *,
    config: LoopConfig = DEFAULT_LOOP_CONFIG,
) -> ValidationResult:
    """Validate a system document submission.

    Returns:
        ValidationResult with a single SystemDocumentIncompleteError listing
        every unmet requirement, or no failures.
    """
    unmet = unmet_document_requirements(sections, config)
    if unmet:
        return ValidationResult((SystemDocumentIncompleteError(unmet),))
    return ValidationResult()
