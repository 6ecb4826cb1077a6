"""Unit tests for the system document model and validator.

Tests:
- Word counting and section normalisation
- Unmet requirement listing
- validate_system_document result
"""

from __future__ import annotations

from founder_loop.config.loop_config import LoopConfig
from founder_loop.domain.errors import SystemDocumentIncompleteError
from founder_loop.domain.models.system_document import SystemDocument, count_words
from founder_loop.domain.services.system_document_validator import (
    unmet_document_requirements,
    validate_system_document,
)
from tests.helpers.loop_builders import complete_document_sections, wat


class TestSystemDocument:
    """Tests for the SystemDocument value object."""

    def test_count_words(self) -> None:
        assert count_words("  one two\nthree\tfour ") == 4
        assert count_words("") == 0

    def test_section_ids_are_normalised(self) -> None:
        document = SystemDocument.from_sections({" Pricing ": "a b c"}, wat(20))
        assert document.sections == (("pricing", "a b c"),)
        assert document.word_counts == {"pricing": 3}

    def test_approval(self) -> None:
        document = SystemDocument.from_sections({"pricing": "a"}, wat(20))
        assert not document.is_approved
        assert document.with_approval(wat(21)).approved_at == wat(21)


class TestSystemDocumentValidator:
    """Tests for the word requirement checks."""

    def test_complete_document_passes(self) -> None:
        result = validate_system_document(complete_document_sections())
        assert result.is_valid

    def test_missing_section(self) -> None:
        config = LoopConfig()
        sections = complete_document_sections(config)
        missing = config.system_document_sections[0]
        del sections[missing]
        unmet = unmet_document_requirements(sections, config)
        assert unmet[0] == f"Section '{missing}' is missing"

    def test_short_section(self) -> None:
        config = LoopConfig()
        sections = complete_document_sections(config)
        short = config.system_document_sections[-1]
        sections[short] = "too few words"
        unmet = unmet_document_requirements(sections, config)
        assert f"Section '{short}' has 3 words (minimum 50)" in unmet

    def test_total_minimum(self) -> None:
        sections = complete_document_sections(words_per_section=60)
        unmet = unmet_document_requirements(sections)
        assert unmet == ("Document has 480 words (minimum 1000)",)

    def test_extra_sections_count_toward_total(self) -> None:
        sections = complete_document_sections(words_per_section=60)
        sections["appendix"] = " ".join(["word"] * 600)
        assert unmet_document_requirements(sections) == ()

    def test_failure_lists_every_requirement(self) -> None:
        result = validate_system_document({})
        assert not result.is_valid
        failure = result.first_failure
        assert isinstance(failure, SystemDocumentIncompleteError)
        assert len(failure.unmet) == len(LoopConfig().system_document_sections) + 1
        assert failure.to_rfc7807_dict()["unmet_requirements"] == list(failure.unmet)
