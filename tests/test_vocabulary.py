"""Tests for vocabulary enums and keyword grammar."""

import pytest

from genowa.vocabulary import (
    CONDITIONAL_KEYWORDS,
    DataType,
    DriverState,
    LEGAL_TRANSITIONS,
    LevelType,
    MAX_ELEMENT_CODE,
    MIN_ELEMENT_CODE,
    is_valid_keyword,
)


class TestLevelType:
    """Level codes."""

    def test_codes(self):
        assert [level.value for level in LevelType] == ["$", "F", "P", "C", "S"]

    @pytest.mark.parametrize("text, expected", [
        ("$", LevelType.PREMIUM),
        ("premium", LevelType.PREMIUM),
        (" P ", LevelType.PRIMARY),
        ("Coverage", LevelType.COVERAGE),
    ])
    def test_parse(self, text, expected):
        assert LevelType.parse(text) == expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown level"):
            LevelType.parse("X")


def test_data_type_codes():
    assert DataType("D") == DataType.DECIMAL
    assert DataType("A") == DataType.DATE
    assert len(DataType) == 8


def test_element_code_range():
    assert (MIN_ELEMENT_CODE, MAX_ELEMENT_CODE) == (1, 27)


class TestDriverStates:
    """Legal run transitions."""

    def test_every_state_has_transitions(self):
        assert set(LEGAL_TRANSITIONS) == set(DriverState)

    def test_final_states(self):
        assert LEGAL_TRANSITIONS[DriverState.DONE] == set()
        assert LEGAL_TRANSITIONS[DriverState.FAILED] == set()

    def test_failed_reachable_from_active_states(self):
        for state in (DriverState.LOADING, DriverState.SCANNING, DriverState.RESOLVING, DriverState.EMITTING):
            assert DriverState.FAILED in LEGAL_TRANSITIONS[state]

    def test_resolving_only_after_scanning(self):
        sources = {s for s, targets in LEGAL_TRANSITIONS.items() if DriverState.RESOLVING in targets}
        assert sources == {DriverState.SCANNING}


class TestKeywordGrammar:
    """Which keywords a marker may carry."""

    @pytest.mark.parametrize("keyword", ["PGM", "VAR1", "HOST_", "<", "!", "x"])
    def test_valid(self, keyword):
        assert is_valid_keyword(keyword)

    @pytest.mark.parametrize("keyword", ["", "A-B", "A B", "|", "<!", "É"])
    def test_invalid(self, keyword):
        assert not is_valid_keyword(keyword)

    def test_conditional_keywords(self):
        assert CONDITIONAL_KEYWORDS == {"<", "!"}
