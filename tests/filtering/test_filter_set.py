"""Tests for FilterSet and the default filter registry."""

import logging

import pytest

from linesift.filtering.external import ExternalCmdFilter
from linesift.filtering.registry import FilterSet, build_filter_set
from linesift.filtering.regexp import (
    new_case_sensitive_filter,
    new_ignore_case_filter,
    new_regexp_filter,
)
from linesift.foundation.errors import ErrorCode, FilterNotFoundError, LinesiftError
from linesift.foundation.types.config import CustomMatcherConfig, LinesiftConfig


@pytest.fixture
def three() -> FilterSet:
    filters = FilterSet()
    filters.add(new_ignore_case_filter())
    filters.add(new_case_sensitive_filter())
    filters.add(new_regexp_filter())
    return filters


class TestFilterSet:
    def test_first_added_is_current(self, three: FilterSet) -> None:
        assert three.current().name == "IgnoreCase"
        assert three.size() == len(three) == 3

    def test_rotate_cycles(self, three: FilterSet) -> None:
        seen = []
        for _ in range(3):
            three.rotate()
            seen.append(three.current().name)
        assert seen == ["CaseSensitive", "Regexp", "IgnoreCase"]

    def test_rotate_single_is_noop(self) -> None:
        filters = FilterSet()
        filters.add(new_regexp_filter())
        filters.rotate()
        assert filters.current_index == 0

    def test_rotate_empty_is_noop(self) -> None:
        filters = FilterSet()
        filters.rotate()
        assert filters.current_index == 0

    def test_set_current_by_name(self, three: FilterSet) -> None:
        three.set_current_by_name("Regexp")
        assert three.current().name == "Regexp"
        assert three.current_index == 2

    def test_set_current_unknown_name(self, three: FilterSet) -> None:
        three.set_current_by_name("Regexp")
        with pytest.raises(FilterNotFoundError) as exc_info:
            three.set_current_by_name("Fuzzy")

        assert exc_info.value.name == "Fuzzy"
        assert exc_info.value.code == ErrorCode.FILTER_NOT_FOUND
        assert three.current().name == "Regexp"

    def test_reset(self, three: FilterSet) -> None:
        three.rotate()
        three.reset()
        assert three.current_index == 0

    def test_current_on_empty_set(self) -> None:
        with pytest.raises(LinesiftError) as exc_info:
            FilterSet().current()
        assert exc_info.value.code == ErrorCode.FILTER_SET_EMPTY

    def test_names_keep_registration_order(self, three: FilterSet) -> None:
        assert three.names() == ["IgnoreCase", "CaseSensitive", "Regexp"]
        assert [f.name for f in three] == three.names()


class TestBuildFilterSet:
    def test_builtins(self) -> None:
        filters = build_filter_set(LinesiftConfig())
        assert filters.names() == ["IgnoreCase", "CaseSensitive", "SmartCase", "Regexp"]
        assert filters.current().name == "IgnoreCase"

    def test_initial_matcher_from_config(self) -> None:
        filters = build_filter_set(LinesiftConfig(matcher="SmartCase"))
        assert filters.current().name == "SmartCase"

    def test_custom_matchers_appended(self, python_cmd: str) -> None:
        config = LinesiftConfig(
            matcher="py",
            enable_sep=True,
            custom_matchers=(CustomMatcherConfig(name="py", cmd=python_cmd, buffer_threshold=10),),
        )
        filters = build_filter_set(config)

        assert filters.names()[-1] == "py"
        current = filters.current()
        assert isinstance(current, ExternalCmdFilter)
        assert current.threshold == 10
        assert current.enable_sep

    def test_unusable_custom_matcher_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        config = LinesiftConfig(
            custom_matchers=(
                CustomMatcherConfig(name="ghost", cmd="linesift-no-such-command"),
                CustomMatcherConfig(name="blank", cmd=""),
            ),
        )
        with caplog.at_level(logging.WARNING, logger="linesift.filtering.registry"):
            filters = build_filter_set(config)

        assert "ghost" not in filters.names()
        assert "blank" not in filters.names()
        assert "Skipping custom matcher ghost" in caplog.text

    def test_unknown_initial_matcher_falls_back(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="linesift.filtering.registry"):
            filters = build_filter_set(LinesiftConfig(matcher="Fuzzy"))

        assert filters.current().name == "IgnoreCase"
        assert "Unknown matcher 'Fuzzy'" in caplog.text
