"""Tests for search-result selection."""

from __future__ import annotations

import pytest

from mpm.registry.models import ArtifactCandidate
from mpm.resolver.selector import MAX_ALTERNATIVES, select_candidate


def _c(name: str, group: str = "org.example", count: int = 1) -> ArtifactCandidate:
    return ArtifactCandidate(group=group, name=name, latest_version="1.0", version_count=count)


class TestSelectCandidate:
    def test_top_result_exact_match(self):
        results = [_c("lombok", "org.projectlombok"), _c("lombok-maven")]
        selection = select_candidate(results, "lombok")
        assert selection.candidate is results[0]
        assert selection.exact
        assert selection.alternatives == ()

    def test_exact_match_lower_in_ranking_wins(self):
        results = [_c("spring-boot-starter"), _c("spring-boot")]
        selection = select_candidate(results, "spring-boot")
        assert selection.candidate is results[1]
        assert selection.exact
        assert not selection.ambiguous

    def test_case_insensitive(self):
        results = [_c("other"), _c("Jackson-Databind")]
        selection = select_candidate(results, "jackson-databind")
        assert selection.candidate is results[1]

    def test_first_exact_in_rank_order(self):
        results = [_c("x"), _c("guava", "first.group"), _c("guava", "second.group")]
        assert select_candidate(results, "guava").candidate.group == "first.group"

    def test_no_exact_match_falls_back_to_top(self):
        results = [_c(f"lib-{i}") for i in range(8)]
        selection = select_candidate(results, "lib")
        assert selection.candidate is results[0]
        assert not selection.exact
        assert selection.ambiguous
        assert list(selection.alternatives) == results[1 : 1 + MAX_ALTERNATIVES]

    def test_fewer_alternatives_than_max(self):
        results = [_c("a-lib"), _c("b-lib")]
        selection = select_candidate(results, "lib")
        assert selection.alternatives == (results[1],)

    def test_single_result_without_match(self):
        selection = select_candidate([_c("something")], "else")
        assert not selection.exact
        assert selection.alternatives == ()

    def test_empty_results_is_caller_error(self):
        with pytest.raises(ValueError):
            select_candidate([], "anything")
