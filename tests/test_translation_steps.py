"""Tests for the individual translation steps of QueryFilterTranslator."""

from __future__ import annotations

import pytest
from sqlalchemy import Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from resource_query import (
    ComposedQuery,
    FilterOperator,
    Predicate,
    QueryFilterTranslator,
    ResourceConfig,
    SortClause,
)


class _Base(DeclarativeBase):
    pass


class _Score(_Base):
    """A column whose name ends with an operator suffix."""

    __tablename__ = "scores"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    score: Mapped[int] = mapped_column(Integer)
    score_gt: Mapped[int] = mapped_column(Integer)


def _predicates(translator: QueryFilterTranslator, params: dict) -> list[Predicate]:
    return translator.build_search_params(params, ComposedQuery()).predicates


class TestSearchableFields:
    def test_fillable_then_primary_key_then_timestamps(self, translator) -> None:
        fields = translator.searchable_fields()
        assert fields[-3:] == ("id", "created_at", "updated_at")
        assert set(fields[:-3]) == {"name", "email", "status", "age"}

    def test_explicit_config_without_timestamps(self, models, session) -> None:
        config = ResourceConfig(
            model=models.User,
            fillable=("name",),
            created_at=None,
            updated_at=None,
        )
        t = QueryFilterTranslator(config, session)
        assert t.searchable_fields() == ("name", "id")


class TestBuildSearchParams:
    def test_unknown_keys_add_nothing(self, translator) -> None:
        assert _predicates(translator, {"password": "x", "limit": "10"}) == []

    def test_exact_key_adds_equality(self, translator) -> None:
        assert _predicates(translator, {"status": "active"}) == [
            Predicate("status", FilterOperator.EQ, "active")
        ]

    @pytest.mark.parametrize(
        ("key", "operator", "value"),
        [
            ("age_not", FilterOperator.NE, "18"),
            ("age_gt", FilterOperator.GT, "18"),
            ("age_lt", FilterOperator.LT, "18"),
            ("age_gte", FilterOperator.GE, "18"),
            ("age_lte", FilterOperator.LE, "18"),
            ("age_like", FilterOperator.LIKE, "%18%"),
            ("age_in", FilterOperator.IN, ["18"]),
            ("age_notIn", FilterOperator.NOT_IN, ["18"]),
            ("age_isNull", FilterOperator.IS_NULL, None),
            ("age_isNotNull", FilterOperator.IS_NOT_NULL, None),
        ],
    )
    def test_suffix_on_searchable_field(self, translator, key, operator, value) -> None:
        assert _predicates(translator, {key: "18"}) == [
            Predicate("age", operator, value)
        ]

    @pytest.mark.parametrize("suffix", ["_gt", "_like", "_in", "_isNull"])
    def test_suffix_on_unsearchable_field_is_ignored(self, translator, suffix) -> None:
        assert _predicates(translator, {f"password{suffix}": "x"}) == []

    def test_in_keeps_exact_tokens(self, translator) -> None:
        (predicate,) = _predicates(translator, {"status_in": "a,b,c"})
        assert predicate.value == ["a", "b", "c"]

    def test_like_wraps_wildcards(self, translator) -> None:
        (predicate,) = _predicates(translator, {"name_like": "foo"})
        assert predicate == Predicate("name", FilterOperator.LIKE, "%foo%")

    def test_timestamps_and_primary_key_are_searchable(self, translator) -> None:
        predicates = _predicates(
            translator, {"id_in": "1,2", "created_at_gte": "2024-01-01T00:00:00"}
        )
        assert [p.field for p in predicates] == ["id", "created_at"]

    def test_equality_and_suffix_both_apply_to_one_key(self, session) -> None:
        config = ResourceConfig(model=_Score, fillable=("score", "score_gt"))
        t = QueryFilterTranslator(config, session)
        assert _predicates(t, {"score_gt": "5"}) == [
            Predicate("score_gt", FilterOperator.EQ, "5"),
            Predicate("score", FilterOperator.GT, "5"),
        ]

    def test_predicates_accumulate_on_given_query(self, translator) -> None:
        query = ComposedQuery().where("id", FilterOperator.EQ, 1)
        result = translator.build_search_params({"status": "active"}, query)
        assert result is query
        assert len(query.predicates) == 2


class TestIncludeContains:
    def test_known_relations_are_loaded(self, translator) -> None:
        query = translator.include_contains({"contain": "posts,roles"}, ComposedQuery())
        assert query.includes == ["posts", "roles"]

    def test_names_are_trimmed(self, translator) -> None:
        query = translator.include_contains({"contain": "posts, roles "}, ComposedQuery())
        assert query.includes == ["posts", "roles"]

    def test_unknown_relations_are_skipped(self, translator) -> None:
        query = translator.include_contains({"contain": "friends,posts"}, ComposedQuery())
        assert query.includes == ["posts"]

    def test_dotted_paths_pass_through(self, translator) -> None:
        query = translator.include_contains(
            {"contain": "posts.comments"}, ComposedQuery()
        )
        assert query.includes == ["posts.comments"]

    def test_missing_parameter_is_a_no_op(self, translator) -> None:
        assert translator.include_contains({}, ComposedQuery()).includes == []


class TestIncludeCounts:
    def test_count_parameter(self, translator) -> None:
        query = translator.include_counts({"count": "posts"}, ComposedQuery())
        assert query.counts == ["posts"]

    def test_with_count_parameter(self, translator) -> None:
        query = translator.include_counts({"with_count": "roles"}, ComposedQuery())
        assert query.counts == ["roles"]

    def test_count_wins_over_with_count(self, translator) -> None:
        query = translator.include_counts(
            {"count": "posts", "with_count": "roles"}, ComposedQuery()
        )
        assert query.counts == ["posts"]

    def test_unknown_and_duplicate_names_are_skipped(self, translator) -> None:
        query = translator.include_counts(
            {"count": "posts,followers,posts"}, ComposedQuery()
        )
        assert query.counts == ["posts"]

    def test_dotted_paths_are_not_counted(self, translator) -> None:
        query = translator.include_counts({"count": "posts.comments"}, ComposedQuery())
        assert query.counts == []


class TestApplySorts:
    def test_multi_key_sort_keeps_order(self, translator) -> None:
        query = translator.apply_sorts({"sort": "name:asc,age:desc"}, ComposedQuery())
        assert query.sorts == [SortClause("name", "asc"), SortClause("age", "desc")]

    def test_entry_without_colon_is_ignored(self, translator) -> None:
        assert translator.apply_sorts({"sort": "name"}, ComposedQuery()).sorts == []

    def test_entry_with_two_colons_is_ignored(self, translator) -> None:
        query = translator.apply_sorts({"sort": "name:asc:x,age:desc"}, ComposedQuery())
        assert query.sorts == [SortClause("age", "desc")]

    def test_direction_is_not_validated_here(self, translator) -> None:
        query = translator.apply_sorts({"sort": "name:sideways"}, ComposedQuery())
        assert query.sorts == [SortClause("name", "sideways")]

    def test_parts_are_trimmed(self, translator) -> None:
        query = translator.apply_sorts({"sort": " name : desc "}, ComposedQuery())
        assert query.sorts == [SortClause("name", "desc")]


def test_search_builder_runs_every_step(translator) -> None:
    query = translator.search_builder(
        {
            "status": "active",
            "contain": "posts",
            "with_count": "roles",
            "sort": "name:asc",
        }
    )
    assert query.to_dict() == {
        "where": [{"op": "=", "attr": "status", "val": "active"}],
        "order_by": ["name:asc"],
        "with": ["posts"],
        "with_count": ["roles"],
    }
