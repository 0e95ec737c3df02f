"""Tests for the predicate builder."""

from __future__ import annotations

import pytest

from modelspine.orm import F, kwargs
from modelspine.orm.kwargs import OPERATORS, And, Condition, Or


class TestKwargs:
    def test_single_condition(self):
        assert kwargs(name="Jane") == Condition("name", "=", "Jane")

    def test_multiple_conditions_are_anded_in_order(self):
        predicate = kwargs(name="Jane", age__lt=30)
        assert isinstance(predicate, And)
        assert predicate.left == Condition("name", "=", "Jane")
        assert predicate.right == Condition("age", "<", 30)

    @pytest.mark.parametrize(
        "suffix, op",
        [("eq", "="), ("ne", "!="), ("lt", "<"), ("lte", "<="), ("gt", ">"), ("gte", ">=")],
    )
    def test_suffixes(self, suffix, op):
        assert kwargs(**{f"age__{suffix}": 1}) == Condition("age", op, 1)

    def test_unknown_suffix_stays_in_the_name(self):
        assert kwargs(created__day=1) == Condition("created__day", "=", 1)

    def test_empty_is_rejected(self):
        with pytest.raises(ValueError):
            kwargs()


class TestF:
    def test_comparisons_build_conditions(self):
        age = F("age")
        assert (age == 1) == Condition("age", "=", 1)
        assert (age != 1) == Condition("age", "!=", 1)
        assert (age < 1) == Condition("age", "<", 1)
        assert (age <= 1) == Condition("age", "<=", 1)
        assert (age > 1) == Condition("age", ">", 1)
        assert (age >= 1) == Condition("age", ">=", 1)

    def test_column_to_column(self):
        condition = F("user.id") == F("profile.user_id")
        assert condition.field == "user.id"
        assert condition.value.same_as(F("profile.user_id"))
        assert condition == Condition("user.id", "=", F("profile.user_id"))
        assert condition != Condition("user.id", "=", F("profile.id"))

    def test_repr(self):
        assert repr(F("age")) == "F('age')"


class TestComposition:
    def test_and_or_build_new_trees(self):
        young = kwargs(age__lt=18)
        old = kwargs(age__gte=65)

        either = young.or_(old)
        both = young & kwargs(role="admin")

        assert either == Or(young, old)
        assert both == And(young, Condition("role", "=", "admin"))
        assert (young | old) == either
        # Operands are untouched
        assert young == Condition("age", "<", 18)

    def test_and_requires_predicate(self):
        with pytest.raises(TypeError):
            kwargs(age=1).and_("age = 1")

    def test_fields_walks_the_tree(self):
        predicate = kwargs(name="Jane") | ((F("age") > 1) & (F("user.id") == F("profile.user_id")))
        assert list(predicate.fields()) == ["name", "age", "user.id", "profile.user_id"]


class TestCondition:
    def test_rejects_unknown_operator(self):
        with pytest.raises(ValueError):
            Condition("age", "LIKE", "x")

    def test_rejects_empty_field(self):
        with pytest.raises(ValueError):
            Condition("", "=", 1)

    def test_operators(self):
        assert OPERATORS == ("=", "!=", "<", "<=", ">", ">=")

    def test_hashable(self):
        assert len({Condition("a", "=", 1), Condition("a", "=", 1)}) == 1

    def test_equal_conditions_hash_equal(self):
        assert Condition("a", "=", 1) == Condition("a", "=", 1.0)
        assert hash(Condition("a", "=", 1)) == hash(Condition("a", "=", 1.0))
        assert len({Condition("a", "=", 1), Condition("a", "=", 1.0)}) == 1

    def test_column_values_hash_by_name(self):
        left = Condition("user.id", "=", F("profile.user_id"))
        right = Condition("user.id", "=", F("profile.user_id"))
        assert left == right
        assert hash(left) == hash(right)
