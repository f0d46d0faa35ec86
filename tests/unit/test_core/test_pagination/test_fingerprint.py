"""Unit tests for search filter fingerprinting."""
from __future__ import annotations

import pytest

from cursor_pagination.core.pagination.fingerprint import canonical_filter, fingerprint
from cursor_pagination.core.pagination.schemas import SortDirection
from pydantic import BaseModel

from tests.utils import PersonSearchFilter


class TaggedFilter(BaseModel):
    """Filter holding unordered collections."""

    tags: set[str]
    scopes: dict[str, frozenset[int]] = {}


@pytest.mark.unit
class TestCanonicalFilter:
    """Tests for canonical_filter."""

    def test_none_is_empty(self):
        """No filter should render as the empty string."""
        assert canonical_filter(None) == ""

    def test_model_renders_sorted_json(self):
        """Pydantic filters should render as compact sorted JSON."""
        rendered = canonical_filter(PersonSearchFilter(names=["b", "a"], age=20))

        assert rendered == '{"age":20,"names":["b","a"]}'

    def test_unset_fields_are_dropped(self):
        """None-valued fields should not affect the canonical form."""
        assert canonical_filter(PersonSearchFilter()) == canonical_filter({})
        assert canonical_filter({"age": None}) == canonical_filter({})

    def test_mapping_key_order_ignored(self):
        """Mapping insertion order should not matter."""
        assert canonical_filter({"a": 1, "b": 2}) == canonical_filter({"b": 2, "a": 1})

    def test_mapping_sets_are_sorted(self):
        """Set members should render sorted, whatever their iteration order."""
        first = canonical_filter({"tags": {"b", "a"}})
        second = canonical_filter({"tags": {"a", "b"}})

        assert first == second == '{"tags":["a","b"]}'

    def test_mixed_type_sets_are_sorted(self):
        """Sets mixing types should still order deterministically."""
        assert canonical_filter({"ids": frozenset({2, "1", 10})}) == '{"ids":["1",10,2]}'

    def test_model_sets_are_sorted(self):
        """Set fields of pydantic filters should render sorted, nested ones too."""
        search = TaggedFilter(tags={"gamma", "alpha", "beta"}, scopes={"x": frozenset({3, 1, 2})})

        assert canonical_filter(search) == '{"scopes":{"x":[1,2,3]},"tags":["alpha","beta","gamma"]}'

    def test_other_values_use_str(self):
        """Non-model, non-mapping filters should fall back to str()."""
        assert canonical_filter(42) == "42"


@pytest.mark.unit
class TestFingerprint:
    """Tests for fingerprint."""

    def test_is_stable(self):
        """Equal inputs should produce equal fingerprints."""
        first = fingerprint(PersonSearchFilter(age=20), "age", SortDirection.DESC)
        second = fingerprint(PersonSearchFilter(age=20), "age", SortDirection.DESC)

        assert first == second

    def test_shape(self):
        """Fingerprints should be 32 lowercase hex characters."""
        value = fingerprint(None, None, SortDirection.DESC)

        assert len(value) == 32
        assert all(c in "0123456789abcdef" for c in value)
        assert "_" not in value

    @pytest.mark.parametrize(
        ("other_filter", "other_sort", "other_direction"),
        [
            (PersonSearchFilter(age=21), "age", SortDirection.DESC),
            (PersonSearchFilter(age=20), "birthday", SortDirection.DESC),
            (PersonSearchFilter(age=20), None, SortDirection.DESC),
            (PersonSearchFilter(age=20), "age", SortDirection.ASC),
            (None, "age", SortDirection.DESC),
        ],
    )
    def test_any_component_change_is_detected(self, other_filter, other_sort, other_direction):
        """Changing the filter, sort field or direction should change the fingerprint."""
        base = fingerprint(PersonSearchFilter(age=20), "age", SortDirection.DESC)

        assert fingerprint(other_filter, other_sort, other_direction) != base

    def test_components_do_not_run_together(self):
        """Shifting text between filter and sort field should not collide."""
        assert fingerprint("ab", "c", SortDirection.ASC) != fingerprint("a", "bc", SortDirection.ASC)
