"""Unit tests for job arguments and requirement combinators."""

import pytest

from imageboard.jobs.arguments import ArgumentSet, Conjunction, Disjunction, Leaf
from imageboard.kernel.errors import ValidationError


class TestArgumentSet:
    """Tests for ArgumentSet."""

    def test_none_counts_as_absent(self):
        args = ArgumentSet({"a": "1", "b": None})

        assert args.has("a")
        assert not args.has("b")
        assert not args.has("c")

    def test_empty_string_is_present(self):
        assert ArgumentSet({"a": ""}).has("a")

    def test_is_read_only(self):
        args = ArgumentSet({"a": "1"})

        with pytest.raises(TypeError):
            args["a"] = "2"

    def test_get_int(self):
        args = ArgumentSet({"n": "42", "bad": "forty-two", "flag": True})

        assert args.get_int("n") == 42
        assert args.get_int("missing", 7) == 7
        with pytest.raises(ValidationError):
            args.get_int("bad")
        with pytest.raises(ValidationError):
            args.get_int("flag")

    def test_get_str_rejects_bytes(self):
        args = ArgumentSet({"a": b"raw"})

        with pytest.raises(ValidationError):
            args.get_str("a")


class TestRequirements:
    """Tests for Leaf, Conjunction and Disjunction."""

    def test_leaf(self):
        assert Leaf("a").evaluate(ArgumentSet(a="x")).satisfied
        verdict = Leaf("a").evaluate(ArgumentSet())
        assert not verdict.satisfied
        assert verdict.missing == ("a",)

    def test_conjunction_collects_all_missing_keys(self):
        requirement = Conjunction("a", "b", "c")

        verdict = requirement.evaluate(ArgumentSet(b="x"))

        assert not verdict.satisfied
        assert verdict.missing == ("a", "c")

    def test_conjunction_satisfied(self):
        verdict = Conjunction("a", "b").evaluate(ArgumentSet(a="1", b="2"))

        assert verdict.satisfied
        assert verdict.missing == ()

    def test_disjunction_needs_one_branch(self):
        requirement = Disjunction("a", "b", "c")

        assert requirement.evaluate(ArgumentSet(c="x")).satisfied
        verdict = requirement.evaluate(ArgumentSet())
        assert not verdict.satisfied
        assert set(verdict.missing) == {"a", "b", "c"}

    def test_empty_disjunction_is_satisfied(self):
        assert Disjunction().evaluate(ArgumentSet()).satisfied

    def test_nested(self):
        requirement = Conjunction("name", Disjunction("url", "content"))

        assert requirement.evaluate(ArgumentSet(name="n", content=b"...")).satisfied
        verdict = requirement.evaluate(ArgumentSet(url="u"))
        assert verdict.missing == ("name",)

    def test_disjunction_of_conjunctions(self):
        requirement = Disjunction(Conjunction("a", "b"), Conjunction("c", "d"))

        assert requirement.evaluate(ArgumentSet(c="1", d="2")).satisfied
        assert not requirement.evaluate(ArgumentSet(a="1", c="2")).satisfied
