"""
Tests for the term and quad models.
"""

import pytest
from pydantic import ValidationError

from quadstream.schemas import (
    DEFAULT_GRAPH,
    XSD_STRING,
    Quad,
    QuadPattern,
    blank_node,
    literal,
    named_node,
    quad,
    string_to_term,
    variable,
)

pytestmark = pytest.mark.fast


class TestTermStrings:
    """Canonical string form and its inverse."""

    @pytest.mark.parametrize("text", [
        "http://ex.org/s",
        "_:b0",
        '"hello"',
        '"hello"@en',
        '"42"^^http://www.w3.org/2001/XMLSchema#integer',
        "?x",
        "",
    ])
    def test_round_trip(self, text):
        assert string_to_term(text).to_string() == text

    def test_term_types(self):
        assert string_to_term("http://ex.org/s").term_type == "NamedNode"
        assert string_to_term("_:b0").term_type == "BlankNode"
        assert string_to_term('"x"').term_type == "Literal"
        assert string_to_term("?x").term_type == "Variable"
        assert string_to_term("") == DEFAULT_GRAPH

    def test_literal_with_quote_inside(self):
        term = string_to_term('"say "hi""@en')
        assert term.value == 'say "hi"'
        assert term.language == "en"

    def test_xsd_string_is_plain_literal(self):
        assert literal("a", datatype=XSD_STRING) == literal("a")

    def test_language_is_lowercased(self):
        assert literal("a", language="EN-gb") == literal("a", language="en-gb")

    def test_terms_are_immutable(self):
        term = named_node("http://ex.org/s")
        with pytest.raises(ValidationError):
            term.value = "other"


class TestQuad:
    """Quad construction, equality and hashing."""

    def test_quad_helper_defaults_graph(self):
        item = quad("s", "p", "o")
        assert item.graph == DEFAULT_GRAPH
        assert item.terms() == (named_node("s"), named_node("p"), named_node("o"), DEFAULT_GRAPH)

    def test_equal_quads_hash_equal(self):
        assert quad("s", "p", "o") == quad("s", "p", "o")
        assert len({quad("s", "p", "o"), quad("s", "p", "o"), quad("s", "p", "o", "g")}) == 2

    def test_quad_from_terms(self):
        item = quad(blank_node("b"), named_node("p"), literal("v", language="en"), named_node("g"))
        assert isinstance(item, Quad)
        assert str(item) == '_:b p "v"@en g'

    def test_str_omits_default_graph(self):
        assert str(quad("s", "p", "o")) == "s p o"

    @pytest.mark.parametrize("terms", [
        ("?x", "p", "o"),
        ("s", "?p", "o"),
        ("s", "p", "?o"),
        ("s", "p", "o", "?g"),
    ])
    def test_variables_are_rejected(self, terms):
        with pytest.raises(ValidationError, match="must be bound"):
            quad(*terms)

    def test_nul_in_values_is_rejected(self):
        with pytest.raises(ValidationError, match="NUL"):
            named_node("http://ex.org/a\x00b")
        with pytest.raises(ValidationError, match="NUL"):
            literal("a\x00b")


class TestQuadPattern:
    """Pattern matching on bound positions only."""

    def test_empty_pattern_matches_everything(self):
        assert QuadPattern().matches(quad("s", "p", "o", "g"))

    def test_bound_positions_filter(self):
        pattern = QuadPattern.of("s", None, "o")
        assert pattern.matches(quad("s", "p1", "o"))
        assert pattern.matches(quad("s", "p2", "o", "g"))
        assert not pattern.matches(quad("s", "p", "o2"))

    def test_variables_are_wildcards(self):
        pattern = QuadPattern(subject=variable("s"), predicate=named_node("p"))
        assert pattern.matches(quad("anything", "p", "o"))
        assert [position for position, _ in pattern.bound()] == [1]

    def test_default_graph_is_bound(self):
        pattern = QuadPattern(graph=DEFAULT_GRAPH)
        assert pattern.matches(quad("s", "p", "o"))
        assert not pattern.matches(quad("s", "p", "o", "g"))
