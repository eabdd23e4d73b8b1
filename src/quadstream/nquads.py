"""
N-Quads reader and writer backed by pyoxigraph.

pyoxigraph does the tokenizing, validation and escaping; this module only maps
its terms to and from quadstream's Term model and turns its syntax errors into
QuadSyntaxError.
"""

from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

import pyoxigraph as ox
from pyoxigraph import RdfFormat

from quadstream.exceptions import QuadSyntaxError
from quadstream.schemas import (
    DEFAULT_GRAPH,
    Quad,
    Term,
    blank_node,
    literal,
    named_node,
)


def term_from_oxigraph(term) -> Term:
    """Convert a pyoxigraph term into a Term."""
    if isinstance(term, ox.NamedNode):
        return named_node(term.value)
    if isinstance(term, ox.BlankNode):
        return blank_node(term.value)
    if isinstance(term, ox.Literal):
        return literal(term.value, language=term.language or "", datatype=term.datatype.value)
    if isinstance(term, ox.DefaultGraph):
        return DEFAULT_GRAPH
    raise ValueError(f"Unsupported RDF term: {term!r}")


def term_to_oxigraph(term: Term):
    """Convert a Term into a pyoxigraph term. Variables have no N-Quads form."""
    if term.term_type == "NamedNode":
        return ox.NamedNode(term.value)
    if term.term_type == "BlankNode":
        return ox.BlankNode(term.value)
    if term.term_type == "Literal":
        if term.language:
            return ox.Literal(term.value, language=term.language)
        if term.datatype:
            return ox.Literal(term.value, datatype=ox.NamedNode(term.datatype))
        return ox.Literal(term.value)
    if term.term_type == "DefaultGraph":
        return ox.DefaultGraph()
    raise ValueError(f"Cannot serialize {term.term_type} term in N-Quads")


def quad_from_oxigraph(item: "ox.Quad") -> Quad:
    return Quad(
        subject=term_from_oxigraph(item.subject),
        predicate=term_from_oxigraph(item.predicate),
        object=term_from_oxigraph(item.object),
        graph=term_from_oxigraph(item.graph_name),
    )


def _convert(parsed: Iterable["ox.Quad"], line_number: Optional[int] = None, line: str = "") -> Iterator[Quad]:
    """
    Map parsed quads lazily, reporting syntax errors as QuadSyntaxError.

    Without an explicit line_number the position pyoxigraph reports is used.
    """
    try:
        for item in parsed:
            try:
                yield quad_from_oxigraph(item)
            except ValueError as exc:
                raise QuadSyntaxError(line_number or 0, line or str(item), str(exc)) from exc
    except SyntaxError as exc:
        raise QuadSyntaxError(
            line_number or exc.lineno or 0,
            line or exc.text or "",
            exc.msg or str(exc),
        ) from exc


def parse_line(line: str, line_number: int = 0) -> Optional[Quad]:
    """
    Parse one N-Quads statement.

    Returns:
        The quad, or None for blank and comment-only lines

    Raises:
        QuadSyntaxError: if the line is not exactly one valid statement
    """
    quads: List[Quad] = list(_convert(ox.parse(line, RdfFormat.N_QUADS), line_number, line))
    if not quads:
        return None
    if len(quads) > 1:
        raise QuadSyntaxError(line_number, line, f"expected one statement, found {len(quads)}")
    return quads[0]


def parse_lines(lines: Iterable[str]) -> Iterator[Quad]:
    """Parse statements lazily, one line at a time, skipping blank and comment lines."""
    for line_number, line in enumerate(lines, start=1):
        item = parse_line(line, line_number)
        if item is not None:
            yield item


def iter_file(path: Union[str, Path]) -> Iterator[Quad]:
    """Stream the quads of an N-Quads (or N-Triples) file."""
    yield from _convert(ox.parse(path=str(path), format=RdfFormat.N_QUADS))


def serialize_term(term: Term) -> str:
    return str(term_to_oxigraph(term))


def serialize_quads(items: Iterable[Quad]) -> str:
    """N-Quads document for the quads, one statement per line."""
    converted = (
        ox.Quad(*(term_to_oxigraph(term) for term in item.terms()))
        for item in items
    )
    return ox.serialize(converted, format=RdfFormat.N_QUADS).decode("utf-8")


def serialize_quad(item: Quad) -> str:
    return serialize_quads([item]).rstrip("\n")
