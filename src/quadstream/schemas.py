from pydantic import BaseModel, ConfigDict, field_validator
from typing import Iterator, Literal, Optional, Tuple, Union

XSD_STRING = "http://www.w3.org/2001/XMLSchema#string"
RDF_LANG_STRING = "http://www.w3.org/1999/02/22-rdf-syntax-ns#langString"

TermType = Literal["NamedNode", "BlankNode", "Literal", "Variable", "DefaultGraph"]


class Term(BaseModel):
    """
    A single RDF term: IRI, blank node, literal, variable or the default graph.
    """
    model_config = ConfigDict(frozen=True)

    term_type: TermType
    value: str = ""
    language: str = ""  # Literals only, lowercased
    datatype: Optional[str] = None  # Literals only, None means xsd:string

    @field_validator("value", "datatype")
    @classmethod
    def reject_nul(cls, value: Optional[str]) -> Optional[str]:
        # NUL separates positions in pattern keys
        if value is not None and "\x00" in value:
            raise ValueError("term values cannot contain NUL characters")
        return value

    @field_validator("language")
    @classmethod
    def lowercase_language(cls, value: str) -> str:
        return value.lower()

    @field_validator("datatype")
    @classmethod
    def plain_string_datatype(cls, value: Optional[str]) -> Optional[str]:
        if value in (XSD_STRING, RDF_LANG_STRING):
            return None
        return value

    @property
    def is_variable(self) -> bool:
        return self.term_type == "Variable"

    def to_string(self) -> str:
        """
        Canonical string form of the term.

        Named nodes render as their IRI, blank nodes as ``_:label``, literals as
        ``"value"`` with an ``@lang`` or ``^^datatype`` suffix, variables as
        ``?name`` and the default graph as the empty string.
        """
        if self.term_type == "NamedNode":
            return self.value
        if self.term_type == "BlankNode":
            return f"_:{self.value}"
        if self.term_type == "Variable":
            return f"?{self.value}"
        if self.term_type == "DefaultGraph":
            return ""
        suffix = ""
        if self.language:
            suffix = f"@{self.language}"
        elif self.datatype:
            suffix = f"^^{self.datatype}"
        return f'"{self.value}"{suffix}'

    def __str__(self) -> str:
        return self.to_string()


def named_node(value: str) -> Term:
    return Term(term_type="NamedNode", value=value)


def blank_node(value: str) -> Term:
    return Term(term_type="BlankNode", value=value)


def literal(value: str, language: str = "", datatype: Optional[str] = None) -> Term:
    return Term(term_type="Literal", value=value, language=language, datatype=datatype)


def variable(value: str) -> Term:
    return Term(term_type="Variable", value=value)


def default_graph() -> Term:
    return Term(term_type="DefaultGraph")


DEFAULT_GRAPH = default_graph()


def string_to_term(value: str) -> Term:
    """
    Inverse of Term.to_string().

    Anything that is not a literal, blank node, variable or the empty string is
    taken to be a named node.
    """
    if value == "":
        return DEFAULT_GRAPH
    if value.startswith("?"):
        return variable(value[1:])
    if value.startswith("_:"):
        return blank_node(value[2:])
    if value.startswith('"'):
        end = value.rfind('"')
        if end <= 0:
            return literal(value[1:])
        suffix = value[end + 1:]
        if suffix.startswith("@"):
            return literal(value[1:end], language=suffix[1:])
        if suffix.startswith("^^"):
            return literal(value[1:end], datatype=suffix[2:])
        return literal(value[1:end])
    return named_node(value)


TermLike = Union[Term, str, None]


def as_term(value: TermLike) -> Optional[Term]:
    """Accept a Term, its canonical string form, or None."""
    if value is None or isinstance(value, Term):
        return value
    return string_to_term(value)


class Quad(BaseModel):
    """
    A fact: subject, predicate, object and graph, all bound.
    """
    model_config = ConfigDict(frozen=True)

    subject: Term
    predicate: Term
    object: Term
    graph: Term = DEFAULT_GRAPH

    @field_validator("subject", "predicate", "object", "graph")
    @classmethod
    def require_bound(cls, term: Term) -> Term:
        if term.is_variable:
            raise ValueError(f"quad positions must be bound, got variable {term}")
        return term

    def terms(self) -> Tuple[Term, Term, Term, Term]:
        """The four terms in quad position order."""
        return (self.subject, self.predicate, self.object, self.graph)

    def __str__(self) -> str:
        parts = [t.to_string() for t in self.terms()]
        if self.graph.term_type == "DefaultGraph":
            parts = parts[:3]
        return " ".join(parts)


def quad(subject: TermLike, predicate: TermLike, object: TermLike, graph: TermLike = None) -> Quad:
    """
    Build a Quad from terms or canonical term strings.

    Usage:
        quad("s1", "p1", "o1")
        quad("http://ex.org/s", "http://ex.org/p", '"hello"@en', "http://ex.org/g")
    """
    return Quad(
        subject=as_term(subject),
        predicate=as_term(predicate),
        object=as_term(object),
        graph=as_term(graph) or DEFAULT_GRAPH,
    )


class QuadPattern(BaseModel):
    """
    A quad pattern. A position that is None or holds a variable is a wildcard.
    """
    model_config = ConfigDict(frozen=True)

    subject: Optional[Term] = None
    predicate: Optional[Term] = None
    object: Optional[Term] = None
    graph: Optional[Term] = None

    @classmethod
    def of(cls, subject: TermLike = None, predicate: TermLike = None,
           object: TermLike = None, graph: TermLike = None) -> "QuadPattern":
        return cls(
            subject=as_term(subject),
            predicate=as_term(predicate),
            object=as_term(object),
            graph=as_term(graph),
        )

    def terms(self) -> Tuple[Optional[Term], Optional[Term], Optional[Term], Optional[Term]]:
        return (self.subject, self.predicate, self.object, self.graph)

    def bound(self) -> Iterator[Tuple[int, Term]]:
        """Yield (position, term) for every non-wildcard position."""
        for position, term in enumerate(self.terms()):
            if term is not None and not term.is_variable:
                yield position, term

    def matches(self, candidate: Quad) -> bool:
        quad_terms = candidate.terms()
        return all(quad_terms[position] == term for position, term in self.bound())
