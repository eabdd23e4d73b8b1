"""
Index of live channels by the quad pattern they were opened for.

Registering is a single dict append. Looking up the channels interested in a
quad enumerates the 16 generalizations of that quad (every subset of its four
positions replaced by the wildcard) and reads those buckets, so the cost does
not depend on how many channels are registered.
"""

from itertools import product
from typing import Dict, Iterator, List, Optional

from quadstream.channel import PendingChannel
from quadstream.schemas import Quad, Term

WILDCARD = "?"
# Bound fragments carry this prefix so no term can render as the wildcard
BOUND = "="
SEPARATOR = "\x00"


def term_key(term: Optional[Term]) -> str:
    """Key fragment for one pattern position. Unbound and variable terms are wildcards."""
    if term is None or term.is_variable:
        return WILDCARD
    return BOUND + term.to_string()


def pattern_key(
    subject: Optional[Term] = None,
    predicate: Optional[Term] = None,
    object: Optional[Term] = None,
    graph: Optional[Term] = None,
) -> str:
    return SEPARATOR.join(term_key(term) for term in (subject, predicate, object, graph))


def quad_keys(item: Quad) -> Iterator[str]:
    """All 16 pattern keys a quad matches, fully bound first."""
    bound = [term_key(term) for term in item.terms()]
    for mask in product((False, True), repeat=4):
        yield SEPARATOR.join(WILDCARD if wild else fragment for fragment, wild in zip(bound, mask))


class PatternIndex:
    """
    Registry of live channels, bucketed by pattern key.

    Entries are never removed one by one: the index lives as long as its store
    and all_channels is what finalization walks to close every channel.
    """

    def __init__(self):
        self.indexed_channels: Dict[str, List[PendingChannel]] = {}
        self.all_channels: List[PendingChannel] = []

    def __len__(self) -> int:
        return len(self.all_channels)

    @property
    def buckets(self) -> int:
        return len(self.indexed_channels)

    def register(
        self,
        channel: PendingChannel,
        subject: Optional[Term] = None,
        predicate: Optional[Term] = None,
        object: Optional[Term] = None,
        graph: Optional[Term] = None,
    ) -> str:
        """
        Add a channel for the given pattern.

        Returns:
            The pattern key the channel was filed under
        """
        self.all_channels.append(channel)
        key = pattern_key(subject, predicate, object, graph)
        self.indexed_channels.setdefault(key, []).append(channel)
        return key

    def lookup(self, item: Quad) -> List[PendingChannel]:
        """
        Find every channel whose pattern matches the quad.

        A channel registered more than once under the same key is returned once
        per registration.
        """
        channels: List[PendingChannel] = []
        for key in quad_keys(item):
            found = self.indexed_channels.get(key)
            if found:
                channels.extend(found)
        return channels
