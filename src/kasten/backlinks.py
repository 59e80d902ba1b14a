"""BacklinkIndex: the link graph of a slip-box, kept as a networkx DiGraph.

An edge ``source -> target`` means the note *source* contains a
``[...](target)`` reference. Backlinks of a note are the predecessors of its
node. The graph is a derived cache: :meth:`BacklinkIndex.build` replaces it
from a full scan and :meth:`BacklinkIndex.update` patches a single note's
out-edges after a save.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from kasten.errors import KastenError
    from kasten.index import ZettelResult

logger = logging.getLogger(__name__)


class BacklinkIndex:
    """Directed note-to-note link graph with reverse lookup."""

    def __init__(self) -> None:
        self.graph: nx.DiGraph = nx.DiGraph()
        #: identity -> error for notes that could not be read by the last build
        self.failures: dict[str, KastenError] = {}

    # ------------------------------------------------------------------
    # Build / patch
    # ------------------------------------------------------------------

    def build(self, results: Iterable["ZettelResult"]) -> None:
        """Replace the graph with the links of every note that loads."""
        self.graph = nx.DiGraph()
        self.failures = {}
        for result in results:
            if result.ok:
                self.update(result.identity, result.zettel.links())
            else:
                self.failures[result.identity] = result.error
        logger.info(
            "backlink index built: %d notes, %d links, %d unreadable",
            self.graph.number_of_nodes(),
            self.graph.number_of_edges(),
            len(self.failures),
        )

    def update(self, identity: str, links: Iterable[str]) -> tuple[set[str], set[str]]:
        """Make *links* the exact out-edges of *identity*.

        Returns ``(gained, lost)``: targets that are new since the previous
        state and targets that are no longer linked.
        """
        new = set(links)
        old = self.links(identity)
        gained, lost = new - old, old - new

        self.graph.add_node(identity)
        self.graph.remove_edges_from((identity, target) for target in lost)
        self.graph.add_edges_from((identity, target) for target in gained)
        self.failures.pop(identity, None)
        if gained or lost:
            logger.debug("patched %s: +%s -%s", identity, sorted(gained), sorted(lost))
        return gained, lost

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def backlinks(self, identity: str) -> set[str]:
        """Identities of the notes that link to *identity*."""
        if identity not in self.graph:
            return set()
        return set(self.graph.predecessors(identity))

    def links(self, identity: str) -> set[str]:
        """Identities *identity* links to, as of the last build or update."""
        if identity not in self.graph:
            return set()
        return set(self.graph.successors(identity))

    def edges(self) -> list[tuple[str, str]]:
        """Return ``(source, target)`` pairs for every recorded link."""
        return list(self.graph.edges())

    def __contains__(self, identity: object) -> bool:
        return identity in self.graph
