"""Directed link graph over resolved references.

Uses :mod:`networkx`; nodes are note relpaths (with a ``title``
attribute), edges are resolved source -> target links with a ``count``
attribute holding the number of occurrences.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx

if TYPE_CHECKING:
    from notelinks.note import Note, NoteCollection
    from notelinks.resolver import Resolution


def build_link_graph(collection: "NoteCollection", resolution: "Resolution") -> nx.DiGraph:
    """Return a :class:`networkx.DiGraph` of every resolved link."""
    G: nx.DiGraph = nx.DiGraph()
    for note in collection:
        G.add_node(note.relpath, title=note.title)
    for ref in resolution.resolved:
        src, tgt = ref.reference.source_path, ref.target_path
        if G.has_edge(src, tgt):
            G[src][tgt]["count"] += 1
        else:
            G.add_edge(src, tgt, count=1)
    return G


def incoming_degree(G: nx.DiGraph, relpath: str) -> int:
    """Number of distinct *other* notes linking to *relpath*."""
    return G.in_degree(relpath) - (1 if G.has_edge(relpath, relpath) else 0)


def find_orphans(collection: "NoteCollection", resolution: "Resolution") -> list["Note"]:
    """Notes with no resolved incoming reference from any other note.

    Self-links do not count.  Sorted by ``(title, relpath)``.
    """
    G = build_link_graph(collection, resolution)
    orphans = [note for note in collection if incoming_degree(G, note.relpath) == 0]
    return sorted(orphans, key=lambda n: (n.title, n.relpath))
