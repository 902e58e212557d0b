"""JSON export and import of graph links.

Usage::

    from link_graph.core.serialization import dump_links, load_links

    # Export
    dump_links(graph, "links.json")

    # Import into another graph
    load_links("links.json", other_graph)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from link_graph import __version__
from link_graph.core.graph import BaseGraph

LOG = logging.getLogger(__name__)


def dump_links(
    graph: BaseGraph,
    path: Union[str, Path],
    indent: int = 2,
) -> int:
    """Export all links of a graph to a JSON file.

    Args:
        graph: Any ``BaseGraph`` implementation.
        path: File path to write to.
        indent: JSON indentation level.

    Returns:
        Number of links written.
    """
    links = graph.fetch({})
    data = {"version": __version__, "links": links}
    Path(path).write_text(json.dumps(data, indent=indent), encoding="utf-8")
    LOG.debug("Exported %d link(s) to %s", len(links), path)
    return len(links)


def load_links(path: Union[str, Path], graph: BaseGraph) -> int:
    """Insert the links of a file previously created by ``dump_links``.

    Link ids are kept, so loading the same file twice into one graph fails
    on the duplicate ids.

    Returns:
        Number of links inserted.
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    count = 0
    for link in raw.get("links", []):
        graph.insert(link)
        count += 1
    LOG.debug("Imported %d link(s) from %s", count, path)
    return count
