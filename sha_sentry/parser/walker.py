"""
Document walker: finds every `uses:` invocation site in a document tree.

Sites are not confined to jobs.<id>.steps; composite actions keep them under
runs.steps and reusable workflows put them directly on a job, so the whole
tree is walked.
"""

import logging
from typing import Iterator, Optional, Sequence

from sha_sentry.parser.document import MappingNode, Node, ScalarNode, SequenceNode
from sha_sentry.models import InvocationSite, RunStatistics, StructuralPath

logger = logging.getLogger(__name__)

INVOCATION_KEY = "uses"


def iter_invocation_sites(
    root: Node,
    stats: Optional[RunStatistics] = None,
) -> Iterator[InvocationSite]:
    """
    Yield every mapping entry keyed `uses` whose value is a string scalar.

    Depth-first, in declaration order. Each yielded site is counted in
    `stats.sites_discovered` before the caller sees it.
    """
    stack: list[tuple[StructuralPath, Node]] = [((), root)]
    while stack:
        path, node = stack.pop()
        if isinstance(node, MappingNode):
            stack.extend((path + (key,), value) for key, value in reversed(node.entries))
        elif isinstance(node, SequenceNode):
            stack.extend((path + (i,), item) for i, item in reversed(list(enumerate(node.items))))
        elif isinstance(node, ScalarNode):
            if path and path[-1] == INVOCATION_KEY and node.is_string:
                if stats is not None:
                    stats.sites_discovered += 1
                logger.debug("Found invocation site %s: %s", path, node.value)
                yield InvocationSite(path=path, raw_reference=node.value)


def find_line(lines: Sequence[str], reference: str) -> Optional[int]:
    """
    Return the 1-based number of the first line containing `reference`.

    This is a text search, not a structural back-reference: when the same
    reference appears on several lines, every site gets the first one.
    """
    if not reference:
        return None
    for number, line in enumerate(lines, 1):
        if reference in line:
            return number
    return None
