"""
Parser for pipeline definition files.

Composes YAML text with PyYAML and converts the node graph into a small,
closed set of node types (mapping, sequence, scalar, null). Mapping keys keep
their source spelling, so a workflow's `on:` stays "on" instead of turning
into the boolean True that yaml.safe_load would produce.

The tree keeps no source positions; callers that need line numbers search
the original text (see walker.find_line).
"""

import logging
from dataclasses import dataclass
from typing import Union

import yaml

from sha_sentry.errors import DocumentError

logger = logging.getLogger(__name__)

_NULL_TAG = "tag:yaml.org,2002:null"
_STR_TAG = "tag:yaml.org,2002:str"


@dataclass(frozen=True)
class ScalarNode:
    value: str
    tag: str = _STR_TAG

    @property
    def is_string(self) -> bool:
        return self.tag == _STR_TAG


@dataclass(frozen=True)
class NullNode:
    pass


@dataclass(frozen=True)
class SequenceNode:
    items: tuple["Node", ...]


@dataclass(frozen=True)
class MappingNode:
    entries: tuple[tuple[str, "Node"], ...]

    def get(self, key: str) -> "Node":
        for k, v in self.entries:
            if k == key:
                return v
        return NullNode()


Node = Union[MappingNode, SequenceNode, ScalarNode, NullNode]


def _convert(node: yaml.Node, ancestors: set[int]) -> Node:
    if isinstance(node, yaml.ScalarNode):
        if node.tag == _NULL_TAG:
            return NullNode()
        return ScalarNode(value=node.value, tag=node.tag)

    if id(node) in ancestors:
        raise DocumentError("document contains a recursive alias")
    ancestors.add(id(node))
    try:
        if isinstance(node, yaml.SequenceNode):
            return SequenceNode(tuple(_convert(item, ancestors) for item in node.value))
        entries = []
        for key_node, value_node in node.value:
            if not isinstance(key_node, yaml.ScalarNode):
                logger.debug("Skipping complex mapping key at line %d", key_node.start_mark.line + 1)
                continue
            entries.append((key_node.value, _convert(value_node, ancestors)))
        return MappingNode(tuple(entries))
    finally:
        ancestors.discard(id(node))


def load_document(text: str) -> Node:
    """
    Parse YAML text into a document tree.

    Args:
        text: The raw file content.

    Returns:
        The root node; NullNode for an empty document.

    Raises:
        DocumentError: If the text is not valid single-document YAML.
    """
    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise DocumentError(f"invalid YAML: {e}") from e

    if root is None:
        return NullNode()
    return _convert(root, set())
