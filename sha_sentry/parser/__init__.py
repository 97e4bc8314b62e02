from .document import load_document, MappingNode, SequenceNode, ScalarNode, NullNode, Node
from .walker import iter_invocation_sites, find_line
from .discovery import discover_files

__all__ = [
    "load_document",
    "MappingNode",
    "SequenceNode",
    "ScalarNode",
    "NullNode",
    "Node",
    "iter_invocation_sites",
    "find_line",
    "discover_files",
]
