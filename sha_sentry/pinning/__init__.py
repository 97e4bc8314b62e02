from .classifier import classify, parse_action_reference, is_commit_sha
from .engine import PinEngine
from .rewrite import rewrite_line, rewrite_lines, write_atomic

__all__ = [
    "classify",
    "parse_action_reference",
    "is_commit_sha",
    "PinEngine",
    "rewrite_line",
    "rewrite_lines",
    "write_atomic",
]
