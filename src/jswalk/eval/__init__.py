"""Per-node-kind evaluators for the jswalk runtime."""

__all__ = [
    "bind",
    "blocks",
    "chains",
    "common",
    "control",
    "expr",
    "fn",
    "literals",
    "mutation",
    "objects",
]
