"""maelstrom — layered configuration bootstrap for the maelstrom server."""

__version__ = "0.1.0"
