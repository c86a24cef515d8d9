"""Search Smiles award flights in miles: a command, a JSON-RPC tool server, and a client library."""

__version__ = "1.0.0"
__all__ = ["__version__"]