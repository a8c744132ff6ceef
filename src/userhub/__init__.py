"""User directory backend.

This package contains the directory query engine, the read-through cache that
fronts it, the mutation services that keep the cache consistent, and the HTTP
and CLI surfaces built on top of them.
"""

__version__ = "0.1.0"
