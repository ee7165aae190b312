"""
Campfire - Exceptions
======================
Failures the search pipeline distinguishes between.

``RemoteCallTimeout`` is raised by ``run_with_timeout`` and handled by each
component exactly like any other failure of the call it wraps.
``IndexBuildError`` and ``QueryError`` mark *total* failures of a build or a
query; ``SearchSession`` turns them into degraded responses.
"""


class CampfireError(Exception):
    """Base class for all Campfire errors."""


class RemoteCallTimeout(CampfireError):
    """A remote call (embedding, chat, catalog, vector store) exceeded its timeout."""


class IndexBuildError(CampfireError):
    """The product index could not be built (catalog read or batch upsert failed)."""


class QueryError(CampfireError):
    """A search query could not be executed (query embedding or vector lookup failed)."""
