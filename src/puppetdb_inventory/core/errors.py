"""
Error taxonomy.

We separate error types so callers can react correctly.
Example:
RemoteServiceError means PuppetDB could not be reached or answered garbage.
EmptyNodesError and EmptyFactsError mean PuppetDB answered with nothing,
which usually points at misconfiguration or an outage on the PuppetDB side.
QueryBuildError means a fact query could not be constructed.

None of these are retried internally. The cache is never populated when one
of them is raised, so the next call starts from scratch.
"""


class InventoryError(Exception):
    """Base class for all inventory exceptions."""


class RemoteServiceError(InventoryError):
    """Raised when a PuppetDB request fails at the transport level."""


class EmptyNodesError(InventoryError):
    """Raised when PuppetDB returns zero active nodes."""


class EmptyFactsError(InventoryError):
    """Raised when PuppetDB returns zero facts for the fact query."""


class QueryBuildError(InventoryError):
    """Raised when a query expression is malformed."""
