"""
Errors raised across the pipeline boundary.
"""


class ProviderError(Exception):
    """A provider search request failed."""


class IdentityIndexUnavailable(Exception):
    """
    The existing-identity index could not be loaded.

    Raised instead of running with an empty index, which would re-insert
    every job already in the store.
    """
