"""HTTP clients for the preprint, profile and citation-metadata sources."""

from pubreconcile.clients.arxiv import ArxivClient
from pubreconcile.clients.crossref import CrossrefClient
from pubreconcile.clients.http import HttpClientFactory, transient_retry
from pubreconcile.clients.orcid import OrcidClient

__all__ = [
    "ArxivClient",
    "CrossrefClient",
    "OrcidClient",
    "HttpClientFactory",
    "transient_retry",
]
