"""agent-def-fetcher: fetch, cache, browse and install agent definitions."""

__version__ = "0.1.0"
