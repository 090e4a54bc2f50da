"""docsearch — semantic document index: extraction, AI enrichment, vector search."""

__version__ = "0.1.0"
