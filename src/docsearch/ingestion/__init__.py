"""
Ingestion — text extraction, enrichment, and indexing into the vector store.

This module is responsible for turning raw documents (txt, Markdown, JSON,
HTML, PDF, docx) into embedded, classified records stored under a
deterministic id, one record per source locator.
"""
