"""
Classification — AI-derived category / project / team / tags for documents.

Public API
----------
- :class:`DocumentClassifier` — abstract classifier (subclass for other providers).
- :class:`LLMDocumentClassifier` — chat-model backed classifier.
- :func:`parse_classification` — validate a raw model response.
"""

from docsearch.classification.classifier import (
    DocumentClassifier,
    LLMDocumentClassifier,
    get_chat_model,
    parse_classification,
)

__all__ = [
    "DocumentClassifier",
    "LLMDocumentClassifier",
    "get_chat_model",
    "parse_classification",
]
