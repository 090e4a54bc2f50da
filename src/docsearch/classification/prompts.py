"""Prompt templates for document classification.

Keeping prompts in one place makes them easy to audit and version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

CLASSIFICATION_SYSTEM = """\
You are a librarian classifying internal company documents.

Analyse the document and produce a JSON object with exactly these keys:

  "category" – the main topic or category of the document
  "project"  – the project name if one is mentioned, otherwise null
  "team"     – the owning team (marketing, sales, product, engineering, ...)
               or null when it cannot be inferred
  "tags"     – a list of 3-5 short, relevant tags

Use null for anything you cannot determine — never an empty string.

Respond with **only** valid JSON — no markdown fences, no commentary.
"""


def build_classification_prompt(excerpt: str, filename: str) -> list[BaseMessage]:
    """Build the chat messages asking the model to classify one document.

    Parameters
    ----------
    excerpt:
        The (already truncated) document text.
    filename:
        Display name of the document; often carries project or team hints.
    """
    return [
        SystemMessage(content=CLASSIFICATION_SYSTEM),
        HumanMessage(content=f"Document: {filename}\n\nContent:\n{excerpt}"),
    ]
