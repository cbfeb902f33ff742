"""Knowledge base enums."""

from enum import Enum


class KnowledgeSourceType(str, Enum):
    """Origin of a knowledge base passage."""

    FAQ = "faq"
    ARTICLE = "article"
    FILE = "file"
