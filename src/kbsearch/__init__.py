"""Relevance search over knowledge-base articles and tutorials."""

__version__ = "0.1.0"
