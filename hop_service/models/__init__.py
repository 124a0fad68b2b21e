"""
Database models for the link shortener.

A single table: links (id, key, long_url, created_at).
"""

from .link import Link

__all__ = ["Link"]
