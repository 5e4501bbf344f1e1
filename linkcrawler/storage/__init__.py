"""
Storage layer for the link crawler.
"""

from .link_store import LinkStore

__all__ = ['LinkStore']
