"""
Link Crawler

A depth-bounded, multi-threaded web crawler that collects every link
reachable from a seed address.
"""

__version__ = "1.0.0"
__description__ = "A concurrent link crawler with a shared visited-link store"
