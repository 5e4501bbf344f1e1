"""
Link extraction from raw page markup.
"""

import re
from typing import List


# href attribute of an anchor tag, single or double quoted. Values holding
# an '@' (mail addresses and the like) never match.
LINK_PATTERN = re.compile(
    r"""<a\s+(?:[^>]*?\s)?href\s*=\s*(['"])([^'"@]*)\1""",
    re.IGNORECASE
)


def extract_links(content: str) -> List[str]:
    """
    Return every raw href value found in anchor tags, in document order.

    Duplicates are kept; deduplication happens in the link store after
    the links have been resolved.
    """
    if not content:
        return []
    return [match.group(2) for match in LINK_PATTERN.finditer(content)]
