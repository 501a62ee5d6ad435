"""Reader for plain-text weekly event listings."""
import logging
import re
from typing import List

from scraper.http_client import fetch_text

logger = logging.getLogger(__name__)


class ListingReader:
    """
    Fetches a plain-text listing and splits it into blocks.

    Entries are separated by a rule line of three or more '-', '=', '*'
    or '~' characters. Within an entry, elements are separated by blank
    lines; the last element holds the location and time lines.
    """

    SEPARATOR_REGEX = re.compile(r"^[ \t]*[-=*~]{3,}[ \t]*$", re.MULTILINE)
    ELEMENT_SEPARATOR_REGEX = re.compile(r"\n[ \t]*\n")

    def __init__(self, timeout: int = 30):
        self.timeout = timeout

    def fetch_listing(self, url: str) -> str:
        logger.info(f"Fetching listing from {url}")
        return fetch_text(url, self.timeout)

    def split_blocks(self, text: str) -> List[List[str]]:
        """
        Split listing text into blocks of elements.

        Args:
            text: Listing text

        Returns:
            List of blocks, each a list of non-empty elements
        """
        normalized = text.replace('\r\n', '\n')
        blocks = []

        for entry in self.SEPARATOR_REGEX.split(normalized):
            elements = [
                element.strip()
                for element in self.ELEMENT_SEPARATOR_REGEX.split(entry.strip())
                if element.strip()
            ]
            if elements:
                blocks.append(elements)

        logger.info(f"Split listing into {len(blocks)} blocks")
        return blocks
