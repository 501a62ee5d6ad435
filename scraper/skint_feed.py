"""Scraper for posts of The Skint event listing site."""
import logging
from datetime import date, timezone
from email.utils import parsedate_to_datetime
from typing import List, Tuple
from zoneinfo import ZoneInfo

from bs4 import BeautifulSoup, Tag

from scraper.http_client import fetch_text

logger = logging.getLogger(__name__)


class PostNotFound(Exception):
    """The requested post is not in the feed or page."""


class SkintFeedScraper:
    """Retrieves the paragraphs of one post, from the RSS feed or the post page."""

    RSS_URL = "https://theskint.com/rss"
    POST_URL = "https://theskint.com/"

    def __init__(
        self,
        timeout: int = 30,
        time_zone: str = 'America/New_York',
        rss_url: str = RSS_URL,
        post_url: str = POST_URL
    ):
        """
        Initialize the feed scraper.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            time_zone: Zone publication dates are converted into
            rss_url: RSS feed URL
            post_url: Base URL for post pages (queried with ?p=<guid>)
        """
        self.timeout = timeout
        self.time_zone = time_zone
        self.rss_url = rss_url
        self.post_url = post_url

    def fetch_rss_post(self, guid: str) -> Tuple[List[Tag], date]:
        """
        Fetch a post's paragraphs from the RSS feed.

        Args:
            guid: Numeric post id contained in the item's <guid>

        Returns:
            Tuple of (paragraph elements, publication date)

        Raises:
            PostNotFound: If no feed item matches guid
            requests.RequestException: If all retry attempts fail
        """
        logger.info(f"Fetching post {guid} from RSS feed")
        feed = BeautifulSoup(fetch_text(self.rss_url, self.timeout), 'xml')

        for item in feed.find_all('item'):
            guid_elem = item.find('guid')
            content_elem = item.find('content:encoded')
            pub_date_elem = item.find('pubDate')

            if not (guid_elem and content_elem and pub_date_elem):
                continue
            if guid not in guid_elem.get_text():
                continue

            anchor = self._publication_date(pub_date_elem.get_text(strip=True))
            content = BeautifulSoup(content_elem.get_text(), 'html.parser')
            paragraphs = content.find_all('p')

            logger.info(
                f"Found post {guid} published {anchor.isoformat()} "
                f"with {len(paragraphs)} paragraphs"
            )
            return paragraphs, anchor

        raise PostNotFound(f"Post {guid} not found in RSS feed")

    def fetch_http_post(self, guid: str) -> List[Tag]:
        """
        Fetch a post's paragraphs from its web page.

        Pages carry no usable publication date, so the caller supplies the anchor.

        Raises:
            PostNotFound: If the page has no body paragraphs for the post
            requests.RequestException: If all retry attempts fail
        """
        logger.info(f"Fetching post {guid} from web page")
        html = fetch_text(self.post_url, self.timeout, params={'p': guid})
        page = BeautifulSoup(html, 'html.parser')

        paragraphs = page.select(f"#post-{guid} > div > p")
        if not paragraphs:
            raise PostNotFound(f"Post {guid} has no paragraphs")

        logger.info(f"Found {len(paragraphs)} paragraphs in post {guid}")
        return paragraphs

    def _publication_date(self, pub_date: str) -> date:
        """Convert an RFC 822 pubDate into a civil date in the configured zone."""
        published = parsedate_to_datetime(pub_date)
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        return published.astimezone(ZoneInfo(self.time_zone)).date()
