"""Extract EventDrafts from feed paragraphs."""
import logging
import re
from datetime import date
from typing import Iterable, Optional, Union

from bs4 import BeautifulSoup, Tag

from processor.exceptions import MissingTitle, NoPatternMatched, ParseError
from processor.models import EventDraft, ParseDiagnostic, ParseReport
from processor.pattern_cascade import PatternCascade

logger = logging.getLogger(__name__)

# A location follows a sentence break, "to", "at", "in" or a colon, and ends
# with a parenthetical neighborhood, e.g. "at the Pier (Brooklyn)".
LOCATION_REGEX = re.compile(
    r"(?:\. | to | at | in |: )"
    r"(?P<location>(?:(?!\. |featuring|\bhost| to | at | in |: ).)*? \([a-z .,'&/-]*?\))",
    re.IGNORECASE
)


def find_location(text: str) -> Optional[str]:
    """Return the location phrase in text, or None."""
    match = LOCATION_REGEX.search(text)
    return match.group('location') if match else None


class FragmentExtractor:
    """Turns one feed paragraph into an EventDraft."""

    def __init__(self, cascade: Optional[PatternCascade] = None):
        self.cascade = cascade or PatternCascade()

    def extract_all(
        self,
        paragraphs: Iterable[Union[Tag, str]],
        anchor: date
    ) -> ParseReport:
        """
        Extract events from every paragraph, skipping ones that fail.

        Args:
            paragraphs: Paragraph elements or their markup
            anchor: Publication date used to resolve relative dates

        Returns:
            ParseReport with the parsed events and a diagnostic per skipped paragraph
        """
        report = ParseReport()

        for paragraph in paragraphs:
            node = self._as_node(paragraph)
            try:
                report.events.append(self.extract(node, anchor))
            except ParseError as e:
                diagnostic = ParseDiagnostic(
                    fragment=node.get_text(),
                    error_type=type(e).__name__,
                    message=str(e),
                    rule=e.rule,
                    matched=e.matched
                )
                logger.warning(
                    f"Skipping paragraph ({diagnostic.error_type}): {diagnostic.message}"
                    + (f" [rule={e.rule}, matched='{e.matched}']" if e.rule else "")
                )
                report.diagnostics.append(diagnostic)

        logger.info(
            f"Extracted {len(report.events)} events "
            f"({report.occurrence_count} occurrences), "
            f"skipped {len(report.diagnostics)} paragraphs"
        )
        return report

    def extract(self, paragraph: Union[Tag, str], anchor: date) -> EventDraft:
        """
        Extract a single event from a paragraph.

        The first bold phrase is the title. The paragraph text, plus the
        first link if any, becomes the description.

        Raises:
            MissingTitle: If the paragraph has no bold title
            NoPatternMatched: If no date/time pattern matches
        """
        node = self._as_node(paragraph)
        text = node.get_text()

        title_node = node.find(['b', 'strong'])
        title = title_node.get_text(strip=True) if title_node else ''
        if not title:
            raise MissingTitle("No title node found")

        occurrences = self.cascade.resolve(text, anchor)
        if not occurrences:
            raise NoPatternMatched(f"No date/time pattern matched for '{title}'")

        description = text
        link = node.find('a', href=True)
        if link:
            description += "\n\n" + link['href']

        return EventDraft(
            title=title,
            description=description,
            location=find_location(text),
            occurrences=occurrences
        )

    def _as_node(self, paragraph: Union[Tag, str]) -> Tag:
        if isinstance(paragraph, Tag):
            return paragraph
        return BeautifulSoup(paragraph, 'html.parser')
