"""Scraper for upcoming UFC events on ufc.com."""
import logging
import time
from typing import List, Optional, Tuple
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup

from processor.models import RawEvent

logger = logging.getLogger(__name__)


class UFCEventsScraper:
    """Scraper for the ufc.com events listing and event pages."""

    BASE_URL = "https://www.ufc.com"
    EVENTS_PATH = "/events"

    # Card sections on an event page, keyed by the RawEvent field they fill
    SECTION_SELECTORS = {
        'main_card': '#main-card',
        'prelims': '#prelims-card',
        'early_prelims': '#early-prelims',
    }

    def __init__(self, timeout: int = 30, max_retries: int = 3):
        """
        Initialize the events scraper.

        Args:
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Attempts per page before giving up (default: 3)
        """
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = requests.Session()

    def fetch_all_events(self) -> List[RawEvent]:
        """
        Fetch every upcoming event with its fight card.

        Returns:
            List of RawEvent objects in listing order

        Raises:
            requests.RequestException: If the events listing cannot be fetched
        """
        listing_url = urljoin(self.BASE_URL, self.EVENTS_PATH)
        logger.info(f"Fetching event listing from {listing_url}")

        listing_html = self._fetch_html(listing_url)
        event_urls = self._parse_event_links(listing_html)
        logger.info(f"Found {len(event_urls)} upcoming events")

        events = []
        for url in event_urls:
            try:
                event = self._parse_event_page(self._fetch_html(url), url)
            except requests.RequestException as e:
                logger.warning(f"Skipping event {url}: {e}")
                continue
            except Exception as e:
                logger.warning(f"Failed to parse event page {url}: {e}")
                continue
            if event:
                events.append(event)

        logger.info(f"Successfully fetched {len(events)} events")
        return events

    def _fetch_html(self, url: str) -> str:
        """
        Fetch a page with retry logic.

        Args:
            url: Absolute page URL

        Returns:
            HTML content as string

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        base_delay = 1  # seconds

        for attempt in range(self.max_retries):
            try:
                logger.debug(
                    f"Fetching {url} (attempt {attempt + 1}/{self.max_retries})"
                )
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.text

            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request to {url} failed (attempt {attempt + 1}/"
                        f"{self.max_retries}): {e}. Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.max_retries} retry attempts failed for "
                        f"{url}. Last error: {e}"
                    )
                    raise

    def _parse_event_links(self, html_content: str) -> List[str]:
        """
        Extract absolute event page URLs from the listing page.

        Args:
            html_content: HTML of the events listing

        Returns:
            De-duplicated list of event URLs in listing order
        """
        soup = BeautifulSoup(html_content, 'html.parser')
        upcoming = soup.select_one('#events-list-upcoming') or soup

        urls = []
        for link in upcoming.select('.c-card-event--result__headline a[href]'):
            url = urljoin(self.BASE_URL, link['href'])
            if url not in urls:
                urls.append(url)
        return urls

    def _parse_event_page(self, html_content: str, url: str) -> Optional[RawEvent]:
        """
        Parse a single event page.

        Args:
            html_content: HTML of the event page
            url: Absolute URL of the event page

        Returns:
            RawEvent object or None if name or date is missing
        """
        soup = BeautifulSoup(html_content, 'html.parser')

        name_elem = soup.select_one('.field--name-node-title h1')
        date_elem = soup.select_one('.c-hero__headline-suffix[data-timestamp]')
        venue_elem = soup.select_one('.field--name-venue')

        if not name_elem or not date_elem:
            logger.warning(f"Event page {url} is missing a name or date")
            return None

        sections = {}
        times = {}
        claimed = set()
        for field_name, selector in self.SECTION_SELECTORS.items():
            section = soup.select_one(selector)
            if section is None:
                sections[field_name] = ()
                times[field_name] = None
                continue
            fights = section.select('.c-listing-fight')
            claimed.update(id(fight) for fight in fights)
            sections[field_name] = tuple(
                bout for bout in map(self._format_bout, fights) if bout
            )
            times[field_name] = self._section_time(section)

        # Bouts outside any named section (e.g. single-card events)
        unclaimed = [
            fight for fight in soup.select('.c-listing-fight')
            if id(fight) not in claimed
        ]
        fight_card = tuple(
            bout for bout in map(self._format_bout, unclaimed) if bout
        )

        return RawEvent(
            name=name_elem.get_text(' ', strip=True),
            date=date_elem['data-timestamp'].strip(),
            location=venue_elem.get_text(' ', strip=True) if venue_elem else '',
            url=url,
            fight_card=fight_card,
            main_card=sections['main_card'],
            prelims=sections['prelims'],
            early_prelims=sections['early_prelims'],
            prelims_time=times['prelims'],
            early_prelims_time=times['early_prelims']
        )

    def _section_time(self, section) -> Optional[str]:
        time_elem = section.select_one(
            '.c-event-fight-card-broadcaster__time[data-timestamp]'
        )
        if time_elem is None:
            return None
        return time_elem['data-timestamp'].strip() or None

    def _format_bout(self, fight) -> Optional[str]:
        """
        Render a bout as "Weight Class: Red vs Blue".

        Args:
            fight: BeautifulSoup element for one bout

        Returns:
            Bout description or None if a corner is missing
        """
        red, blue = self._corner_names(fight)
        if not red or not blue:
            return None

        weight_elem = fight.select_one('.c-listing-fight__class-text')
        weight_class = weight_elem.get_text(' ', strip=True) if weight_elem else ''
        if weight_class:
            return f"{weight_class}: {red} vs {blue}"
        return f"{red} vs {blue}"

    def _corner_names(self, fight) -> Tuple[str, str]:
        red = fight.select_one('.c-listing-fight__corner-name--red')
        blue = fight.select_one('.c-listing-fight__corner-name--blue')
        return (
            red.get_text(' ', strip=True) if red else '',
            blue.get_text(' ', strip=True) if blue else ''
        )
