"""Configuration for the calendar sync handler, read from the environment."""
import os
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

MODES = ('RSS', 'HTTP', 'LISTING')


class ConfigError(ValueError):
    """Configuration is missing or invalid."""


@dataclass(frozen=True)
class HandlerConfig:
    mode: str
    guid: Optional[str]
    anchor_date: Optional[date]
    listing_url: Optional[str]
    rss_url: str
    post_url: str
    table_name: str
    time_zone: str
    live: bool
    log_level: str
    timeout_seconds: int

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None
    ) -> 'HandlerConfig':
        """
        Build configuration from environment variables.

        A "guid", "anchor_date" or "log_level" in the invocation payload
        overrides the POST_GUID, ANCHOR_DATE or LOG_LEVEL variable.

        Raises:
            ConfigError: If a value is missing or invalid for the mode
        """
        env = os.environ if env is None else env
        payload = payload or {}

        mode = env.get('FEED_MODE', 'RSS').upper()
        if mode not in MODES:
            raise ConfigError(f"Unrecognized FEED_MODE {mode}, should be one of {', '.join(MODES)}")

        guid = payload.get('guid') or env.get('POST_GUID')
        guid = str(guid) if guid is not None else None
        if mode in ('RSS', 'HTTP') and (not guid or not guid.isdigit()):
            raise ConfigError("Invalid GUID, should be number!")

        anchor_text = payload.get('anchor_date') or env.get('ANCHOR_DATE')
        anchor_date = None
        if anchor_text:
            try:
                anchor_date = date.fromisoformat(anchor_text)
            except ValueError as e:
                raise ConfigError(f"Invalid ANCHOR_DATE {anchor_text}: {e}") from e
        if mode == 'HTTP' and anchor_date is None:
            raise ConfigError("Mode HTTP requires ANCHOR_DATE to be set")

        listing_url = env.get('LISTING_URL')
        if mode == 'LISTING' and not listing_url:
            raise ConfigError("Mode LISTING requires LISTING_URL to be set")

        try:
            timeout_seconds = int(env.get('TIMEOUT_SECONDS', '30'))
        except ValueError as e:
            raise ConfigError(f"Invalid TIMEOUT_SECONDS: {e}") from e

        return cls(
            mode=mode,
            guid=guid,
            anchor_date=anchor_date,
            listing_url=listing_url,
            rss_url=env.get('RSS_URL', 'https://theskint.com/rss'),
            post_url=env.get('POST_URL', 'https://theskint.com/'),
            table_name=env.get('TABLE_NAME', 'skint-events'),
            time_zone=env.get('TIME_ZONE', 'America/New_York'),
            live=env.get('LIVE', 'false').lower() == 'true',
            log_level=payload.get('log_level') or env.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=timeout_seconds
        )
