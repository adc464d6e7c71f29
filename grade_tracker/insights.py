"""Motivational tip for the teacher dashboard, fetched from an external quotes API."""

import logging
import random
from typing import Dict, Optional

import requests

from grade_tracker.config import QUOTES_API_URL, QUOTES_TIMEOUT

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Could not load tip right now."


class InsightUnavailable(Exception):
    """The quotes service could not supply a tip."""


def fetch_insight(
    url: str = QUOTES_API_URL,
    timeout: float = QUOTES_TIMEOUT,
    session: Optional[requests.Session] = None
) -> Dict[str, Optional[str]]:
    """
    Fetch a random quote.

    Returns:
        Dict with 'text' and 'author'

    Raises:
        InsightUnavailable: Network error, bad payload or empty list
    """
    get = session.get if session is not None else requests.get
    try:
        resp = get(url, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Quote fetch from %s failed: %s", url, e)
        raise InsightUnavailable(UNAVAILABLE_MESSAGE) from e

    if not isinstance(data, list) or not data:
        logger.warning("Quote service at %s returned no quotes", url)
        raise InsightUnavailable(UNAVAILABLE_MESSAGE)

    choice = random.choice(data)
    if not isinstance(choice, dict) or not choice.get('text'):
        raise InsightUnavailable(UNAVAILABLE_MESSAGE)
    return {'text': choice['text'], 'author': choice.get('author')}
