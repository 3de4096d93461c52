"""
Store Matcher

Suggests which store a Slack message refers to by fuzzy-matching its text
against the store names.
"""

import re
from typing import Optional, Sequence

from rapidfuzz import fuzz, process

from execution_tracker.models.store import Store

_MENTION = re.compile(r"<@[A-Z0-9]+>")


def clean_slack_text(text: Optional[str]) -> str:
    """Strip user mentions like <@U012ABC>, lowercase and trim."""
    if not text:
        return ""
    return _MENTION.sub("", text).lower().strip()


def best_store_match(text: Optional[str], stores: Sequence[Store], threshold: int = 60) -> Optional[Store]:
    """
    Return the store whose name best matches the message text.

    Args:
        text: Raw Slack message text
        stores: Candidate stores
        threshold: Minimum WRatio score (0-100) for a match

    Returns:
        The best matching store, or None when nothing scores above threshold
    """
    query = clean_slack_text(text)
    if not query or not stores:
        return None

    choices = {store.id: store.name.lower() for store in stores}
    match = process.extractOne(query, choices, scorer=fuzz.WRatio, score_cutoff=threshold)
    if match is None:
        return None

    _, _, store_id = match
    return next(store for store in stores if store.id == store_id)
