"""
Tests for fuzzy store suggestions.
"""

from execution_tracker.models.store import Store
from execution_tracker.services.store_matcher import best_store_match, clean_slack_text

STORES = [
    Store(id="s1", name="Reliance Smart Koramangala", eligible_brands=[]),
    Store(id="s2", name="More Supermarket HSR Layout", eligible_brands=[]),
    Store(id="s3", name="Spencer's Whitefield", eligible_brands=[]),
]


def test_clean_slack_text_strips_mentions():
    assert clean_slack_text("<@U012ABC> Done at <@U999>  More HSR ") == "done at   more hsr"
    assert clean_slack_text(None) == ""


def test_best_match_on_partial_name():
    match = best_store_match("<@U012ABC> reliance smart koramangala endcap done", STORES)
    assert match is not None
    assert match.id == "s1"


def test_best_match_is_case_insensitive():
    match = best_store_match("MORE SUPERMARKET HSR LAYOUT", STORES)
    assert match.id == "s2"


def test_no_match_below_threshold():
    assert best_store_match("xyz", STORES, threshold=90) is None


def test_empty_inputs():
    assert best_store_match("", STORES) is None
    assert best_store_match("koramangala", []) is None
