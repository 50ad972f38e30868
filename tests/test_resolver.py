"""
Tests for item name matching.
"""

from __future__ import annotations

import pytest

from delve.engine.resolver import matches_name


class TestMatchesName:
    """Tests for matches_name, rule by rule."""

    def test_exact_singular(self):
        """The exact name matches, ignoring case."""
        assert matches_name("Gold Coin", "gold coin")
        assert matches_name("Gold Coin", "GOLD COIN", "Gold Coins")

    def test_exact_plural(self):
        """The exact plural matches generic items."""
        assert matches_name("Gold Coin", "gold coins", "Gold Coins")

    def test_search_inside_plural(self):
        """A search contained in the plural matches only when there is a plural."""
        assert matches_name("Gold Coin", "coins", "Gold Coins")
        assert not matches_name("Gold Coin", "coins")

    def test_plural_inside_search(self):
        """A search containing the whole plural matches generic items."""
        assert matches_name("Gold Coin", "shiny gold coins", "Gold Coins")
        assert not matches_name("Gold Coin", "shiny gold coins")

    def test_name_contains_search(self):
        """Any substring of the name matches."""
        assert matches_name("Rusty Key", "key")
        assert matches_name("Rusty Key", "sty k")

    def test_search_containing_name_not_matched_for_unique_items(self):
        """Without a plural, extra words around the name do not match."""
        assert not matches_name("Rusty Key", "big rusty key")
        assert not matches_name("Rusty Key", "rusty key ring")

    @pytest.mark.parametrize(
        "search, expected",
        [
            ("gol co", True),
            ("coin gold", True),
            ("g c", True),
            ("golds", False),
            ("gold silver", False),
        ],
    )
    def test_word_prefixes(self, search, expected):
        """Every search word must begin some word of the name, in any order."""
        assert matches_name("Gold Coin", search) is expected

    def test_no_match(self):
        """Unrelated names do not match."""
        assert not matches_name("Rusty Lantern", "coins", None)
