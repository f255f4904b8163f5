"""
Tests for text preprocessing

Tests tokenization and keyword extraction.
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from search.preprocessing import TextPreprocessor, STOP_WORDS, KEYWORD_STOP_WORDS


class TestTokenize:
    """Tests for TextPreprocessor.tokenize."""

    @pytest.fixture
    def pre(self):
        return TextPreprocessor()

    def test_basic_sentence(self, pre):
        """Test lowercasing, stop word and short token removal."""
        assert pre.tokenize("I love fresh apples and bananas") == [
            "love", "fresh", "apples", "bananas"
        ]

    def test_punctuation_becomes_separator(self, pre):
        """Test punctuation splits words instead of joining them."""
        assert pre.tokenize("fruit,apples!bananas") == ["fruit", "apples", "bananas"]

    def test_underscore_is_word_character(self, pre):
        """Test underscores stay inside a token."""
        assert pre.tokenize("Quarterly_Report") == ["quarterly_report"]

    def test_order_and_duplicates_kept(self, pre):
        """Test tokens keep order and repeats."""
        assert pre.tokenize("apple banana apple") == ["apple", "banana", "apple"]

    def test_empty_input(self, pre):
        """Test empty and whitespace input."""
        assert pre.tokenize("") == []
        assert pre.tokenize("   \n\t ") == []
        assert pre.tokenize(None) == []

    def test_only_stop_words(self, pre):
        """Test text made of stop words only."""
        assert pre.tokenize("the and was were") == []

    def test_min_token_length(self):
        """Test custom minimum token length."""
        pre = TextPreprocessor(min_token_length=5)
        assert pre.tokenize("tiny apple bananas") == ["apple", "bananas"]

    def test_unicode_text(self, pre):
        """Test non-ASCII words are kept."""
        tokens = pre.tokenize("Café naïve résumé")
        assert tokens == ["café", "naïve", "résumé"]


class TestExtractKeywords:
    """Tests for TextPreprocessor.extract_keywords."""

    @pytest.fixture
    def pre(self):
        return TextPreprocessor()

    def test_most_frequent_first(self, pre):
        """Test keywords are ordered by frequency."""
        text = "bananas apples bananas grapes bananas apples"
        assert pre.extract_keywords(text) == ["bananas", "apples", "grapes"]

    def test_ties_keep_first_occurrence(self, pre):
        """Test ties are broken by first occurrence."""
        assert pre.extract_keywords("zebra apple mango") == ["zebra", "apple", "mango"]

    def test_limit(self, pre):
        """Test the keyword limit."""
        text = " ".join(f"word{i:02d}" for i in range(20))
        assert len(pre.extract_keywords(text, limit=8)) == 8

    def test_short_and_generic_words_skipped(self, pre):
        """Test words under four characters and document words are skipped."""
        keywords = pre.extract_keywords("This document text contains the cat revenue")
        assert keywords == ["revenue"]

    def test_empty(self, pre):
        """Test empty text has no keywords."""
        assert pre.extract_keywords("") == []


class TestStopWords:
    """Tests for the stop word sets."""

    def test_keyword_stop_words_extend_stop_words(self):
        """Test keyword stop words include all stop words."""
        assert STOP_WORDS <= KEYWORD_STOP_WORDS
        assert "document" in KEYWORD_STOP_WORDS
        assert "document" not in STOP_WORDS
