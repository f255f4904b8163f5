"""
Text preprocessing: tokenization and keyword extraction.

Usage:
    from search.preprocessing import TextPreprocessor

    pre = TextPreprocessor()
    pre.tokenize("I love fresh apples!")   # ['love', 'fresh', 'apples']
    pre.extract_keywords(text)             # up to 8 most frequent terms
"""

import re
from collections import Counter
from typing import List, Optional, Set

# Common English function words dropped before vectorization
STOP_WORDS: Set[str] = {
    'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'this', 'that', 'these', 'those', 'a', 'an', 'is', 'are', 'was', 'were', 'be',
    'been', 'being', 'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would',
    'could', 'should', 'may', 'might', 'must', 'can', 'shall', 'from', 'as', 'it',
    'he', 'she', 'they', 'we', 'you', 'me', 'him', 'her', 'us', 'them', 'my', 'your',
    'his', 'its', 'our', 'their', 'i', 'am', 'not', 'no', 'yes', 'if', 'when', 'where',
    'what', 'who', 'how', 'why', 'which', 'all', 'any', 'some', 'many', 'most', 'few',
}

# Keywords additionally skip words that describe documents in general
KEYWORD_STOP_WORDS: Set[str] = STOP_WORDS | {
    'text', 'document', 'file', 'content', 'contains', 'includes',
}


class TextPreprocessor:
    """Lowercase, strip punctuation, split, and filter short and stop words."""

    NON_WORD_PATTERN = re.compile(r'[^\w\s]')
    WHITESPACE_PATTERN = re.compile(r'\s+')

    def __init__(
        self,
        min_token_length: int = 3,
        stop_words: Optional[Set[str]] = None,
        min_keyword_length: int = 4,
        keyword_stop_words: Optional[Set[str]] = None,
    ):
        self.min_token_length = min_token_length
        self.stop_words = STOP_WORDS if stop_words is None else stop_words
        self.min_keyword_length = min_keyword_length
        self.keyword_stop_words = (
            KEYWORD_STOP_WORDS if keyword_stop_words is None else keyword_stop_words
        )

    def _words(self, text: str) -> List[str]:
        if not text:
            return []
        cleaned = self.NON_WORD_PATTERN.sub(' ', text.lower())
        return [w for w in self.WHITESPACE_PATTERN.split(cleaned) if w]

    def tokenize(self, text: str) -> List[str]:
        """
        Split text into ordered search tokens.

        Tokens shorter than min_token_length and stop words are dropped.
        Empty input yields an empty list.
        """
        return [
            word for word in self._words(text)
            if len(word) >= self.min_token_length and word not in self.stop_words
        ]

    def extract_keywords(self, text: str, limit: int = 8) -> List[str]:
        """
        Most frequent distinct words of a text, most frequent first.

        Ties keep first-occurrence order.
        """
        words = [
            word for word in self._words(text)
            if len(word) >= self.min_keyword_length and word not in self.keyword_stop_words
        ]
        return [word for word, _ in Counter(words).most_common(limit)]
