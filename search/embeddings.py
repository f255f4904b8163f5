"""
Local Hashing Embeddings for Semantic Search

Turns text into a fixed-dimension vector without any model download:
tokens are concept-expanded, weighted by term frequency and simple
word-shape heuristics, and folded into D buckets by a 32-bit string hash.

Different terms can land in the same bucket. That collision loss is part
of the design; raise the dimension for more precision.

Features:
- Deterministic vectors (no randomness, no model state)
- Term-frequency table per text for store-level statistics
- Cosine similarity that never raises

Usage:
    from search.embeddings import VectorEncoder

    encoder = VectorEncoder()
    vec = encoder.embed("fresh apples and bananas")
    score = cosine_similarity(vec, encoder.embed("fruit"))
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from .concepts import ConceptExpander, StaticConceptExpander
from .config import SearchConfig
from .preprocessing import TextPreprocessor

logger = logging.getLogger(__name__)

_UINT32 = 0xFFFFFFFF


def hash_term(term: str) -> int:
    """
    Polynomial rolling hash (h = h*31 + code point) as a signed 32-bit int.
    """
    h = 0
    for ch in term:
        h = (h * 31 + ord(ch)) & _UINT32
    if h & 0x80000000:
        h -= 0x100000000
    return h


def bucket_for(term: str, dimension: int) -> int:
    """Vector index of a term."""
    return abs(hash_term(term)) % dimension


def cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Cosine similarity clamped to [0, 1].

    Zero vectors and mismatched shapes score 0.
    """
    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)

    if a.shape != b.shape or a.size == 0:
        return 0.0

    norm1 = np.linalg.norm(a)
    norm2 = np.linalg.norm(b)

    if norm1 == 0 or norm2 == 0:
        return 0.0

    similarity = float(np.dot(a, b) / (norm1 * norm2))
    return max(0.0, min(1.0, similarity))


@dataclass
class EncodedText:
    """Vector and term-frequency table of one text."""
    vector: np.ndarray
    term_frequency: Dict[str, float] = field(default_factory=dict)


class VectorEncoder:
    """
    Generate hashing-based embeddings for semantic search.

    Runs entirely locally. The same text always yields the same vector.
    """

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        expander: Optional[ConceptExpander] = None,
        preprocessor: Optional[TextPreprocessor] = None,
    ):
        """
        Initialize the encoder.

        Args:
            config: Search configuration (dimension and weight multipliers)
            expander: Concept expansion strategy (static table by default)
            preprocessor: Tokenizer used by embed()
        """
        self.config = config or SearchConfig()
        self.expander = expander or StaticConceptExpander()
        self.preprocessor = preprocessor or TextPreprocessor(
            min_token_length=self.config.min_token_length,
            min_keyword_length=self.config.min_keyword_length,
        )

    @property
    def dimension(self) -> int:
        """Get the embedding dimension."""
        return self.config.dimension

    def zero_vector(self) -> np.ndarray:
        return np.zeros(self.dimension, dtype=float)

    def term_weight(self, term: str) -> float:
        """Importance multiplier from the shape of a term."""
        cfg = self.config
        weight = 1.0
        if len(term) > cfg.long_term_length:
            weight *= cfg.long_term_multiplier
        if term.endswith(tuple(cfg.process_suffixes)):
            weight *= cfg.process_suffix_multiplier
        if self.expander.is_concept(term):
            weight *= cfg.concept_multiplier
        return weight

    def encode(self, terms: Sequence[str]) -> EncodedText:
        """
        Encode an expanded term multiset.

        Args:
            terms: Expanded tokens, duplicates included

        Returns:
            EncodedText with an L2-normalized (or zero) vector and the
            term-frequency table
        """
        if not terms:
            return EncodedText(vector=self.zero_vector(), term_frequency={})

        counts = Counter(terms)
        total = len(terms)
        term_frequency = {term: count / total for term, count in counts.items()}

        vector = self.zero_vector()
        for term, tf in term_frequency.items():
            vector[bucket_for(term, self.dimension)] += tf * self.term_weight(term)

        magnitude = np.linalg.norm(vector)
        if magnitude > 0:
            vector = vector / magnitude

        return EncodedText(vector=vector, term_frequency=term_frequency)

    def encode_text(self, text: str) -> EncodedText:
        """Tokenize, expand and encode a raw text."""
        tokens = self.preprocessor.tokenize(text)
        return self.encode(self.expander.expand(tokens))

    def embed(self, text: str) -> np.ndarray:
        """
        Generate embedding for a single text.

        Returns:
            Numpy array of shape (dimension,)
        """
        return self.encode_text(text).vector

    def embed_batch(self, texts: List[str]) -> np.ndarray:
        """
        Generate embeddings for multiple texts.

        Returns:
            Numpy array of shape (n_texts, dimension)
        """
        if not texts:
            return np.zeros((0, self.dimension), dtype=float)
        return np.vstack([self.embed(text) for text in texts])

    def similarity(self, vec1: np.ndarray, vec2: np.ndarray) -> float:
        """Cosine similarity between two vectors, clamped to [0, 1]."""
        return cosine_similarity(vec1, vec2)

    def info(self) -> Dict[str, object]:
        """Describe the encoder."""
        return {
            'name': 'Local hashing embeddings',
            'dimension': self.dimension,
            'concept_expansion': type(self.expander).__name__,
            'description': 'Term-frequency vectors folded by string hash',
        }
