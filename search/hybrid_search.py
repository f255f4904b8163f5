"""
Hybrid Search for local documents

Scores every stored document against a query with two signals:

- Semantic: cosine similarity between the query vector and the document
  vector, ignored below a minimum similarity.
- Keyword: substring evidence from the filename, the document keywords
  and each sentence of the text, summed before capping.

Documents with both signals blend them (hybrid); otherwise the single
available signal is used. Each result type has its own acceptance
threshold. Results are capped and sorted by score, ties kept in
insertion order.

Usage:
    from search.hybrid_search import HybridSearcher

    searcher = HybridSearcher()
    results = searcher.search("fruit", store.all())

    for result in results:
        print(f"{result.score:.2f} [{result.search_type.value}] {result.filename}")
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .config import SearchConfig
from .embeddings import VectorEncoder, cosine_similarity
from .models import Document, MatchedSection, SearchResult, SearchType

logger = logging.getLogger(__name__)


class HybridSearcher:
    """
    Stateless scoring engine combining vector similarity and keyword evidence.

    Score blend for documents with both signals:
        score = semantic_weight * semantic + keyword_weight * keyword
    """

    SENTENCE_SPLIT = re.compile(r'[.!?]+')

    def __init__(
        self,
        config: Optional[SearchConfig] = None,
        encoder: Optional[VectorEncoder] = None,
    ):
        """
        Initialize hybrid searcher.

        Args:
            config: Thresholds, weights and result limits
            encoder: Encoder used when no query vector is supplied
        """
        self.config = config or SearchConfig()
        self._encoder = encoder

    @property
    def encoder(self) -> VectorEncoder:
        """Lazy create the encoder."""
        if self._encoder is None:
            self._encoder = VectorEncoder(self.config)
        return self._encoder

    def search(
        self,
        query: str,
        documents: Iterable[Document],
        query_vector: Optional[np.ndarray] = None,
        limit: Optional[int] = None,
    ) -> List[SearchResult]:
        """
        Rank documents for a query.

        Args:
            query: Raw query string
            documents: Candidates in insertion order
            query_vector: Precomputed query embedding (computed if None)
            limit: Maximum results (config.max_results if None)

        Returns:
            SearchResult list sorted by score descending
        """
        needle = (query or '').strip().lower()
        if not needle:
            return []

        if query_vector is None:
            query_vector = self.encoder.embed(query)

        results = []
        for document in documents:
            if not document.searchable:
                continue
            result = self.score_document(needle, query_vector, document)
            if result is not None:
                results.append(result)

        # sort is stable, so equal scores keep insertion order
        results.sort(key=lambda r: r.score, reverse=True)
        limit = self.config.max_results if limit is None else limit
        ranked = results[:limit]

        logger.info(
            f"Search '{query[:50]}': {len(ranked)} results "
            f"(semantic={self._count(ranked, SearchType.SEMANTIC)}, "
            f"keyword={self._count(ranked, SearchType.KEYWORD)}, "
            f"hybrid={self._count(ranked, SearchType.HYBRID)})"
        )
        return ranked

    def score_document(
        self,
        needle: str,
        query_vector: np.ndarray,
        document: Document,
    ) -> Optional[SearchResult]:
        """
        Score one document; None when it does not qualify.

        Args:
            needle: Lowercased, trimmed query
            query_vector: Query embedding
            document: Candidate document
        """
        cfg = self.config

        semantic_score = cosine_similarity(query_vector, document.vector)
        effective = semantic_score if semantic_score > cfg.min_semantic_score else 0.0

        keyword_score, sections = self._keyword_evidence(needle, document)

        classified = self._classify(effective, keyword_score)
        if classified is None:
            return None

        score, search_type = classified
        threshold = cfg.threshold_for(search_type)

        logger.debug(
            f"'{document.filename}': semantic={semantic_score:.3f} "
            f"(effective={effective:.3f}), keyword={keyword_score:.3f}, "
            f"final={score:.3f}, type={search_type.value}, threshold={threshold}"
        )

        if score <= threshold:
            return None

        return SearchResult(
            document_id=document.id,
            filename=document.filename,
            score=min(score, 1.0),
            search_type=search_type,
            matched_sections=sections,
            semantic_score=semantic_score,
            keyword_score=keyword_score,
        )

    def _classify(
        self,
        semantic: float,
        keyword: float,
    ) -> Optional[Tuple[float, SearchType]]:
        cfg = self.config
        if semantic > 0 and keyword > 0:
            return cfg.semantic_weight * semantic + cfg.keyword_weight * keyword, SearchType.HYBRID
        if semantic > 0:
            return semantic, SearchType.SEMANTIC
        if keyword > 0:
            return min(keyword, cfg.keyword_score_cap), SearchType.KEYWORD
        return None

    def _keyword_evidence(
        self,
        needle: str,
        document: Document,
    ) -> Tuple[float, List[MatchedSection]]:
        """
        Sum substring evidence without capping.

        Returns:
            (keyword score, matched sections limited to max_matched_sections)
        """
        cfg = self.config
        score = 0.0

        if needle in document.filename.lower():
            score += cfg.filename_match_score

        for keyword in document.keywords:
            kw = keyword.lower()
            if needle in kw or kw in needle:
                score += cfg.keyword_match_score

        sentences = self.split_sentences(document.extracted_text)
        sections: List[MatchedSection] = []
        for index, sentence in enumerate(sentences):
            if needle not in sentence.lower():
                continue
            score += cfg.sentence_match_score
            if len(sections) < cfg.max_matched_sections:
                sections.append(MatchedSection(
                    text=sentence,
                    context=self._context(sentences, index),
                    highlights=self.find_highlights(sentence, needle),
                ))

        return score, sections

    @classmethod
    def split_sentences(cls, text: str) -> List[str]:
        """Split on runs of . ! ? and drop empty pieces (trimmed)."""
        if not text:
            return []
        return [s.strip() for s in cls.SENTENCE_SPLIT.split(text) if s.strip()]

    @staticmethod
    def find_highlights(text: str, needle: str) -> List[Tuple[int, int]]:
        """Non-overlapping (start, end) spans of needle inside text."""
        spans = []
        haystack = text.lower()
        start = haystack.find(needle)
        while needle and start != -1:
            spans.append((start, start + len(needle)))
            start = haystack.find(needle, start + len(needle))
        return spans

    @staticmethod
    def _context(sentences: List[str], index: int) -> str:
        window = sentences[max(0, index - 1):index + 2]
        return '. '.join(window)

    @staticmethod
    def _count(results: List[SearchResult], search_type: SearchType) -> int:
        return sum(1 for r in results if r.search_type is search_type)
