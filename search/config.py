"""
Search Configuration

Every tuned constant of the search engine lives in SearchConfig:
vector dimension, term weight multipliers, keyword evidence increments,
semantic cut-off, per-type acceptance thresholds and the hybrid blend.

The defaults were tuned by hand against a small set of example documents.
They are a starting point, not a derivation.

Usage:
    from search.config import SearchConfig, load_search_config

    config = SearchConfig(max_results=20)
    config = load_search_config("config/search_config.yaml")
"""

from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from .models import SearchType


@dataclass
class SearchConfig:
    """Tunable parameters for vectorization and scoring."""

    # Vectorization
    dimension: int = 100
    min_token_length: int = 3
    long_term_length: int = 6
    long_term_multiplier: float = 1.2
    process_suffixes: Tuple[str, ...] = ("ing", "tion")
    process_suffix_multiplier: float = 1.1
    concept_multiplier: float = 1.5

    # Semantic signal
    min_semantic_score: float = 0.18

    # Acceptance thresholds (score must be strictly greater)
    semantic_threshold: float = 0.15
    hybrid_threshold: float = 0.10
    keyword_threshold: float = 0.10

    # Hybrid blend
    semantic_weight: float = 0.7
    keyword_weight: float = 0.3

    # Keyword evidence, summed before capping
    filename_match_score: float = 0.3
    keyword_match_score: float = 0.15
    sentence_match_score: float = 0.2
    keyword_score_cap: float = 1.0

    # Result shaping
    max_matched_sections: int = 3
    max_results: int = 10

    # Keyword extraction at ingestion
    max_keywords: int = 8
    min_keyword_length: int = 4

    # Pipeline behaviour
    refresh_on_upload: bool = True

    def threshold_for(self, search_type: SearchType) -> float:
        """Acceptance threshold for a result of the given type."""
        if search_type is SearchType.SEMANTIC:
            return self.semantic_threshold
        if search_type is SearchType.HYBRID:
            return self.hybrid_threshold
        if search_type is SearchType.KEYWORD:
            return self.keyword_threshold
        raise ValueError(f"Unknown search type: {search_type!r}")

    def validate(self) -> 'SearchConfig':
        """
        Check value ranges.

        Raises:
            ValueError: if any parameter is out of range
        """
        if self.dimension <= 0:
            raise ValueError(f"dimension must be positive, got {self.dimension}")
        if self.min_token_length < 1:
            raise ValueError("min_token_length must be at least 1")
        if self.max_results < 1:
            raise ValueError("max_results must be at least 1")
        if self.max_matched_sections < 0 or self.max_keywords < 0:
            raise ValueError("section and keyword limits cannot be negative")

        unit_interval = (
            'min_semantic_score', 'semantic_threshold', 'hybrid_threshold',
            'keyword_threshold', 'semantic_weight', 'keyword_weight',
        )
        for name in unit_interval:
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")

        for name in ('long_term_multiplier', 'process_suffix_multiplier', 'concept_multiplier'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain dictionary (YAML/JSON friendly)."""
        data = asdict(self)
        data['process_suffixes'] = list(self.process_suffixes)
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'SearchConfig':
        """
        Build a config from a mapping, keeping defaults for missing keys.

        Raises:
            ValueError: on keys that are not SearchConfig fields
        """
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown search config keys: {', '.join(unknown)}")

        if 'process_suffixes' in data:
            data['process_suffixes'] = tuple(data['process_suffixes'])

        return cls(**data).validate()


def load_search_config(config_path: Union[str, Path, None] = None) -> SearchConfig:
    """
    Load a SearchConfig from a YAML file.

    The file may hold the parameters at top level or under a ``search:`` key.

    Args:
        config_path: Path to config YAML (uses config/search_config.yaml if None)

    Returns:
        Validated SearchConfig
    """
    import yaml

    if config_path is None:
        config_path = Path(__file__).parent.parent / "config" / "search_config.yaml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return SearchConfig.from_dict(config.get("search", config))
