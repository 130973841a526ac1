"""Fuzzy index over searchable records.

Scoring uses rapidfuzz: the query is aligned against the best matching
window of each record's searchable text and the normalized Indel
similarity of that window becomes a distance in [0, 1], where 0 is a
perfect (case-insensitive substring) match.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from rapidfuzz import fuzz

from sheet_search.config.schema import SearchSettings
from sheet_search.exceptions import IndexBuildError
from sheet_search.search.records import FlattenOptions, SearchableRecord, flatten_sheets
from sheet_search.sheets.models import Sheet
from sheet_search.utils.logging import get_logger, log_with_context

logger = get_logger(__name__)

# Slack for float noise when comparing distances against the threshold
_EPSILON = 1e-9


@dataclass(frozen=True)
class IndexOptions:
    """Matching options.

    Attributes:
        threshold: Maximum accepted distance (0 = exact, 1 = anything).
        find_all_matches: Report every exact occurrence, not only the first.

    Hits score the same wherever they occur in the text.
    """

    threshold: float = 0.4
    find_all_matches: bool = True


@dataclass
class IndexHit:
    """A record matched by a query."""

    record: SearchableRecord
    distance: float  # 0 = perfect, 1 = worst
    ref_index: int  # position in the index, used as tie-break
    matches: list[tuple[int, int]] = field(default_factory=list)


class FuzzyIndex:
    """Immutable fuzzy index over a fixed record set.

    Rebuild with :meth:`build` whenever sheets or index settings change;
    there is no incremental update.
    """

    def __init__(
        self,
        records: Sequence[SearchableRecord],
        options: IndexOptions | None = None,
    ) -> None:
        self._records = list(records)
        self.options = options or IndexOptions()
        self._texts = [r.searchable_text.lower() for r in self._records]

    @classmethod
    def build(cls, sheets: Sequence[Sheet], settings: SearchSettings) -> "FuzzyIndex":
        """Flatten all sheets and index the resulting records.

        Raises:
            IndexBuildError: If flattening or index construction fails.
        """
        try:
            records = flatten_sheets(
                sheets,
                FlattenOptions(
                    include_tags=settings.search_in_tags,
                    include_metadata=settings.search_in_metadata,
                ),
            )
            index = cls(records, IndexOptions(threshold=settings.fuzzy_threshold))
        except Exception as e:
            raise IndexBuildError(f"Failed to build index: {e}") from e

        log_with_context(
            logger,
            logging.DEBUG,
            "Built search index",
            sheet_count=len(sheets),
            record_count=len(records),
            threshold=settings.fuzzy_threshold,
        )
        return index

    @property
    def records(self) -> list[SearchableRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def search(self, query: str) -> list[IndexHit]:
        """Find all records within the threshold, best first.

        Ties keep index order (sheet order, then row order).
        """
        pattern = query.strip().lower()
        if not pattern:
            return []

        hits: list[IndexHit] = []
        for ref_index, text in enumerate(self._texts):
            scored = self._score(pattern, text)
            if scored is None:
                continue
            distance, matches = scored
            hits.append(
                IndexHit(
                    record=self._records[ref_index],
                    distance=distance,
                    ref_index=ref_index,
                    matches=matches,
                )
            )

        hits.sort(key=lambda h: (h.distance, h.ref_index))
        return hits

    def _score(
        self,
        pattern: str,
        text: str,
    ) -> tuple[float, list[tuple[int, int]]] | None:
        """Distance of the best alignment of ``pattern`` in ``text``.

        Both arguments are already lower-cased.
        """
        if not text:
            return None

        threshold = self.options.threshold
        cutoff = round((1.0 - threshold) * 100.0, 6)

        if len(pattern) <= len(text):
            alignment = fuzz.partial_ratio_alignment(pattern, text, score_cutoff=cutoff)
            if alignment is None:
                return None
            similarity = alignment.score
            span = (alignment.dest_start, alignment.dest_end)
        else:
            # A query longer than the text is compared against all of it
            similarity = fuzz.ratio(pattern, text)
            if similarity < cutoff:
                return None
            span = (0, len(text))

        distance = 1.0 - similarity / 100.0
        distance = min(max(distance, 0.0), 1.0)
        if distance > threshold + _EPSILON:
            return None

        return distance, self._collect_matches(pattern, text, span)

    def _collect_matches(
        self,
        pattern: str,
        text: str,
        best_span: tuple[int, int],
    ) -> list[tuple[int, int]]:
        """Exact occurrences of the pattern, or the best fuzzy span."""
        matches: list[tuple[int, int]] = []
        start = text.find(pattern)
        while start != -1:
            matches.append((start, start + len(pattern)))
            if not self.options.find_all_matches:
                break
            start = text.find(pattern, start + len(pattern))
        return matches or [best_span]
