"""Tests for the fuzzy index."""

import pytest

from sheet_search.config.schema import SearchSettings
from sheet_search.exceptions import IndexBuildError
from sheet_search.search.index import FuzzyIndex, IndexOptions
from sheet_search.search.records import SearchableRecord
from sheet_search.sheets.models import Sheet, SheetSource


def make_record(text: str, index: int = 0) -> SearchableRecord:
    return SearchableRecord(
        id=f"s-{index}",
        spreadsheet_id="s",
        spreadsheet_name="S",
        spreadsheet_source=SheetSource.UPLOAD,
        row_index=index,
        data={"Text": text},
        searchable_text=text,
    )


class TestFuzzyIndexBuild:
    """Tests for FuzzyIndex.build."""

    def test_build_from_sheets(self, summit_sheet: Sheet, catalog_sheet: Sheet) -> None:
        """Test every row of every sheet is indexed."""
        index = FuzzyIndex.build([summit_sheet, catalog_sheet], SearchSettings())

        assert len(index) == 5
        assert index.options.threshold == 0.4
        assert index.options.find_all_matches is True

    def test_build_respects_tag_flag(self, catalog_sheet: Sheet) -> None:
        """Test tags leave the searchable text when disabled."""
        with_tags = FuzzyIndex.build([catalog_sheet], SearchSettings())
        without_tags = FuzzyIndex.build([catalog_sheet], SearchSettings(search_in_tags=False))

        assert "featured" in with_tags.records[0].searchable_text
        assert "featured" not in without_tags.records[0].searchable_text

    def test_build_failure_wrapped(self) -> None:
        """Test construction errors surface as IndexBuildError."""
        broken = Sheet(id="b", name="B", headers=["A"], data=[["x"]])
        broken.data = None  # type: ignore[assignment]

        with pytest.raises(IndexBuildError):
            FuzzyIndex.build([broken], SearchSettings())


class TestFuzzyIndexSearch:
    """Tests for FuzzyIndex.search."""

    def test_exact_substring_is_perfect(self) -> None:
        """Test case-insensitive substrings score distance 0."""
        index = FuzzyIndex([make_record("Adobe Summit 2024")])
        hits = index.search("summit")

        assert len(hits) == 1
        assert hits[0].distance == pytest.approx(0.0)
        assert hits[0].matches == [(6, 12)]

    def test_typo_within_threshold(self) -> None:
        """Test a near miss is found with a positive distance."""
        index = FuzzyIndex([make_record("Adobe Summit 2024")], IndexOptions(threshold=0.4))
        hits = index.search("adobee")

        assert len(hits) == 1
        assert 0.0 < hits[0].distance <= 0.4

    def test_exact_mode_rejects_typo(self) -> None:
        """Test threshold 0 only accepts exact substrings."""
        index = FuzzyIndex([make_record("Adobe Summit 2024")], IndexOptions(threshold=0.0))

        assert index.search("adobee") == []
        assert len(index.search("adobe")) == 1

    def test_unrelated_text_rejected(self) -> None:
        """Test dissimilar text falls outside the threshold."""
        index = FuzzyIndex([make_record("Quarterly Report")])
        assert index.search("zebra") == []

    def test_blank_query(self) -> None:
        """Test blank queries return nothing."""
        index = FuzzyIndex([make_record("anything")])
        assert index.search("   ") == []

    def test_empty_text_skipped(self) -> None:
        """Test records without text never match."""
        index = FuzzyIndex([make_record("")], IndexOptions(threshold=1.0))
        assert index.search("a") == []

    def test_ranked_by_distance_then_position(self) -> None:
        """Test better matches first and ties in index order."""
        index = FuzzyIndex(
            [
                make_record("Adobee Express", 0),
                make_record("Adobe Summit", 1),
                make_record("Adobe Stock", 2),
            ]
        )
        hits = index.search("adobe")

        assert [h.ref_index for h in hits] == [0, 1, 2]
        assert all(h.distance == pytest.approx(0.0) for h in hits)

        hits = index.search("adobe s")
        assert [h.ref_index for h in hits][:2] == [1, 2]

    def test_find_all_matches(self) -> None:
        """Test every exact occurrence is reported."""
        index = FuzzyIndex([make_record("demo and demo")])
        assert index.search("demo")[0].matches == [(0, 4), (9, 13)]

    def test_first_match_only(self) -> None:
        """Test find_all_matches=False stops at the first occurrence."""
        index = FuzzyIndex(
            [make_record("demo and demo")], IndexOptions(find_all_matches=False)
        )
        assert index.search("demo")[0].matches == [(0, 4)]

    def test_location_ignored(self) -> None:
        """Test a hit deep in the text scores like one at the start."""
        index = FuzzyIndex([make_record("adobe"), make_record("x" * 200 + " adobe", 1)])
        hits = index.search("adobe")

        assert [h.distance for h in hits] == pytest.approx([0.0, 0.0])
        assert [h.ref_index for h in hits] == [0, 1]

    def test_query_longer_than_text(self) -> None:
        """Test long queries compare against the whole text."""
        index = FuzzyIndex([make_record("demo")], IndexOptions(threshold=0.4))
        hits = index.search("demos")

        assert len(hits) == 1
        assert hits[0].matches == [(0, 4)]
