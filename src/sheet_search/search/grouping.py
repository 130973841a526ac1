"""Group ranked results by spreadsheet."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sheet_search.search.engine import SearchResult
from sheet_search.sheets.models import Sheet, SheetSource

UNKNOWN_SPREADSHEET = "Unknown Spreadsheet"


@dataclass
class ResultGroup:
    """Results from one spreadsheet, in rank order.

    ``sheet`` is None when the spreadsheet was removed after the results
    were computed.
    """

    spreadsheet_id: str
    sheet: Sheet | None
    results: list[SearchResult] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.sheet.name if self.sheet is not None else UNKNOWN_SPREADSHEET

    @property
    def source(self) -> SheetSource:
        return self.sheet.source if self.sheet is not None else SheetSource.UPLOAD

    @property
    def original_url(self) -> str | None:
        return self.sheet.original_url if self.sheet is not None else None

    @property
    def match_label(self) -> str:
        count = len(self.results)
        return f"{count} match{'es' if count != 1 else ''}"


def group_results(
    results: Sequence[SearchResult],
    sheets: Iterable[Sheet],
) -> dict[str, ResultGroup]:
    """Group results by spreadsheet id.

    Groups appear in order of their best-ranked result and keep the rank
    order of their members. Sheet details come from the live collection.
    """
    by_id = {sheet.id: sheet for sheet in sheets}
    groups: dict[str, ResultGroup] = {}
    for result in results:
        group = groups.get(result.spreadsheet_id)
        if group is None:
            group = ResultGroup(
                spreadsheet_id=result.spreadsheet_id,
                sheet=by_id.get(result.spreadsheet_id),
            )
            groups[result.spreadsheet_id] = group
        group.results.append(result)
    return groups
