# =============================================================================
# core/workspace.py  —  Workspace Client Interface & Mock Data
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Defines the interface the fetch tools use to get documents,
#   spreadsheets and files, plus a deterministic in-process implementation.
#
# WHY ONLY A MOCK?
#   Authenticating against Google and performing the network fetch are
#   outside this project.  The tools depend on the WorkspaceClient protocol,
#   not on this mock, so a live client only has to implement the same five
#   methods and be passed to create_server().
#
# RESPONSE SHAPES:
#   The mock returns dicts shaped like the real Docs / Sheets / Drive API
#   responses, so core/extraction.py flattens them the same way it would
#   flatten live data.
#
# IDEMPOTENCY:
#   Every call is a pure read.  Same arguments, same result.
# =============================================================================

import re
from typing import Optional, Protocol, Sequence


class WorkspaceError(Exception):
    """A request the workspace service refused."""


class WorkspaceNotFoundError(WorkspaceError, LookupError):
    """No document, spreadsheet or file with the requested ID."""

    def __init__(self, kind: str, resource_id: str) -> None:
        super().__init__(f"{kind.capitalize()} '{resource_id}' not found.")
        self.kind = kind
        self.resource_id = resource_id


class WorkspaceClient(Protocol):
    def get_document(self, document_id: str, include_tabs_content: bool = False) -> dict: ...

    def get_spreadsheet(
        self,
        spreadsheet_id: str,
        ranges: Optional[Sequence[str]] = None,
        include_grid_data: bool = False,
    ) -> dict: ...

    def batch_get_values(
        self,
        spreadsheet_id: str,
        ranges: Sequence[str],
        major_dimension: str = "ROWS",
    ) -> dict: ...

    def export_file(self, file_id: str, mime_type: str) -> dict: ...

    def list_ids(self, kind: str) -> list[str]: ...


# -----------------------------------------------------------------------------
# Mock fixtures
# -----------------------------------------------------------------------------
# Sized to exercise both response modes:
#   - "doc-meeting-notes" is short: full mode returns it untouched
#   - "doc-handbook" is well over CHARACTER_LIMIT: full mode truncates it
#     and summary mode is the only way to read all of it (via chunks)
# -----------------------------------------------------------------------------
def _paragraph(text: str) -> dict:
    return {"paragraph": {"elements": [{"textRun": {"content": text}}]}}


def _table(rows: list[list[str]]) -> dict:
    return {
        "table": {
            "rows": len(rows),
            "columns": len(rows[0]) if rows else 0,
            "tableRows": [
                {"tableCells": [{"content": [_paragraph(cell + "\n")]} for cell in row]}
                for row in rows
            ],
        }
    }


def _handbook_sections() -> list[dict]:
    content = [_paragraph("Engineering Handbook\n")]
    for section in range(1, 41):
        content.append(_paragraph(f"Section {section}: Working Agreements\n"))
        for line in range(1, 9):
            content.append(_paragraph(
                f"{section}.{line} Teams review changes before merging, keep the main "
                f"branch releasable, and write down decisions where others can find them.\n"
            ))
    return content


_MOCK_DOCUMENTS: dict[str, dict] = {
    "doc-meeting-notes": {
        "documentId": "doc-meeting-notes",
        "title": "Weekly Sync - Meeting Notes",
        "body": {
            "content": [
                _paragraph("Weekly Sync\n"),
                _paragraph("Attendees: Dana, Lee, Priya\n"),
                _paragraph("Decisions: ship the importer on Friday.\n"),
                _table([["Owner", "Action"], ["Lee", "Write release notes"], ["Priya", "Update dashboards"]]),
            ]
        },
    },
    "doc-handbook": {
        "documentId": "doc-handbook",
        "title": "Engineering Handbook",
        "body": {"content": _handbook_sections()},
    },
    "doc-roadmap": {
        "documentId": "doc-roadmap",
        "title": "Product Roadmap",
        "body": {"content": [_paragraph("Roadmap overview\n")]},
        "tabs": [
            {
                "tabProperties": {"tabId": "t.0", "title": "Now"},
                "documentTab": {"body": {"content": [_paragraph("Search relevance improvements\n")]}},
            },
            {
                "tabProperties": {"tabId": "t.1", "title": "Later"},
                "documentTab": {"body": {"content": [_paragraph("Offline editing\n")]}},
            },
        ],
    },
}

_MOCK_SHEETS: dict[str, dict] = {
    "sheet-budget": {
        "title": "Team Budget",
        "sheets": {
            "Q1 Budget": [
                ["Category", "Planned", "Actual"],
                ["Travel", "1200", "980"],
                ["Hardware", "5000", "5320"],
                ["Software", "2400", "2400"],
            ],
            "Sheet 1": [
                ["Name", "Role"],
                ["Dana", "Manager"],
                ["Lee", "Engineer"],
            ],
        },
    },
}

_MOCK_FILES: dict[str, dict] = {
    "file-readme": {
        "name": "README.txt",
        "mimeType": "text/plain",
        "text": "Project README\n\nRun `make setup` and then `make test`.\n",
    },
    "file-changelog": {
        "name": "CHANGELOG.md",
        "mimeType": "text/markdown",
        "text": "".join(
            f"## 1.{minor}.0\n- Fixed pagination in list views\n- Faster exports\n\n"
            for minor in range(60, 0, -1)
        ),
    },
}

EXPORTABLE_MIME_TYPES = frozenset({"text/plain", "text/markdown", "text/csv", "text/html", "application/json"})


# -----------------------------------------------------------------------------
# A1 notation — just enough to slice mock grids
# -----------------------------------------------------------------------------
_A1_RE = re.compile(r"([A-Z]+)?([0-9]+)?")


def _column_index(letters: str) -> int:
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index - 1


def _split_a1(a1_range: str) -> tuple[str, Optional[str]]:
    """Split ``'Sheet 1'!A1:B2`` into ("Sheet 1", "A1:B2")."""
    if "!" not in a1_range:
        return a1_range.strip("'"), None
    title, cells = a1_range.rsplit("!", 1)
    return title.strip("'"), cells or None


def _slice_grid(rows: list[list[str]], cells: Optional[str]) -> list[list[str]]:
    if not cells:
        return [list(row) for row in rows]

    start, _, end = cells.upper().partition(":")
    start_match = _A1_RE.fullmatch(start)
    end_match = _A1_RE.fullmatch(end or start)
    if start_match is None or end_match is None:
        raise WorkspaceError(f"Unable to parse range: {cells}")

    col_start = _column_index(start_match.group(1)) if start_match.group(1) else 0
    col_end = _column_index(end_match.group(1)) + 1 if end_match.group(1) else None
    row_start = int(start_match.group(2)) - 1 if start_match.group(2) else 0
    row_end = int(end_match.group(2)) if end_match.group(2) else None

    return [row[col_start:col_end] for row in rows[row_start:row_end]]


# -----------------------------------------------------------------------------
# MockWorkspaceClient
# -----------------------------------------------------------------------------
class MockWorkspaceClient:
    """WorkspaceClient backed by the fixtures above."""

    def __init__(
        self,
        documents: Optional[dict[str, dict]] = None,
        spreadsheets: Optional[dict[str, dict]] = None,
        files: Optional[dict[str, dict]] = None,
    ) -> None:
        self.documents = _MOCK_DOCUMENTS if documents is None else documents
        self.spreadsheets = _MOCK_SHEETS if spreadsheets is None else spreadsheets
        self.files = _MOCK_FILES if files is None else files

    def list_ids(self, kind: str) -> list[str]:
        source = {"document": self.documents, "spreadsheet": self.spreadsheets, "file": self.files}[kind]
        return list(source.keys())

    def get_document(self, document_id: str, include_tabs_content: bool = False) -> dict:
        document = self.documents.get(document_id)
        if document is None:
            raise WorkspaceNotFoundError("document", document_id)
        # The Docs API only populates tabs when asked for them.
        result = {key: value for key, value in document.items() if key != "tabs"}
        if include_tabs_content and "tabs" in document:
            result["tabs"] = document["tabs"]
        return result

    def _sheet_rows(self, spreadsheet_id: str) -> dict[str, list[list[str]]]:
        spreadsheet = self.spreadsheets.get(spreadsheet_id)
        if spreadsheet is None:
            raise WorkspaceNotFoundError("spreadsheet", spreadsheet_id)
        return spreadsheet["sheets"]

    def get_spreadsheet(
        self,
        spreadsheet_id: str,
        ranges: Optional[Sequence[str]] = None,
        include_grid_data: bool = False,
    ) -> dict:
        sheets = self._sheet_rows(spreadsheet_id)
        wanted = {_split_a1(r)[0]: _split_a1(r)[1] for r in ranges} if ranges else None

        result_sheets = []
        for sheet_id, (title, rows) in enumerate(sheets.items()):
            if wanted is not None and title not in wanted:
                continue
            sheet = {
                "properties": {
                    "sheetId": sheet_id,
                    "title": title,
                    "gridProperties": {
                        "rowCount": len(rows),
                        "columnCount": max((len(row) for row in rows), default=0),
                    },
                }
            }
            if include_grid_data:
                grid = _slice_grid(rows, wanted.get(title) if wanted else None)
                sheet["data"] = [{
                    "rowData": [
                        {"values": [{"formattedValue": value} for value in row]}
                        for row in grid
                    ]
                }]
            result_sheets.append(sheet)

        return {
            "spreadsheetId": spreadsheet_id,
            "properties": {"title": self.spreadsheets[spreadsheet_id]["title"]},
            "sheets": result_sheets,
        }

    def batch_get_values(
        self,
        spreadsheet_id: str,
        ranges: Sequence[str],
        major_dimension: str = "ROWS",
    ) -> dict:
        sheets = self._sheet_rows(spreadsheet_id)
        value_ranges = []
        for a1_range in ranges:
            title, cells = _split_a1(a1_range)
            if title not in sheets:
                raise WorkspaceError(f"Unable to parse range: {a1_range}")
            values = _slice_grid(sheets[title], cells)
            if major_dimension == "COLUMNS":
                values = [list(column) for column in zip(*values)]
            value_ranges.append({"range": a1_range, "majorDimension": major_dimension, "values": values})
        return {"spreadsheetId": spreadsheet_id, "valueRanges": value_ranges}

    def export_file(self, file_id: str, mime_type: str) -> dict:
        if mime_type not in EXPORTABLE_MIME_TYPES:
            raise WorkspaceError(
                f"Export to {mime_type} is not supported. Use one of: {', '.join(sorted(EXPORTABLE_MIME_TYPES))}"
            )
        file = self.files.get(file_id)
        if file is None:
            raise WorkspaceNotFoundError("file", file_id)
        return {"fileId": file_id, "name": file["name"], "mimeType": mime_type, "data": file["text"]}
