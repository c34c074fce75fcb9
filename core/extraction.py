# =============================================================================
# core/extraction.py  —  Flatten API Responses into Plain Text
# =============================================================================
#
# The cache stores two things per resource: the raw API response and a
# flattened text projection.  Chunk URIs slice the projection, so it has to
# be deterministic: the same response always flattens to the same string.
#
# Input shapes follow the Google APIs:
#   Docs:   document.body.content[] → paragraph.elements[].textRun.content
#           (tables nest more content[] inside tableRows[].tableCells[])
#   Sheets: spreadsheet.sheets[].data[].rowData[].values[].formattedValue
#   Values: valueRanges[] → {range, values: [[...], ...]}
# =============================================================================

from typing import Any, Iterable


def _structural_text(content: Iterable[dict]) -> list[str]:
    parts: list[str] = []
    for element in content or []:
        paragraph = element.get("paragraph")
        if paragraph:
            for run in paragraph.get("elements", []):
                text_run = run.get("textRun")
                if text_run and text_run.get("content"):
                    parts.append(text_run["content"])
            continue

        table = element.get("table")
        if table:
            for row in table.get("tableRows", []):
                cells = [
                    "".join(_structural_text(cell.get("content", []))).strip()
                    for cell in row.get("tableCells", [])
                ]
                parts.append("\t".join(cells) + "\n")
    return parts


def extract_document_text(document: dict) -> str:
    """Plain text of a Docs API document, including every tab if present."""
    tabs = document.get("tabs")
    if tabs:
        parts: list[str] = []
        for tab in tabs:
            title = tab.get("tabProperties", {}).get("title")
            body = tab.get("documentTab", {}).get("body", {})
            if title:
                parts.append(f"## {title}\n")
            parts.extend(_structural_text(body.get("content", [])))
        return "".join(parts)

    return "".join(_structural_text(document.get("body", {}).get("content", [])))


def _cell_value(cell: dict) -> str:
    if "formattedValue" in cell:
        return str(cell["formattedValue"])
    value = cell.get("effectiveValue") or {}
    for key in ("stringValue", "numberValue", "boolValue"):
        if key in value:
            return str(value[key])
    return ""


def _rows_text(rows: Iterable[Iterable[Any]]) -> str:
    return "".join("\t".join(str(v) for v in row) + "\n" for row in rows)


def extract_spreadsheet_text(spreadsheet: dict) -> str:
    """One ``## {title}`` section per sheet, grid rows tab-separated.

    Sheets fetched without grid data contribute their heading only.
    """
    parts: list[str] = []
    for sheet in spreadsheet.get("sheets", []):
        title = sheet.get("properties", {}).get("title", "Untitled")
        parts.append(f"## {title}\n")
        for grid in sheet.get("data", []):
            rows = (
                [_cell_value(cell) for cell in row.get("values", [])]
                for row in grid.get("rowData", [])
            )
            parts.append(_rows_text(rows))
    return "".join(parts)


def extract_value_ranges_text(value_ranges: Iterable[dict]) -> str:
    parts: list[str] = []
    for value_range in value_ranges:
        parts.append(f"## {value_range.get('range', '')}\n")
        parts.append(_rows_text(value_range.get("values", [])))
    return "".join(parts)
