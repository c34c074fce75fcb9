from core.extraction import (
    extract_document_text,
    extract_spreadsheet_text,
    extract_value_ranges_text,
)
from core.workspace import MockWorkspaceClient


def _para(text: str) -> dict:
    return {"paragraph": {"elements": [{"textRun": {"content": text}}]}}


def test_document_paragraphs_are_concatenated() -> None:
    document = {"body": {"content": [{"sectionBreak": {}}, _para("Hello, "), _para("World!\n")]}}
    assert extract_document_text(document) == "Hello, World!\n"


def test_document_tables_become_tab_separated_rows() -> None:
    document = {
        "body": {
            "content": [
                {
                    "table": {
                        "tableRows": [
                            {"tableCells": [{"content": [_para("a\n")]}, {"content": [_para("b\n")]}]},
                            {"tableCells": [{"content": [_para("c\n")]}, {"content": [_para("d\n")]}]},
                        ]
                    }
                }
            ]
        }
    }
    assert extract_document_text(document) == "a\tb\nc\td\n"


def test_document_tabs_are_titled() -> None:
    document = MockWorkspaceClient().get_document("doc-roadmap", include_tabs_content=True)
    assert extract_document_text(document) == "## Now\nSearch relevance improvements\n## Later\nOffline editing\n"


def test_document_without_body_is_empty() -> None:
    assert extract_document_text({}) == ""


def test_spreadsheet_grid_text() -> None:
    spreadsheet = MockWorkspaceClient().get_spreadsheet(
        "sheet-budget", ranges=["Sheet 1"], include_grid_data=True
    )
    assert extract_spreadsheet_text(spreadsheet) == "## Sheet 1\nName\tRole\nDana\tManager\nLee\tEngineer\n"


def test_spreadsheet_without_grid_lists_titles_only() -> None:
    spreadsheet = MockWorkspaceClient().get_spreadsheet("sheet-budget")
    assert extract_spreadsheet_text(spreadsheet) == "## Q1 Budget\n## Sheet 1\n"


def test_value_ranges_text() -> None:
    value_ranges = [{"range": "Sheet1!A1:B2", "values": [["x", 1], ["y", 2]]}]
    assert extract_value_ranges_text(value_ranges) == "## Sheet1!A1:B2\nx\t1\ny\t2\n"
