import unittest

from core.cache import ResourceCache
from core.config import CACHE_TTL_MS, CHARACTER_LIMIT, ServerSettings
from core.models import ResourceType, ReturnMode
from core.truncation import TRUNCATION_MARKER
from tools import workspace_tools
from tools.workspace_tools import ServerContext

MEETING_NOTES_TEXT = (
    "Weekly Sync\n"
    "Attendees: Dana, Lee, Priya\n"
    "Decisions: ship the importer on Friday.\n"
    "Owner\tAction\n"
    "Lee\tWrite release notes\n"
    "Priya\tUpdate dashboards\n"
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0

    def __call__(self) -> int:
        return self.now


class WorkspaceToolsTestCase(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.ctx = ServerContext(cache=ResourceCache(clock=self.clock))


class GetDocumentTests(WorkspaceToolsTestCase):
    def test_summary_mode_caches_and_returns_uri(self):
        result = workspace_tools.get_document(self.ctx, "doc-meeting-notes")

        self.assertEqual(result["documentId"], "doc-meeting-notes")
        self.assertEqual(result["title"], "Weekly Sync - Meeting Notes")
        self.assertEqual(result["resourceUri"], "gdrive://docs/doc-meeting-notes/content")
        self.assertEqual(result["textLength"], len(MEETING_NOTES_TEXT))
        self.assertNotIn("text", result)
        self.assertIn("30 minutes", result["hint"])

        entry = self.ctx.cache.get("doc-meeting-notes")
        self.assertEqual(entry.extracted_text, MEETING_NOTES_TEXT)
        self.assertEqual(entry.resource_type, ResourceType.DOCUMENT)
        self.assertEqual(entry.raw_content["title"], "Weekly Sync - Meeting Notes")

    def test_summary_uri_resolves_through_resource_read(self):
        summary = workspace_tools.get_document(self.ctx, "doc-meeting-notes", return_mode="summary")

        full = workspace_tools.resource_read(self.ctx, summary["resourceUri"])
        chunk = workspace_tools.resource_read(self.ctx, "gdrive://docs/doc-meeting-notes/chunk/0-11")

        self.assertEqual(full, {"content": MEETING_NOTES_TEXT})
        self.assertEqual(chunk, {"content": "Weekly Sync"})

    def test_full_mode_short_document_is_not_truncated(self):
        result = workspace_tools.get_document(self.ctx, "doc-meeting-notes", return_mode=ReturnMode.FULL)

        self.assertEqual(result["text"], MEETING_NOTES_TEXT)
        self.assertFalse(result["truncated"])
        self.assertNotIn("originalLength", result)

    def test_full_mode_large_document_is_truncated_with_chunk_hint(self):
        result = workspace_tools.get_document(self.ctx, "doc-handbook", return_mode="full")

        self.assertTrue(result["truncated"])
        self.assertGreater(result["originalLength"], CHARACTER_LIMIT)
        self.assertIn(TRUNCATION_MARKER, result["text"])
        self.assertIn(f"gdrive://docs/doc-handbook/chunk/{CHARACTER_LIMIT}-{result['originalLength']}", result["text"])

        remainder = workspace_tools.resource_read(
            self.ctx, f"gdrive://docs/doc-handbook/chunk/{CHARACTER_LIMIT}-{result['originalLength']}"
        )
        self.assertEqual(len(remainder["content"]), result["originalLength"] - CHARACTER_LIMIT)

    def test_large_document_summary_offers_bounded_chunk(self):
        result = workspace_tools.get_document(self.ctx, "doc-handbook")
        self.assertEqual(result["chunkUriExample"], f"gdrive://docs/doc-handbook/chunk/0-{CHARACTER_LIMIT}")

    def test_tabs_only_included_when_requested(self):
        without_tabs = workspace_tools.get_document(self.ctx, "doc-roadmap", return_mode="full")
        with_tabs = workspace_tools.get_document(
            self.ctx, "doc-roadmap", include_tabs_content=True, return_mode="full"
        )

        self.assertEqual(without_tabs["text"], "Roadmap overview\n")
        self.assertIn("## Later\nOffline editing\n", with_tabs["text"])

    def test_unknown_document_returns_error_and_does_not_cache(self):
        result = workspace_tools.get_document(self.ctx, "missing-doc")

        self.assertEqual(result["error"], "Document 'missing-doc' not found.")
        self.assertIn("doc-meeting-notes", result["available_ids"])
        self.assertIn("hint", result)
        self.assertEqual(len(self.ctx.cache), 0)

    def test_default_mode_comes_from_settings(self):
        ctx = ServerContext(settings=ServerSettings(default_return_mode=ReturnMode.FULL))
        result = workspace_tools.get_document(ctx, "doc-meeting-notes")
        self.assertEqual(result["text"], MEETING_NOTES_TEXT)

    def test_refetch_after_expiry_repopulates_cache(self):
        workspace_tools.get_document(self.ctx, "doc-meeting-notes")
        self.clock.now += CACHE_TTL_MS + 1
        self.assertIn("Cache miss", workspace_tools.resource_read(self.ctx, "gdrive://docs/doc-meeting-notes/content")["error"])

        workspace_tools.get_document(self.ctx, "doc-meeting-notes")
        self.assertEqual(
            workspace_tools.resource_read(self.ctx, "gdrive://docs/doc-meeting-notes/content")["content"],
            MEETING_NOTES_TEXT,
        )


class SpreadsheetToolsTests(WorkspaceToolsTestCase):
    def test_get_spreadsheet_summary(self):
        result = workspace_tools.get_spreadsheet(self.ctx, "sheet-budget")

        self.assertEqual(result["title"], "Team Budget")
        self.assertEqual(
            result["sheets"],
            [
                {"title": "Q1 Budget", "rowCount": 4, "columnCount": 3},
                {"title": "Sheet 1", "rowCount": 3, "columnCount": 2},
            ],
        )
        self.assertEqual(result["resourceUri"], "gdrive://sheets/sheet-budget/values/Q1%20Budget")
        self.assertEqual(self.ctx.cache.get("sheet-budget").resource_type, ResourceType.SPREADSHEET)

    def test_get_spreadsheet_full_with_grid(self):
        result = workspace_tools.get_spreadsheet(
            self.ctx, "sheet-budget", ranges=["Sheet 1"], include_grid_data=True, return_mode="full"
        )
        self.assertEqual(result["text"], "## Sheet 1\nName\tRole\nDana\tManager\nLee\tEngineer\n")
        self.assertFalse(result["truncated"])

    def test_batch_get_values_full(self):
        result = workspace_tools.batch_get_values(
            self.ctx, "sheet-budget", ["Q1 Budget!A1:B2"], return_mode="full"
        )
        self.assertEqual(result["text"], "## Q1 Budget!A1:B2\nCategory\tPlanned\nTravel\t1200\n")

    def test_batch_get_values_columns(self):
        result = workspace_tools.batch_get_values(
            self.ctx, "sheet-budget", ["Q1 Budget!A1:B2"], major_dimension="COLUMNS", return_mode="full"
        )
        self.assertEqual(result["text"], "## Q1 Budget!A1:B2\nCategory\tTravel\nPlanned\t1200\n")

    def test_batch_get_values_summary(self):
        result = workspace_tools.batch_get_values(
            self.ctx, "sheet-budget", ["'Sheet 1'!A1:B10", "Q1 Budget!A2:A4"]
        )
        self.assertEqual(
            result["ranges"],
            [{"range": "'Sheet 1'!A1:B10", "rowCount": 3}, {"range": "Q1 Budget!A2:A4", "rowCount": 3}],
        )
        self.assertTrue(result["resourceUri"].startswith("gdrive://sheets/sheet-budget/values/"))

    def test_batch_get_values_requires_ranges(self):
        result = workspace_tools.batch_get_values(self.ctx, "sheet-budget", [])
        self.assertEqual(result["error"], "At least one range is required")

    def test_batch_get_values_unknown_sheet(self):
        result = workspace_tools.batch_get_values(self.ctx, "sheet-budget", ["Nope!A1"])
        self.assertIn("Unable to parse range", result["error"])
        self.assertIn("hint", result)
        self.assertNotIn("available_ids", result)

    def test_unknown_spreadsheet(self):
        result = workspace_tools.get_spreadsheet(self.ctx, "missing")
        self.assertEqual(result["available_ids"], ["sheet-budget"])


class ExportFileTests(WorkspaceToolsTestCase):
    def test_summary(self):
        result = workspace_tools.export_file(self.ctx, "file-readme", "text/plain")

        self.assertEqual(result["name"], "README.txt")
        self.assertEqual(result["resourceUri"], "gdrive://files/file-readme/content")
        self.assertIn("keyed by ID", result["hint"])
        self.assertEqual(self.ctx.cache.get("file-readme").resource_type, ResourceType.FILE)
        self.assertEqual(
            workspace_tools.resource_read(self.ctx, result["resourceUri"])["content"],
            "Project README\n\nRun `make setup` and then `make test`.\n",
        )

    def test_summary_chunk_example_reads_the_export(self):
        result = workspace_tools.export_file(self.ctx, "file-readme", "text/plain")
        chunk = workspace_tools.resource_read(self.ctx, result["chunkUriExample"])
        self.assertEqual(chunk["content"], "Project README\n\nRun `make setup` and then `make test`.\n")

    def test_full(self):
        result = workspace_tools.export_file(self.ctx, "file-readme", "text/markdown", return_mode="full")
        self.assertTrue(result["text"].startswith("Project README"))
        self.assertFalse(result["truncated"])

    def test_unsupported_mime_type(self):
        result = workspace_tools.export_file(self.ctx, "file-readme", "image/png")
        self.assertIn("not supported", result["error"])
        self.assertEqual(len(self.ctx.cache), 0)

    def test_unknown_file(self):
        result = workspace_tools.export_file(self.ctx, "missing", "text/plain")
        self.assertEqual(result["error"], "File 'missing' not found.")


class CacheToolsTests(WorkspaceToolsTestCase):
    def test_stats_and_cleanup(self):
        workspace_tools.get_document(self.ctx, "doc-meeting-notes")
        self.clock.now += CACHE_TTL_MS + 1
        workspace_tools.export_file(self.ctx, "file-readme", "text/plain")

        stats = workspace_tools.cache_stats(self.ctx)
        self.assertEqual(stats["size"], 2)
        self.assertEqual({e["type"] for e in stats["entries"]}, {"document", "file"})

        self.assertEqual(workspace_tools.cache_cleanup(self.ctx), {"removed": 1, "size": 1})
        self.assertEqual(workspace_tools.cache_cleanup(self.ctx), {"removed": 0, "size": 1})
