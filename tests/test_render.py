"""
Tests for subsync/render.py.

User-supplied strings (names, locators, errors) must print literally,
never be read as rich markup.
"""
from subsync import render
from subsync.domain.operation import EntryResult, OperationStatus, SyncSummary


def make_summary(*details, dry_run=False):
    summary = SyncSummary(root="/work/parent", dry_run=dry_run)
    for detail in details:
        summary.add_detail(detail)
    return summary


class TestRenderSyncTable:
    """Tests for render_sync_table."""

    def test_bracketed_name_prints_literally(self, capsys):
        summary = make_summary(EntryResult(
            name="b[a]d",
            locator="git@host:org/b[a]d.git",
            status=OperationStatus.FAILED,
            action="invalid",
            error="[red]x[/red]",
        ))

        render.render_sync_table(summary)

        out = capsys.readouterr().out
        assert "b[a]d" in out
        assert "[red]x[/red]" in out

    def test_rows_per_entry(self, capsys):
        summary = make_summary(
            EntryResult(name="alpha", locator="a", status=OperationStatus.SUCCESS, action="added"),
            EntryResult(name="beta", locator="b", status=OperationStatus.SKIPPED, action="duplicate"),
        )

        render.render_sync_table(summary)

        out = capsys.readouterr().out
        assert "alpha" in out
        assert "added" in out
        assert "duplicate" in out


class TestRenderStatusTable:
    """Tests for render_status_table."""

    def test_bracketed_name_prints_literally(self, capsys):
        rows = [{
            'name': "b[a]d",
            'locator': "git@host:org/b[a]d.git",
            'line': 3,
            'state': 'invalid',
            'error': "bad name",
        }]

        render.render_status_table(rows)

        out = capsys.readouterr().out
        assert "b[a]d" in out
        assert "invalid" in out


class TestSummaryLines:
    """Tests for summary_lines."""

    def test_commit_hint_after_staging(self):
        summary = make_summary(EntryResult(
            name="alpha", locator="a", status=OperationStatus.SUCCESS, action="added", staged=True,
        ))

        lines = render.summary_lines(summary, "Sync submodules")

        assert lines[0].endswith("Changes have been staged.")
        assert '  git commit -m "Sync submodules"' in lines

    def test_no_commit_hint_in_dry_run(self):
        summary = make_summary(EntryResult(
            name="alpha", locator="a", status=OperationStatus.DRY_RUN, action="would_add", staged=True,
        ), dry_run=True)

        lines = render.summary_lines(summary, "Sync submodules")

        assert not any("git commit" in line for line in lines)
