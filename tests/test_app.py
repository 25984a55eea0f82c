"""Tests for proctree application."""

import pytest
from conftest import CountingResolver, FakeSource

from proctree.app import ProcessViewerApp, ReportView
from proctree.cache import MetadataCache
from proctree.config import MonitorConfig
from proctree.engine import MonitorEngine
from proctree.models import RenderedReport, ViewKind


def fake_app(entries):
    engine = MonitorEngine(source=FakeSource(entries), cache=MetadataCache(CountingResolver()))
    return ProcessViewerApp(MonitorConfig(poll_rate=0.1), engine=engine)


@pytest.mark.asyncio
async def test_app_creation(two_process_snapshot):
    """Test ProcessViewerApp can be instantiated."""
    app = fake_app(two_process_snapshot)
    assert app.title == "proctree"
    assert app.sub_title == "Process Monitor"
    assert app.active_view is None


@pytest.mark.asyncio
async def test_app_compose(two_process_snapshot):
    """Test ProcessViewerApp composes correctly."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        assert pilot.app.query_one("#welcome") is not None
        assert pilot.app.query_one("#report-view") is not None
        assert pilot.app.query_one("#report-body") is not None


@pytest.mark.asyncio
async def test_app_quit_binding(two_process_snapshot):
    """Test that 'q' binding triggers quit."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        await pilot.press("q")
        # App should be exiting
        assert pilot.app._exit
        assert not pilot.app._poller.is_running


@pytest.mark.asyncio
async def test_list_binding_shows_report(two_process_snapshot):
    """Test 'l' switches to the list view and displays its lines."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        await pilot.press("l")
        await pilot.pause(1.5)

        view = pilot.app.query_one(ReportView)
        assert pilot.app.active_view is ViewKind.LIST
        assert view.report is not None
        assert view.report.view is ViewKind.LIST
        assert not pilot.app.query_one("#welcome").display


@pytest.mark.asyncio
async def test_tree_binding_shows_report(two_process_snapshot):
    """Test 't' switches to the tree view."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        await pilot.press("t")
        await pilot.pause(1.5)

        view = pilot.app.query_one(ReportView)
        assert view.report is not None
        assert view.report.view is ViewKind.TREE
        assert any("[System] (PID: 0)" in line for line in view.report.lines)


@pytest.mark.asyncio
async def test_back_binding_returns_to_welcome(two_process_snapshot):
    """Test 'b' leaves the view and clears the pane."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        await pilot.press("l")
        await pilot.pause(1.5)
        await pilot.press("b")
        await pilot.pause(0.5)

        assert pilot.app.active_view is None
        assert pilot.app.query_one(ReportView).report is None
        assert pilot.app.query_one("#welcome").display
        assert app._engine.view is None


@pytest.mark.asyncio
async def test_stale_view_report_ignored(two_process_snapshot):
    """Test a queued report for another view is not displayed."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        pilot.app._active_view = ViewKind.TREE
        pilot.app._update_queue.put(
            RenderedReport(view=ViewKind.LIST, lines=("stale",), generation=99)
        )
        pilot.app._check_for_updates()

        assert pilot.app.query_one(ReportView).report is None


@pytest.mark.asyncio
async def test_report_with_brackets_renders(two_process_snapshot):
    """Test lines containing markup-like brackets display verbatim."""
    app = fake_app(two_process_snapshot)
    async with app.run_test() as pilot:
        view = pilot.app.query_one(ReportView)
        report = RenderedReport(view=ViewKind.LIST, lines=("[kworker/0:1]", "[bold]"))

        view.show_report(report)

        assert view.report is report


@pytest.mark.asyncio
async def test_app_with_live_engine():
    """Test the app drives a real psutil-backed engine."""
    app = ProcessViewerApp(MonitorConfig(poll_rate=0.1))
    async with app.run_test() as pilot:
        await pilot.press("t")
        await pilot.pause(3)

        view = pilot.app.query_one(ReportView)
        assert view.report is not None
        assert len(view.report.lines) > 5
