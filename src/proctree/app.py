"""proctree - textual front end and command-line entry point."""

import argparse
import dataclasses
import logging
import sys
import time
from queue import Empty, Queue

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Footer, Static

from proctree.config import MonitorConfig, configure_logging
from proctree.engine import MonitorEngine
from proctree.errors import SnapshotError
from proctree.models import RenderedReport, ViewKind
from proctree.monitor import ReportPoller

logger = logging.getLogger(__name__)

WELCOME_TEXT = (
    "Welcome to proctree!\n\n"
    "How do you want to view the processes?\n"
    "Press l for the list view or t for the tree view."
)


class ReportView(VerticalScroll):
    """Scrollable pane showing the lines of the current report."""

    DEFAULT_CSS = """
    ReportView {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ReportView."""
        super().__init__(*args, **kwargs)
        self._report: RenderedReport | None = None

    @property
    def report(self) -> RenderedReport | None:
        """The report currently displayed."""
        return self._report

    def compose(self) -> ComposeResult:
        """Compose the report body."""
        yield Static(id="report-body")

    def show_report(self, report: RenderedReport) -> None:
        """Replace the displayed lines with those of report."""
        self._report = report
        body = self.query_one("#report-body", Static)
        # Process names may contain brackets, so bypass markup parsing
        body.update(Text("\n".join(report.lines)))

    def clear_report(self) -> None:
        """Blank the pane."""
        self._report = None
        self.query_one("#report-body", Static).update("")


class ProcessViewerApp(App):
    """Main proctree application."""

    TITLE = "proctree"
    SUB_TITLE = "Process Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #welcome {
        height: auto;
        padding: 1 2;
        background: $surface;
    }
    """

    BINDINGS = [
        ("l", "show_list", "List"),
        ("t", "show_tree", "Tree"),
        ("b", "back", "Back"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: MonitorConfig | None = None,
        engine: MonitorEngine | None = None,
    ) -> None:
        """Initialize the ProcessViewerApp."""
        super().__init__()
        self._config = config or MonitorConfig()
        self._engine = engine if engine is not None else self._config.build_engine()
        self._update_queue: Queue[RenderedReport] = Queue()
        self._poller = ReportPoller(
            self._engine,
            self._update_queue,
            poll_rate=self._config.poll_rate,
        )
        self._active_view: ViewKind | None = None

    @property
    def active_view(self) -> ViewKind | None:
        """The view the user selected, or None on the welcome screen."""
        return self._active_view

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Static(WELCOME_TEXT, id="welcome")
        yield ReportView(id="report-view")
        yield Footer()

    def on_mount(self) -> None:
        """Start the poller when the app is mounted."""
        self._poller.start()
        # Set up a timer to poll the queue for updates
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Show the newest report waiting in the queue, if any."""
        report = None
        while True:
            try:
                report = self._update_queue.get_nowait()
            except Empty:
                break

        if report is None or report.view is not self._active_view:
            return
        self.query_one(ReportView).show_report(report)

    def _switch_view(self, kind: ViewKind) -> None:
        self._active_view = kind
        self.query_one("#welcome", Static).display = False
        self.sub_title = f"{kind.value.title()} view"
        self._poller.request_view(kind)

    def action_show_list(self) -> None:
        """Switch to the flat list view."""
        self._switch_view(ViewKind.LIST)

    def action_show_tree(self) -> None:
        """Switch to the process tree view."""
        self._switch_view(ViewKind.TREE)

    def action_back(self) -> None:
        """Return to the welcome screen."""
        self._active_view = None
        self._poller.clear_view()
        self.sub_title = self.SUB_TITLE
        self.query_one("#welcome", Static).display = True
        self.query_one(ReportView).clear_report()

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._poller.stop()
        self._engine.close()
        self.exit()


def build_parser() -> argparse.ArgumentParser:
    """Command-line options; unset options fall back to PROCTREE_* variables."""
    parser = argparse.ArgumentParser(prog="proctree", description=__doc__)
    parser.add_argument(
        "--interval",
        type=float,
        dest="refresh_interval",
        help="minimum seconds between recomputations (default 5)",
    )
    parser.add_argument(
        "--poll-rate",
        type=float,
        dest="poll_rate",
        help="seconds between engine ticks (default 1)",
    )
    parser.add_argument(
        "--no-evict",
        action="store_false",
        dest="evict_exited",
        default=None,
        help="keep cached metadata for exited processes",
    )
    parser.add_argument("--log-level", dest="log_level", help="logging level")
    parser.add_argument("--log-file", dest="log_file", help="write logs to this file")
    parser.add_argument(
        "--once",
        choices=[kind.value for kind in ViewKind],
        help="print a single report to stdout and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for proctree."""
    args = build_parser().parse_args(argv)
    overrides = {
        field.name: getattr(args, field.name)
        for field in dataclasses.fields(MonitorConfig)
        if getattr(args, field.name, None) is not None
    }
    config = dataclasses.replace(MonitorConfig.from_env(), **overrides)

    if args.once:
        configure_logging(config.log_level, config.log_file)
        with config.build_engine() as engine:
            # Give the primed CPU counters a sampling window
            time.sleep(config.poll_rate)
            try:
                report = engine.request_view(ViewKind(args.once))
            except SnapshotError as exc:
                logger.error("%s", exc)
                return 1
            print("\n".join(report.lines))
        return 0

    # The TUI owns the terminal; only log when a file is given
    if config.log_file:
        configure_logging(config.log_level, config.log_file)
    ProcessViewerApp(config).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
