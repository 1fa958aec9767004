from __future__ import annotations

import logging
import textwrap
import traceback
from pathlib import Path
from typing import List, Optional, Sequence

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from .config import DEFAULT_CONFIG_PATH, RecognizerConfig, load_recognizer_config
from .io_strokes import load_pair_document, load_rank_document
from .metrics import MetricsTracker, use_tracker
from .recognize import RankedCandidate, rank_candidates, recognize
from .report import format_float, format_point, gather_notes, write_report_csv
from .types import AlignmentResult, Matched, score_of


class Logger:
    def __init__(self, verbose: bool) -> None:
        self.verbose = verbose
        theme = Theme({
            "info": "cyan",
            "step": "bold cyan",
            "warning": "bold yellow",
            "error": "bold red",
        })
        self.console = Console(theme=theme, highlight=False, record=False)
        self.err_console = Console(theme=theme, highlight=False, record=False, stderr=True)

    def _print(self, message: str, style: str | None = None, *, err: bool = False) -> None:
        target = self.err_console if err else self.console
        if style:
            target.print(f"[{style}]{escape(message)}[/{style}]")
        else:
            target.print(escape(message))

    def info(self, message: str) -> None:
        self._print(message, style="info")

    def step(self, message: str) -> None:
        self.console.print(f"[step]▶ {escape(message)}")

    def warn(self, message: str) -> None:
        self._print(message, style="warning")

    def error(self, message: str) -> None:
        self._print(message, style="error", err=True)

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]{escape(message)}[/dim]")


class _LoggingBridge(logging.Handler):
    def __init__(self, cli_logger: Logger, level: int) -> None:
        super().__init__(level)
        self._cli_logger = cli_logger

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        msg = self.format(record)
        if record.levelno >= logging.ERROR:
            self._cli_logger.error(msg)
        elif record.levelno >= logging.WARNING:
            self._cli_logger.warn(msg)
        elif record.levelno >= logging.INFO:
            self._cli_logger.info(msg)
        else:
            self._cli_logger.debug(msg)


def _install_bridge(logger: Logger, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    package_logger = logging.getLogger("stroke_recognizer")
    package_logger.setLevel(log_level)
    package_logger.propagate = False
    for handler in list(package_logger.handlers):
        if isinstance(handler, _LoggingBridge):
            package_logger.removeHandler(handler)
    bridge = _LoggingBridge(logger, log_level)
    bridge.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(bridge)


def _log_active_config(logger: Logger, cfg: RecognizerConfig) -> None:
    config_yaml = yaml.safe_dump(cfg.to_mapping(), sort_keys=False, default_flow_style=None).strip()
    logger.debug("Active configuration:\n" + textwrap.indent(config_yaml, "  "))


def _result_lines(result: AlignmentResult) -> List[str]:
    if not isinstance(result, Matched):
        return [f"No match ({result.reason})"]
    return [
        f"Score={format_float(result.score, 4)} | penalties={result.penalties}",
        f"Source {format_point(result.source[0])} → {format_point(result.source[1])}",
        f"Target {format_point(result.target[0])} → {format_point(result.target[1])}",
    ]


def _build_rank_table(ranked: Sequence[RankedCandidate]) -> Table:
    table = Table(show_header=True, header_style="bold")
    for header in ("#", "Name", "Offset", "Score", "Penalties", "Notes"):
        table.add_column(header)
    for index, candidate in enumerate(ranked, start=1):
        result = candidate.result
        matched = isinstance(result, Matched)
        table.add_row(
            str(index),
            escape(candidate.name),
            str(candidate.offset),
            format_float(score_of(result), 4),
            str(result.penalties) if matched else "-",
            escape(", ".join(gather_notes(candidate))),
        )
    return table


def _handle_known_exception(logger: Logger, exc: Exception, *, prefix: str | None = None) -> None:
    message = str(exc) if str(exc) else exc.__class__.__name__
    if prefix:
        message = f"{prefix}: {message}"
    logger.error(message)


_CONFIG_OPTION = typer.Option(
    DEFAULT_CONFIG_PATH,
    "--config",
    "-c",
    help="YAML file with thresholds, penalties and hook shapes",
)
_OPTS_OPTION = typer.Option(
    [],
    "--opts",
    help="Override a config value, e.g. --opts thresholds.angle_deg=30",
    show_default=False,
    metavar="PATH=VALUE",
)
_VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose output")


app = typer.Typer(help="Stroke matching and scoring for handwriting practice")


@app.command("score")
def score(
    document: Path = typer.Argument(..., help="YAML/JSON file with source, target and offset"),
    offset: Optional[int] = typer.Option(
        None, "--offset", help="Stroke-order offset; overrides the document value"
    ),
    config: Path = _CONFIG_OPTION,
    opts: List[str] = _OPTS_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Score one drawn stroke against one reference stroke."""

    logger = Logger(verbose=verbose)
    _install_bridge(logger, verbose)
    tracker = MetricsTracker()
    try:
        with use_tracker(tracker):
            logger.step("Loading configuration")
            cfg = load_recognizer_config(config, opts)
            _log_active_config(logger, cfg)
            logger.step("Loading strokes")
            doc = load_pair_document(document)
            effective_offset = doc.offset if offset is None else offset
            logger.step("Matching")
            result = recognize(doc.source, doc.target, effective_offset, cfg)

        logger.console.print(
            Panel(escape("\n".join(_result_lines(result))), title="Stroke match", expand=False)
        )
        if isinstance(result, Matched) and result.warning:
            logger.warn(f"Warning: {result.warning}")
        logger.debug("[metrics] " + tracker.summary())
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        _handle_known_exception(logger, exc, prefix="Error")
        raise typer.Exit(code=2) from exc
    except Exception as exc:  # pragma: no cover - fallback path
        _handle_known_exception(logger, exc, prefix="Unexpected error")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from exc


@app.command("rank")
def rank(
    document: Path = typer.Argument(..., help="YAML/JSON file with source and candidates"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write the ranking as CSV"),
    config: Path = _CONFIG_OPTION,
    opts: List[str] = _OPTS_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Rank candidate reference strokes for one drawn stroke."""

    logger = Logger(verbose=verbose)
    _install_bridge(logger, verbose)
    tracker = MetricsTracker()
    try:
        with use_tracker(tracker):
            logger.step("Loading configuration")
            cfg = load_recognizer_config(config, opts)
            _log_active_config(logger, cfg)
            logger.step("Loading strokes")
            doc = load_rank_document(document)
            logger.debug(f"Candidates: {len(doc.candidates)}")
            logger.step("Ranking candidates")
            ranked = rank_candidates(
                doc.source,
                [(c.name, c.target, c.offset) for c in doc.candidates],
                cfg,
            )

        logger.console.rule("Ranking")
        logger.console.print(_build_rank_table(ranked))
        best = ranked[0]
        if isinstance(best.result, Matched):
            logger.info(f"Best candidate: {best.name}")
        else:
            logger.warn("No candidate matched")
        if report is not None:
            path = write_report_csv(str(report), ranked)
            logger.info(f"Report: {path}")
        logger.debug("[metrics] " + tracker.summary())
    except (FileNotFoundError, ValueError, RuntimeError) as exc:
        _handle_known_exception(logger, exc, prefix="Error")
        raise typer.Exit(code=2) from exc
    except Exception as exc:  # pragma: no cover - fallback path
        _handle_known_exception(logger, exc, prefix="Unexpected error")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":
    app()
