"""CLI entry point and main pipeline."""

import logging
import sys
from pathlib import Path

import click

from .composition.composer import Composer
from .config import Config
from .errors import DiaryMergeError
from .extraction.matcher import DateMatcher
from .extraction.ordering import NewestFirst
from .extraction.scanner import DiaryScanner
from .storage.database import Database
from .storage.models import MergeResult, PipelineStage
from .storage.writer import OutputWriter

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class DiaryMergePipeline:
    """Collect, order, compose and write diary entries into one log.

    Stages run strictly in sequence. Any fatal error moves the pipeline to
    ``PipelineStage.FAILED``, keeps the exception in ``failure`` and
    re-raises it; nothing is retried.
    """

    def __init__(self, config: Config, database: Database | None = None):
        self.config = config
        self.matcher = DateMatcher(config.date_pattern)
        self.scanner = DiaryScanner(config, self.matcher)
        self.composer = Composer(config)
        self.writer = OutputWriter(config.output_path)
        if database is None and config.database_path is not None:
            database = Database(config.database_path)
        self.db = database
        self.stage = PipelineStage.IDLE
        self.failure: DiaryMergeError | None = None

    def run(self, dry_run: bool = False) -> MergeResult:
        """Run the full pipeline."""
        self.failure = None
        try:
            return self._run(dry_run)
        except DiaryMergeError as e:
            logger.error(f"Merge failed while {self.stage.value}: {e}")
            self.failure = e
            self.stage = PipelineStage.FAILED
            raise

    def _run(self, dry_run: bool) -> MergeResult:
        # Step 1: Collect candidates (path and date only)
        self._enter(PipelineStage.COLLECTING)
        candidates = self.scanner.scan()

        # Step 2: Order newest first
        self._enter(PipelineStage.ORDERING)
        ordered = NewestFirst(candidates)
        result = MergeResult(output_path=self.config.output_path, entries=list(ordered))

        if dry_run:
            self._enter(PipelineStage.DONE)
            return result

        # Step 3: Read everything and compose in memory
        self._enter(PipelineStage.COMPOSING)
        existing = self.composer.read_existing()
        entries = self.composer.load(ordered)

        if self.config.skip_merged and self.db is not None:
            fresh = [entry for entry in entries if not self.db.entry_recorded(entry)]
            result.skipped = len(entries) - len(fresh)
            if result.skipped:
                logger.info(f"Skipping {result.skipped} entries merged in earlier runs")
            entries = fresh

        result.entries = entries
        document = self.composer.compose(entries, existing)

        if not entries:
            logger.info("No entries to merge, output left unchanged")
            self._enter(PipelineStage.DONE)
            return result

        # Step 4: Write atomically, then archive
        self._enter(PipelineStage.WRITING)
        if self.config.backup_existing:
            result.backup_path = self.writer.backup()
        self.writer.write(document)
        result.written = True

        if self.db is not None:
            result.run_id = self.db.record_run(
                self.config.directory, self.config.output_path, entries
            )

        self._enter(PipelineStage.DONE)
        return result

    def _enter(self, stage: PipelineStage) -> None:
        logger.debug(f"Stage: {self.stage.value} -> {stage.value}")
        self.stage = stage


def _exit_with(error: DiaryMergeError) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(error.exit_code)


def _open_archive(db_path: Path) -> Database | None:
    if not db_path.exists():
        click.echo(f"No archive found at {db_path}")
        return None
    return Database(db_path)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Diary Merge - Merge date-named Markdown files into one log, newest first."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument("directory", required=False, type=click.Path(path_type=Path))
@click.option("--config", "-c", type=click.Path(path_type=Path), help="Config file path")
@click.option("--date-pattern", help="Regex a filename must match")
@click.option("--output", "-o", "output_filename", help="Output file name")
@click.option("--separator", help="Text placed between entries")
@click.option("--db", "database_path", type=click.Path(path_type=Path), help="Archive database path")
@click.option("--skip-merged", is_flag=True, help="Skip entries already archived")
@click.option("--backup", "backup_existing", is_flag=True, help="Back up the existing log first")
@click.option("--dry-run", is_flag=True, help="List the files that would be merged")
def merge(
    directory: Path | None,
    config: Path | None,
    date_pattern: str | None,
    output_filename: str | None,
    separator: str | None,
    database_path: Path | None,
    skip_merged: bool,
    backup_existing: bool,
    dry_run: bool,
) -> None:
    """Merge diary files in DIRECTORY (default: current directory)."""
    overrides = dict(
        directory=directory,
        date_pattern=date_pattern,
        output_filename=output_filename,
        separator=separator,
        database_path=database_path,
        skip_merged=skip_merged or None,
        backup_existing=backup_existing or None,
    )
    try:
        if config is not None:
            cfg = Config.from_yaml(config, **overrides)
        else:
            cfg = Config().with_overrides(**overrides)

        pipeline = DiaryMergePipeline(cfg)
        result = pipeline.run(dry_run=dry_run)
    except DiaryMergeError as e:
        _exit_with(e)
        return

    if dry_run:
        if not result.entries:
            click.echo("No diary files found.")
            return
        click.echo(f"Would merge {len(result.entries)} files into {result.output_path}:")
        for entry in result.entries:
            click.echo(f"  [{entry.date.isoformat()}] {entry.filename}")
        return

    if not result.written:
        click.echo(f"Nothing to merge; {result.output_path} unchanged.")
        return

    message = f"Merged {len(result.entries)} entries into {result.output_path}"
    if result.skipped:
        message += f" ({result.skipped} already merged)"
    click.echo(message)
    if result.backup_path:
        click.echo(f"  Backup: {result.backup_path}")


@cli.command()
@click.option("--db", "database_path", required=True, type=click.Path(path_type=Path), help="Archive database path")
@click.option("--limit", "-n", default=20, type=click.IntRange(min=1), help="Max runs")
def history(database_path: Path, limit: int) -> None:
    """List archived merge runs, newest first."""
    try:
        db = _open_archive(database_path)
        if db is None:
            return
        runs = db.get_runs(limit=limit)
    except DiaryMergeError as e:
        _exit_with(e)
        return

    if not runs:
        click.echo("No merge runs recorded.")
        return

    for run in runs:
        when = run.created_at.strftime("%Y-%m-%d %H:%M:%S") if run.created_at else "?"
        click.echo(f"#{run.exec_version} {when}  {run.entry_count} entries -> {run.output_path}")


@cli.command()
@click.option("--db", "database_path", required=True, type=click.Path(path_type=Path), help="Archive database path")
def stats(database_path: Path) -> None:
    """Show archive statistics."""
    try:
        db = _open_archive(database_path)
        if db is None:
            return
        s = db.get_stats()
        latest = db.latest_exec_version()
    except DiaryMergeError as e:
        _exit_with(e)
        return

    click.echo("Archive Statistics:")
    click.echo(f"  Merge runs:   {s['runs']}")
    if latest:
        click.echo(f"  Latest run:   #{latest}")
    click.echo(f"  Entries:      {s['entries']}")
    click.echo(f"  Words:        {s['words']}")
    if s["first_date"]:
        click.echo(f"  Date span:    {s['first_date']} .. {s['last_date']}")


if __name__ == "__main__":
    cli()
