"""Typer CLI entrypoint for the consensus engine."""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .container import ConsensusContainer, create_container
from .core import summarize_feedback
from .errors import ConsensusError, ValidationError
from .logging import configure_logging
from .schemas.config import load_config

app = typer.Typer(help="Collaborative hiring consensus CLI.")

DataDirOption = typer.Option(None, file_okay=False, help="Directory holding the JSONL journals.")
ConfigOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")
LogLevelOption = typer.Option(None, help="Log level for structured logging (default WARNING).")


@app.command()
def criteria(
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Print the rating criteria registry."""
    container = _bootstrap(data_dir, config, log_level)
    _echo(container.criteria().list())


@app.command("submit-feedback")
def submit_feedback(
    file: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Feedback JSON path."),
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Submit a feedback record read from a JSON file."""
    container = _bootstrap(data_dir, config, log_level)
    try:
        payload = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid feedback JSON: {exc}", param_hint="file") from exc
    _run(lambda: container.feedback().submit(payload))


@app.command("cast-vote")
def cast_vote(
    candidate: str = typer.Option(..., help="Candidate id."),
    voter: str = typer.Option(..., help="Voter id."),
    decision: str = typer.Option(..., help="hire, no-hire or abstain."),
    voter_name: str = typer.Option("", help="Voter display name."),
    reasoning: str = typer.Option("", help="Free-text reasoning."),
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Cast or replace a vote."""
    container = _bootstrap(data_dir, config, log_level)
    _run(
        lambda: container.votes().cast_vote(
            {
                "candidate_id": candidate,
                "voter_id": voter,
                "voter_name": voter_name,
                "decision": decision,
                "reasoning": reasoning,
            }
        )
    )


@app.command("record-decision")
def record_decision(
    candidate: str = typer.Option(..., help="Candidate id."),
    decided_by: str = typer.Option(..., help="Who made the decision."),
    outcome: str = typer.Option(..., help="Outcome, e.g. 'moved to offer'."),
    rationale: str = typer.Option("", help="Why."),
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Append a finalized decision to the history log."""
    container = _bootstrap(data_dir, config, log_level)
    _run(
        lambda: container.decisions().append(
            {
                "candidate_id": candidate,
                "decided_by": decided_by,
                "outcome": outcome,
                "rationale": rationale,
            }
        )
    )


@app.command()
def consensus(
    candidate: str = typer.Option(..., help="Candidate id."),
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Compute consensus metrics for one candidate."""
    container = _bootstrap(data_dir, config, log_level)
    _echo(container.engine().compute(candidate))


@app.command()
def compare(
    candidate: List[str] = typer.Option(..., help="Candidate id; repeat for each candidate."),
    output: Optional[Path] = typer.Option(None, dir_okay=False, help="Write the report to this JSON path."),
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Build a side-by-side comparison report."""
    container = _bootstrap(data_dir, config, log_level)
    report = container.comparison().compare(candidate)
    if output is None:
        _echo(report)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(_render(report), encoding="utf-8")
    typer.echo(f"Compared {len(report)} candidates. Report saved to {output}.")


@app.command()
def stats(
    data_dir: Optional[Path] = DataDirOption,
    config: Optional[Path] = ConfigOption,
    log_level: Optional[str] = LogLevelOption,
) -> None:
    """Summarize all submitted feedback."""
    container = _bootstrap(data_dir, config, log_level)
    _echo(summarize_feedback(container.feedback().list_all()))


def _bootstrap(
    data_dir: Path | None, config: Path | None, log_level: str | None
) -> ConsensusContainer:
    settings: dict[str, Any] = {}
    if config:
        try:
            with config.open("r", encoding="utf-8") as handle:
                loaded = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise typer.BadParameter(f"Invalid YAML config: {exc}", param_hint="config") from exc
        try:
            app_config = load_config(loaded)
        except PydanticValidationError as exc:
            raise typer.BadParameter(f"Invalid config: {exc}", param_hint="config") from exc
        settings = app_config.to_settings()
        log_level = log_level or app_config.logging.level

    configure_logging(log_level or "WARNING")

    if data_dir is not None:
        settings.setdefault("storage", {})["data_dir"] = str(data_dir)
    try:
        container = create_container(settings=settings)
        # Replay every journal now so a corrupt one fails before any command runs.
        container.feedback()
        container.votes()
        container.decisions()
        return container
    except ConsensusError as exc:
        typer.echo(f"Failed to open stores: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _run(action) -> None:
    try:
        result = action()
    except ValidationError as exc:
        typer.echo(f"Validation failed: {', '.join(exc.fields)}", err=True)
        for name in exc.fields:
            typer.echo(f"  {name}: {exc.errors[name]}", err=True)
        raise typer.Exit(code=2) from exc
    except ConsensusError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    _echo(result)


def _echo(payload: Any) -> None:
    typer.echo(_render(payload))


def _render(payload: Any) -> str:
    return json.dumps(_to_plain(payload), ensure_ascii=False, indent=2, default=_json_default)


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if is_dataclass(value) and not isinstance(value, type):
        return {item.name: _to_plain(getattr(value, item.name)) for item in fields(value)}
    if isinstance(value, dict):
        return {key: _to_plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


def _json_default(value):  # type: ignore[override]
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
