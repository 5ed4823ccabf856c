"""Typer CLI entrypoint for the resume pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import create_container
from .logging import configure_logging
from .schemas import DocumentItem
from .schemas.config import load_config
from .sinks import OutputWriter

app = typer.Typer(help="Resume ranking CLI.")


def _read_text(path: Optional[Path]) -> str:
    if path is None:
        return ""
    return path.read_text(encoding="utf-8")


def _load_settings(config: Optional[Path]) -> tuple[dict[str, Any], str | None]:
    if not config:
        return {}, None
    with config.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    try:
        app_config = load_config(loaded)
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_name="config") from exc
    return app_config.to_settings(), app_config.log_level


@app.command()
def run(
    resumes: List[Path] = typer.Option(
        ..., "--resume", "-r", exists=True, readable=True, dir_okay=False, help="Resume document path (repeatable)."
    ),
    job: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="Job requirement text file."),
    notes: Optional[Path] = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="Recruiter notes text file."
    ),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    enhanced: bool = typer.Option(False, "--enhanced/--standard", help="Allow the cloud extraction fallback."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: Optional[str] = typer.Option(None, help="Log level for structured logging."),
    api_key: Optional[str] = typer.Option(None, envvar="GEMINI_API_KEY", help="Gemini API key."),
    cloud_client_id: Optional[str] = typer.Option(
        None, envvar="PDF_SERVICES_CLIENT_ID", help="Cloud extraction client id."
    ),
    cloud_client_secret: Optional[str] = typer.Option(
        None, envvar="PDF_SERVICES_CLIENT_SECRET", help="Cloud extraction client secret."
    ),
) -> None:
    """Extract, evaluate and rank resumes."""
    settings, configured_level = _load_settings(config)
    configure_logging(log_level or configured_level or "INFO")

    if cloud_client_id or cloud_client_secret:
        extraction = settings.setdefault("extraction", {})
        cloud = extraction.setdefault("cloud", {})
        if cloud_client_id:
            cloud["client_id"] = cloud_client_id
        if cloud_client_secret:
            cloud["client_secret"] = cloud_client_secret

    try:
        container = create_container(settings=settings, api_key=api_key)
        pipeline = container.pipeline()
    except (TypeError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_name="config") from exc

    items = [DocumentItem.from_path(path) for path in resumes]
    result = pipeline.run(
        items,
        job_requirement=_read_text(job),
        recruiter_notes=_read_text(notes),
        enhanced=enhanced,
    )
    OutputWriter().write(output, result.to_payload())

    typer.echo(
        f"Processed {result.recognized} of {result.received} documents "
        f"({len(result.failed_items)} failed). Results saved to {output}."
    )
    if not result.success:
        typer.echo(result.message, err=True)
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
