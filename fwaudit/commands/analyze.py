"""Code analysis commands: file, project, fix suggestions, detection."""

from pathlib import Path

import click
from rich.table import Table

from fwaudit.commands import run_operation
from fwaudit.docs.sources import known_frameworks
from fwaudit.operations import (
    analyze_code_file,
    analyze_project,
    detect_framework_and_file_type,
    generate_fix_suggestions,
)
from fwaudit.ui import SEVERITY_STYLES, console, print_envelope
from fwaudit.utils.error_handler import handle_exceptions

FRAMEWORK_CHOICE = click.Choice(known_frameworks(), case_sensitive=False)
SOURCE_SUFFIXES = (".ts", ".js")
SKIPPED_DIRS = {"node_modules", "dist", ".git", ".angular", "coverage"}


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def collect_files(paths: tuple[Path, ...]) -> list[dict[str, str]]:
    """Expand files and directories into ``{"path", "content"}`` requests."""
    files = []
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if any(part in SKIPPED_DIRS for part in candidate.parts):
                    continue
                if candidate.is_file() and candidate.suffix in SOURCE_SUFFIXES:
                    files.append({"path": candidate.as_posix(), "content": _read(candidate)})
        else:
            files.append({"path": path.as_posix(), "content": _read(path)})
    return files


def render_project_table(envelope: dict) -> None:
    """Per-file severity counts followed by the project totals."""
    if envelope.get("status") != "success":
        print_envelope(envelope)
        return

    table = Table(title="Project analysis", show_lines=False)
    table.add_column("File", style="path")
    table.add_column("Type", style="dim")
    for severity, style in SEVERITY_STYLES.items():
        table.add_column(severity.capitalize(), style=style, justify="right")

    for result in envelope["results"]:
        counts = {s: 0 for s in SEVERITY_STYLES}
        for issue in result["issues"]:
            counts[issue["severity"]] += 1
        table.add_row(
            result["fileInfo"]["path"],
            result["fileInfo"]["fileType"],
            *(str(counts[s]) for s in SEVERITY_STYLES),
        )

    summary = envelope["projectSummary"]
    console.print(table)
    console.print(
        f"{summary['totalFiles']} files, {summary['filesWithIssues']} with issues, "
        f"{summary['totalIssues']} issues total",
        highlight=False,
    )


@click.group()
@click.help_option("-h", "--help")
def analyze():
    """Check NestJS and Angular source files against framework conventions.

    Files are classified by name (e.g. *.controller.ts) and, failing that, by
    the decorators they contain. Issues carry a severity, a line span, a
    suggested fix and a documentation link.

    EXAMPLES:
      fwaudit analyze file src/users/users.controller.ts --framework nestjs
      fwaudit analyze project src --framework nestjs --table
      fwaudit analyze fix src/app/app.component.ts --framework angular
      fwaudit analyze detect src/app/app.module.ts
    """
    pass


@analyze.command("file")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--framework", type=FRAMEWORK_CHOICE, required=True, help="Framework the file belongs to")
@click.pass_context
@handle_exceptions
def file_(ctx, path, framework):
    """Analyze one file: issues, grounding best practices, fix suggestions."""
    run_operation(ctx, analyze_code_file, path.as_posix(), _read(path), framework.lower())


@analyze.command("project")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option("--framework", type=FRAMEWORK_CHOICE, required=True, help="Framework the files belong to")
@click.option("--table", "as_table", is_flag=True, help="Print a summary table instead of JSON")
@click.pass_context
@handle_exceptions
def project(ctx, paths, framework, as_table):
    """Analyze every .ts/.js file under PATHS."""
    files = collect_files(paths)
    if not files:
        raise click.ClickException("No .ts or .js files found")
    render = render_project_table if as_table else print_envelope
    run_operation(ctx, analyze_project, files, framework.lower(), render=render)


@analyze.command("fix")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--framework", type=FRAMEWORK_CHOICE, required=True, help="Framework the file belongs to")
@click.pass_context
@handle_exceptions
def fix(ctx, path, framework):
    """Remediation text for every issue found in one file."""
    run_operation(ctx, generate_fix_suggestions, path.as_posix(), _read(path), framework.lower())


@analyze.command("detect")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
@handle_exceptions
def detect(ctx, path):
    """Report the framework and entity kind of one file."""
    run_operation(ctx, detect_framework_and_file_type, path.as_posix(), _read(path))
