"""Documentation commands: search, practices, browse, topics, code extraction."""

import json
from pathlib import Path

import click

from fwaudit.commands import run_operation
from fwaudit.docs.sources import known_frameworks
from fwaudit.operations import (
    browse_documentation,
    extract_code_snippet,
    extract_documentation,
    extract_multiple_code_snippets,
    get_best_practices,
    get_documentation_topic,
    search_documentation,
)
from fwaudit.utils.error_handler import handle_exceptions

FRAMEWORK_CHOICE = click.Choice(known_frameworks(), case_sensitive=False)


@click.group()
@click.help_option("-h", "--help")
def docs():
    """Search and read framework documentation indexed from GitHub.

    The NestJS and Angular documentation trees are discovered on first use
    and cached for the rest of the command. Every subcommand prints a JSON
    envelope with a "status" of success, warning or error.

    EXAMPLES:
      fwaudit docs search nestjs guards
      fwaudit docs practices angular component --no-examples
      fwaudit docs browse angular
      fwaudit docs topic nestjs-github topic-guards
      fwaudit docs extract "reactive forms" --mode typescript
      fwaudit docs snippet --path adev/src/content/examples/forms/app.component.ts
    """
    pass


@docs.command("search")
@click.argument("framework", type=FRAMEWORK_CHOICE)
@click.argument("query")
@click.pass_context
@handle_exceptions
def search(ctx, framework, query):
    """Search topic titles and content for QUERY."""
    run_operation(ctx, search_documentation, framework.lower(), query)


@docs.command("practices")
@click.argument("framework", type=FRAMEWORK_CHOICE)
@click.argument("component")
@click.option("--examples/--no-examples", default=True, help="Keep or strip code examples")
@click.pass_context
@handle_exceptions
def practices(ctx, framework, component, examples):
    """Best-practice passages mentioning COMPONENT."""
    run_operation(ctx, get_best_practices, framework.lower(), component, include_examples=examples)


@docs.command("browse")
@click.argument("framework", type=FRAMEWORK_CHOICE)
@click.pass_context
@handle_exceptions
def browse(ctx, framework):
    """List sections with topic counts and a short topic preview."""
    run_operation(ctx, browse_documentation, framework.lower())


@docs.command("topic")
@click.argument("source_id")
@click.argument("topic_id")
@click.pass_context
@handle_exceptions
def topic(ctx, source_id, topic_id):
    """Full content of one topic."""
    run_operation(ctx, get_documentation_topic, source_id, topic_id)


@docs.command("extract")
@click.argument("search_term")
@click.option("--framework", type=FRAMEWORK_CHOICE, help="Detected from the search term when omitted")
@click.option(
    "--mode",
    type=click.Choice(["complete", "html", "typescript"]),
    default="complete",
    help="complete topics, or only HTML / TypeScript examples",
)
@click.pass_context
@handle_exceptions
def extract(ctx, search_term, framework, mode):
    """Pull documentation and its code examples for SEARCH_TERM."""
    run_operation(
        ctx,
        extract_documentation,
        search_term,
        framework=framework.lower() if framework else None,
        mode=mode,
    )


@docs.command("snippet")
@click.option("--selector", help="A complete <docs-code ...> element")
@click.option("--path", "path_", help="Path of the example file in the docs repository")
@click.option("--region", help="Named region inside the file")
@click.option("--header", help="Header comment prepended to the code")
@click.option(
    "--batch",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with a list of {selector | path, visibleRegion, description} requests",
)
@click.option("--batch-size", type=int, help="Requests resolved concurrently per batch")
@click.pass_context
@handle_exceptions
def snippet(ctx, selector, path_, region, header, batch, batch_size):
    """Fetch the code a docs-code reference points at."""
    if batch is not None:
        requests = json.loads(batch.read_text(encoding="utf-8"))
        if not isinstance(requests, list):
            raise click.BadParameter("expected a JSON list", param_hint="--batch")
        run_operation(ctx, extract_multiple_code_snippets, requests, batch_size)
        return
    run_operation(
        ctx,
        extract_code_snippet,
        selector=selector,
        path=path_,
        visible_region=region,
        header=header,
    )
