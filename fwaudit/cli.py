"""fwaudit CLI - main entry point and command registration."""
# ruff: noqa: E402 - commands imported after cli group definition

import click

from fwaudit import __version__


@click.group()
@click.version_option(version=__version__, prog_name="fwaudit")
@click.help_option("-h", "--help")
def cli():
    """fwaudit - NestJS & Angular convention checks grounded in official docs

    \b
    QUICK START:
      fwaudit analyze file src/app.controller.ts --framework nestjs
      fwaudit analyze project src --framework angular --table
      fwaudit docs practices nestjs guard

    \b
    ENVIRONMENT:
      FWAUDIT_LOG_LEVEL    DEBUG|INFO|WARNING|ERROR (default WARNING)
      FWAUDIT_LOG_JSON=1   NDJSON log lines on stderr
      GITHUB_TOKEN         raises the GitHub API rate limit

    \b
    For detailed options: fwaudit <command> --help"""
    pass


from fwaudit.commands.analyze import analyze
from fwaudit.commands.docs import docs

cli.add_command(docs)
cli.add_command(analyze)


def main():
    """Main entry point for console script."""
    cli()


if __name__ == "__main__":
    main()
