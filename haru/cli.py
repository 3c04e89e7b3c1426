import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from haru.codegen import Codegen
from haru.config import DocumentConfig, HaruConfig, get_config
from haru.exceptions import HaruError

console = Console()
app = typer.Typer(
    name='haru',
    help='Generate typed async Python clients from OpenAPI documents',
    no_args_is_help=True,
)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
        datefmt='[%X]',
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def generate(
    config: Annotated[
        str | None,
        typer.Option('--config', '-c', help='Path to configuration file (YAML)'),
    ] = None,
    source: Annotated[
        str | None,
        typer.Option('--source', '-s', help='OpenAPI document, overrides the config'),
    ] = None,
    output: Annotated[
        str | None,
        typer.Option('--output', '-o', help='Output directory, used with --source'),
    ] = None,
    verbose: Annotated[
        bool, typer.Option('--verbose', '-v', help='Log debug output')
    ] = False,
) -> None:
    """Generate client modules.

    Without --source the configuration is read from the given file, from
    haru.yaml in the current directory or from [tool.haru] in pyproject.toml.

    Examples:
        haru generate
        haru generate --config my-config.yaml
        haru generate --source openapi.yaml --output client
    """
    try:
        if source or output:
            if not (source and output):
                raise typer.BadParameter('--source and --output go together')
            settings = HaruConfig(
                documents=[DocumentConfig(source=source, output=output)]
            )
        else:
            settings = get_config(config)

        setup_logging(verbose or settings.verbose)

        for document_config in settings.documents:
            with Progress(
                SpinnerColumn(),
                TextColumn('[progress.description]{task.description}'),
                console=console,
            ) as progress:
                task = progress.add_task(
                    f'Generating code for {document_config.source} '
                    f'in {document_config.output}...',
                    total=None,
                )

                result = Codegen(document_config).generate()

                progress.update(
                    task,
                    description=f'Code generation completed for {document_config.source}!',
                )

            console.print('[dim]Generated files:[/dim]')
            for path in sorted(result.files):
                console.print(f'  - {document_config.output}/{path}')
            for diagnostic in result.diagnostics:
                console.print(f'[yellow]Warning:[/yellow] {escape(str(diagnostic))}')

    except HaruError as e:
        console.print(f'[red]Error:[/red] {escape(str(e))}')
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the version of haru."""
    from haru import __version__

    console.print(f'haru version: {__version__}')


if __name__ == '__main__':
    app()
