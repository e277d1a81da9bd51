"""Command-line interface for describing and re-anchoring selections."""

import logging
from pathlib import Path

import typer
import yaml
from lxml import etree
from rich.console import Console
from rich.markup import escape

from anchoring.anchors import TextPositionAnchor
from anchoring.dom import CoordinateSpace, parse_document
from anchoring.errors import AnchorError
from anchoring.logging_config import setup_logging
from anchoring.resolve import anchor, describe
from anchoring.selectors import annotation_yaml, selectors_from_annotation

app = typer.Typer(
    name="anchoring",
    help="Describe text selections in XML/HTML documents and find them again.",
)
console = Console()


# Bad input files or options; pydantic's ValidationError is a ValueError
INPUT_ERRORS = (AnchorError, ValueError, yaml.YAMLError, etree.XMLSyntaxError, etree.XPathError)


def _html_option(html: bool) -> bool | None:
    # Without --html the file suffix decides
    return True if html else None


@app.command("describe")
def describe_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="XML or HTML document"),
    start: int = typer.Argument(..., help="Offset where the selection begins"),
    end: int = typer.Argument(..., help="Offset where the selection ends"),
    html: bool = typer.Option(False, "--html", help="Parse the document as HTML"),
    ignore: str | None = typer.Option(
        None,
        "--ignore",
        help="XPath of wrapper elements left out of tree paths (e.g. .//mark)",
    ),
) -> None:
    """Print the selectors of a text span as a Web Annotation target."""
    try:
        root = parse_document(path, html=_html_option(html))
        space = CoordinateSpace(root, ignore_selector=ignore)
        range_ = TextPositionAnchor(start, end).to_range(space)
        selectors = describe(range_, space)
    except INPUT_ERRORS as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e

    console.print(
        annotation_yaml(selectors, source=path.name), markup=False, highlight=False, soft_wrap=True
    )


@app.command("resolve")
def resolve_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="XML or HTML document"),
    annotation: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="Web Annotation YAML file"
    ),
    html: bool = typer.Option(False, "--html", help="Parse the document as HTML"),
    ignore: str | None = typer.Option(
        None,
        "--ignore",
        help="XPath of wrapper elements left out of tree paths (as given to describe)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace resolution attempts"),
) -> None:
    """Find the annotation's target in the document."""
    if verbose:
        setup_logging(logging.DEBUG)

    try:
        root = parse_document(path, html=_html_option(html))
        space = CoordinateSpace(root, ignore_selector=ignore)
        selectors = selectors_from_annotation(annotation.read_text(encoding="utf-8"))
        range_ = anchor(selectors, space)
        position = TextPositionAnchor.from_range(range_, space)
    except INPUT_ERRORS as e:
        console.print(f"[bold red]Not found:[/bold red] {escape(str(e))}")
        raise typer.Exit(1) from e

    console.print(f"[bold green]Found[/bold green] at {position.start}-{position.end}")
    console.print(range_.text(), markup=False, highlight=False, soft_wrap=True)


@app.command()
def version() -> None:
    """Show version information."""
    console.print("anchoring 0.1.0")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
