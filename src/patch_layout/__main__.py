"""CLI entry point for patch-layout."""

import json
import logging
import sys

import click

from patch_layout.config import LayoutConfig
from patch_layout.errors import ValidationError
from patch_layout.ir.graph import GraphData, UILayoutState
from patch_layout.layout.engine import compute_layout
from patch_layout.types import DensityMode

_DENSITIES = [d.value for d in DensityMode]


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--density", "-d", "density", type=click.Choice(_DENSITIES), default="normal", help="Density mode")
@click.option("--focus-block", "focus_block", type=str, default=None, help="Focused block id")
@click.option("--focus-bus", "focus_bus", type=str, default=None, help="Focused bus id")
@click.option("--lmax", "lmax", type=float, default=None, help="Maximum drawable connector length")
@click.option("--indent", "indent", type=int, default=2, help="JSON indentation (0 for compact output)")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline details to stderr")
def main(
    input: str | None,
    density: str,
    focus_block: str | None,
    focus_bus: str | None,
    lmax: float | None,
    indent: int,
    output: str | None,
    verbose: bool,
) -> None:
    """Lay out a dataflow patch graph (JSON) and print the layout as JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if input:
        try:
            with open(input) as f:
                text = f.read()
        except OSError as e:
            click.echo(f"error: cannot read '{input}': {e}", err=True)
            sys.exit(1)
    else:
        text = sys.stdin.read()

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        click.echo(f"error: invalid JSON: {e}", err=True)
        sys.exit(1)

    config = LayoutConfig()
    if lmax is not None:
        config.lmax = lmax

    try:
        graph = GraphData.from_dict(doc)
        ui_state = UILayoutState(
            density=DensityMode(density),
            focused_block_id=focus_block,
            focused_bus_id=focus_bus,
        )
        result = compute_layout(graph, ui_state, config)
    except ValidationError as e:
        for issue in e.issues:
            click.echo(f"error: {issue}", err=True)
        sys.exit(1)

    rendered = json.dumps(result.to_dict(), indent=indent or None) + "\n"

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
