"""
Command-line interface for the atlas packer.
"""

import os
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table

from .config import CartographerConfig, ConfigurationError
from .pipeline import CartographerPipeline, PipelineError, PipelineResult
from .processing.loader import ImageLoadError
from .processing.atlas import AtlasGenerationError
from .processing.metadata import MetadataGenerationError

app = typer.Typer(
    name="image-cartographer",
    help="Pack every image of a directory into one power-of-two texture atlas",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]image-cartographer[/cyan]                      Pack the images of the current directory
  [cyan]image-cartographer sprites/[/cyan]             Pack the images of sprites/
  [cyan]CARTOGRAPHER_PADDING=2 image-cartographer[/cyan]  Use a two pixel border
    """
)
console = Console()


@app.command()
def pack(
    directory: Optional[Path] = typer.Argument(
        None, help="Directory holding the images (defaults to the current directory)",
        exists=True, file_okay=False, dir_okay=True
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every step and list placements")
):
    """Create atlas.png and atlasInfo.txt from the images of a directory."""
    console.print("[bold blue]Starting to draw...[/bold blue]")

    try:
        config = _load_config(config_file)
        if verbose:
            config.log_level = "DEBUG"
        pipeline = CartographerPipeline(config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    try:
        result = pipeline.run(directory or Path.cwd())
    except ImageLoadError as e:
        console.print(f"[red]Error loading images:[/red] {e.message}")
        raise typer.Exit(1)
    except (AtlasGenerationError, MetadataGenerationError) as e:
        console.print(f"[red]Error creating atlas:[/red] {e.message}")
        raise typer.Exit(1)
    except PipelineError as e:
        console.print(f"[red]Pipeline error:[/red] {e.message}")
        raise typer.Exit(1)

    if result.empty:
        console.print("[yellow]This directory contains no images![/yellow]")
        return

    if verbose:
        _print_placements(result)

    _print_summary(config, result)


def _print_placements(result: PipelineResult) -> None:
    """Print a table of every placement."""
    table = Table(title="Placements")
    table.add_column("Name", style="cyan")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("Height", justify="right")

    for entry in result.entries:
        table.add_row(entry.name, str(entry.x), str(entry.y), str(entry.width), str(entry.height))

    console.print(table)


def _print_summary(config: CartographerConfig, result: PipelineResult) -> None:
    """Print the completion summary."""
    separator = config.info_separator
    info_format = separator.join(["name", "x", "y", "width", "height"])

    console.print(
        f"[green]✓[/green] Created an atlas with the dimensions {result.width}x{result.height} "
        f"out of {result.image_count} images in {result.duration_ms}ms!"
    )
    console.print(
        f"Generated {config.atlas_filename}, and {config.info_filename} "
        f"with the format \"{info_format}\".",
        markup=False
    )

    if result.frame_map_path:
        console.print(f"  • Frame map: {result.frame_map_path.name}")

    for name in result.unplaced:
        console.print(f"[yellow]Warning:[/yellow] '{name}' did not fit and was left out")


def _load_config(config_file: Optional[Path]) -> CartographerConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        config = CartographerConfig.from_file(config_file)
        console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        default_configs = [
            Path("image_cartographer.toml"),
            Path("image_cartographer.json"),
        ]

        for config_path in default_configs:
            if config_path.exists():
                console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = CartographerConfig.from_file(config_path)
                break

        if config is None:
            config = CartographerConfig()

    config = CartographerConfig._apply_env_overrides(config)

    env_vars_used = [key for key in os.environ if key.startswith('CARTOGRAPHER_')]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


if __name__ == "__main__":
    app()
