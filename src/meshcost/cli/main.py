import click
from rich.console import Console

from .. import __version__
from .commands import analyze

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name='meshcost')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config', type=click.Path(), help='Path to configuration file')
@click.pass_context
def cli(ctx, debug, config):
    """
    meshcost - egress cost attribution for Istio service meshes

    Prices the traffic between locality-labelled workloads using the
    request-byte metrics Istio exports to Prometheus.
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    ctx.obj['config_file'] = config
    ctx.obj['console'] = console


cli.add_command(analyze.analyze)


@cli.command()
def version():
    """Show version information"""
    console.print(f"[bold blue]meshcost[/bold blue] version [green]{__version__}[/green]")


if __name__ == '__main__':
    cli()
