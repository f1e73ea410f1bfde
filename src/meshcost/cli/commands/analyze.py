import json
from datetime import datetime, timezone
from pathlib import Path

import click

from ...analysis.correlator import QueryWindow
from ...core.config import get_settings, log_settings_source, reload_settings
from ...core.exceptions import MeshCostError
from ...core.logging import setup_logging
from ...core.orchestrator import CostPipeline
from ...reporting.console import render_report


def _parse_time(value):
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise click.BadParameter(f"not an ISO-8601 timestamp: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@click.command()
@click.option('--cloud', type=click.Choice(['gcp', 'aws'], case_sensitive=False),
              help='Cloud the cluster runs on; selects locality format and default rates')
@click.option('--price-path', help='Local file or http(s) URL with custom egress rates')
@click.option('--prometheus-namespace', help='Namespace the prometheus deployment lives in')
@click.option('--start', help='Analyze traffic from this time onwards (ISO-8601)')
@click.option('--end', help='Analyze traffic up to this time (ISO-8601, default now)')
@click.option('--details', is_flag=True, help='Show every source/destination link')
@click.option('--format', '-f', 'output_format', type=click.Choice(['table', 'json']),
              default='table', help='Output format')
@click.option('--no-port-forward', is_flag=True,
              help='Assume prometheus is already reachable at the configured endpoint')
@click.pass_context
def analyze(ctx, cloud, price_path, prometheus_namespace, start, end, details,
            output_format, no_port_forward):
    """
    Price the service-to-service traffic in the mesh

    Examples:
        meshcost analyze --cloud gcp
        meshcost analyze --start 2024-05-01T00:00:00Z --details
    """
    console = ctx.obj['console']

    config_file = ctx.obj.get('config_file')
    settings = reload_settings(Path(config_file)) if config_file else get_settings()
    if cloud:
        settings.cloud = cloud.lower()
        settings.pricing.cloud = cloud.lower()
    if price_path:
        settings.pricing.price_path = price_path
    if prometheus_namespace:
        settings.prometheus.namespace = prometheus_namespace

    setup_logging(
        level="DEBUG" if ctx.obj.get('debug') else settings.logging.level,
        log_file=settings.logging.file,
        structured=settings.logging.structured,
        console=settings.logging.console,
        fmt=settings.logging.format,
    )
    log_settings_source()

    end_time = _parse_time(end) or datetime.now(timezone.utc)
    start_time = _parse_time(start)
    try:
        window = QueryWindow(end=end_time, start=start_time)
    except ValueError as e:
        raise click.BadParameter(str(e))

    try:
        pipeline = CostPipeline.from_settings(settings, port_forward=not no_port_forward)
        try:
            report = pipeline.run(window)
        finally:
            pipeline.close()
    except MeshCostError as e:
        raise click.ClickException(str(e))

    if output_format == 'json':
        console.print_json(json.dumps(report.to_dict()))
    else:
        render_report(console, report, details=details)
