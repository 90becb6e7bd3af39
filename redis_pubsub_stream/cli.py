"""
Command-line interface for Redis Pub/Sub Stream.

Provides commands for publishing NDJSON records and inspecting configuration.
"""

import json
import sys

import click
import redis
import structlog
import yaml
from pydantic import ValidationError

from redis_pubsub_stream.config import (
    ConfigurationError,
    load_config,
    validate_config,
    validate_redis_connection,
)
from redis_pubsub_stream.exceptions import StreamError
from redis_pubsub_stream.streaming.factory import create_stream
from redis_pubsub_stream.utils.logging import configure_logging


logger = structlog.get_logger()


@click.group()
@click.option(
    "--config", "-c",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Output logs as JSON",
)
@click.pass_context
def main(ctx, config, verbose, json_logs):
    """Publish records to a Redis pub/sub channel."""
    ctx.ensure_object(dict)

    try:
        app_config = load_config(config)
    except (ValidationError, yaml.YAMLError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    # --verbose and --json-logs take precedence over the logging section
    configure_logging(
        level="DEBUG" if verbose else app_config.logging.level,
        json_output=json_logs or app_config.logging.json_output,
    )

    ctx.obj["config_path"] = config
    ctx.obj["config"] = app_config
    ctx.obj["verbose"] = verbose


def _stream_overrides(**values) -> dict:
    stream = {k: v for k, v in values.items() if v is not None}
    return {"stream": stream} if stream else {}


@main.command()
@click.argument("input_file", type=click.File("r"), default="-")
@click.option("--channel", "-C", default=None, help="Channel to publish on")
@click.option("--host", default=None, help="Redis server host")
@click.option("--port", type=int, default=None, help="Redis server port")
@click.option(
    "--backend",
    type=click.Choice(["redis", "log", "memory", "noop"]),
    default=None,
    help="Broker client backend (default: from config)",
)
@click.pass_context
def publish(ctx, input_file, channel, host, port, backend):
    """Publish NDJSON records, one per line, from INPUT_FILE or stdin.

    Examples:

    \b
    # Publish a file of orders
    redis-pubsub-stream publish orders.ndjson --channel orders

    \b
    # Pipe records in and log each payload instead of publishing
    cat orders.ndjson | redis-pubsub-stream -v publish --backend log
    """
    overrides = _stream_overrides(
        channel=channel,
        server_address=host,
        server_port=port,
        backend=backend,
    )
    if ctx.obj.get("verbose"):
        overrides.setdefault("stream", {})["verbose"] = True

    try:
        config = load_config(ctx.obj.get("config_path"), override_values=overrides)
        for warning in validate_config(config):
            click.echo(f"Warning: {warning}", err=True)
    except (ConfigurationError, ValidationError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    stream = create_stream(config.stream)
    stream.on("error", lambda e: logger.debug("publish_error_observed", error=str(e)))

    try:
        for line_number, line in enumerate(input_file, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                stream.destroy()
                click.echo(f"Invalid JSON on line {line_number}: {e.msg}", err=True)
                sys.exit(1)
            stream.write(record)

        stream.end()
        # Surfaces a failure from the publisher thread when fail_open is off
        stream.join(timeout=config.stream.close_timeout_seconds)
    except (StreamError, redis.RedisError) as e:
        logger.exception("publish_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        stream.close()

    stats = stream.stats
    click.echo(f"Published to channel '{stream.channel}'")
    click.echo(f"  Records published: {stats['published']:,}")
    click.echo(f"  Publish errors: {stats['publish_errors']:,}")


@main.command("validate-config")
@click.option(
    "--check-connection",
    is_flag=True,
    help="Also PING the configured Redis server",
)
@click.pass_context
def validate_config_cmd(ctx, check_connection):
    """Validate the configuration file."""
    try:
        config = ctx.obj["config"]
        warnings = validate_config(config)
        if check_connection:
            validate_redis_connection(config)

        click.echo("Configuration is valid.")

        if warnings:
            click.echo("\nWarnings:")
            for warning in warnings:
                click.echo(f"  - {warning}")

    except ConfigurationError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command("show-config")
@click.pass_context
def show_config(ctx):
    """Print the effective configuration as YAML."""
    config = ctx.obj["config"]
    click.echo(yaml.safe_dump(config.model_dump(), sort_keys=False).rstrip())


if __name__ == "__main__":
    main()
