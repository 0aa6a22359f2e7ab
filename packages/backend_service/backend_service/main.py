"""Main entry point for the backend service CLI."""

import asyncio
from pathlib import Path
from typing import Any, TypeVar

import typer
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from backend_service.bootstrap import run as run_service
from backend_service.config import get_config
from backend_service.domain.exceptions import BackendServiceError
from backend_service.infrastructure.logging import LogLevel, get_logger, setup_logging
from backend_service.infrastructure.messaging import NATSClient
from backend_service.version import __version__

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

app = typer.Typer(help="Backend service that prints every message it receives.")


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for value in values:
        key, sep, header_value = value.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got '{value}'", param_hint="--header")
        headers[key] = header_value
    return headers


def _override(section: ModelT, **values: Any) -> ModelT:
    """Return a validated copy of a config section with non-None values applied."""
    data = section.model_dump()
    data.update({k: v for k, v in values.items() if v is not None})
    return type(section).model_validate(data)


@app.command()  # type: ignore[misc]
def run(
    name: str | None = typer.Option(None, "--name", help="Service name to advertise."),
    host: str | None = typer.Option(None, "--host", help="Interface for the HTTP listener."),
    port: int | None = typer.Option(
        None, "--port", min=0, max=65535, help="HTTP port, 0 for an OS-assigned port."
    ),
    nats_url: list[str] | None = typer.Option(None, "--nats-url", help="NATS server URL."),
    destination: str | None = typer.Option(
        None, "--destination", help="Destination to listen on."
    ),
    log_level: LogLevel | None = typer.Option(None, "--log-level", help="Log level."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Structured JSON logging."),
    log_file: Path | None = typer.Option(
        None, "--log-file", dir_okay=False, help="Also write logs to this rotating file."
    ),
) -> None:
    """Start the service and run until interrupted."""
    try:
        base = get_config()
        config = base.model_copy(
            update={
                "service": _override(base.service, name=name, host=host, port=port),
                "messaging": _override(
                    base.messaging, servers=nats_url or None, destination=destination
                ),
                "logging": _override(
                    base.logging,
                    level=log_level,
                    json_format=json_logs or None,
                    file_path=log_file,
                ),
            }
        )
    except PydanticValidationError as e:
        raise typer.BadParameter(str(e)) from e

    setup_logging(config.logging.to_logging_config(config.service.name))

    try:
        asyncio.run(run_service(config))
    except BackendServiceError as e:
        logger.error(
            "Service terminated",
            exc_info=e,
            extra={"error_code": e.error_code, "details": e.details},
        )
        raise typer.Exit(code=1) from e


@app.command()  # type: ignore[misc]
def send(
    destination: str = typer.Argument(..., help="Destination to publish to."),
    body: str = typer.Argument(..., help="Message body."),
    header: list[str] = typer.Option([], "--header", "-H", help="Header as KEY=VALUE."),
    nats_url: str | None = typer.Option(None, "--nats-url", help="NATS server URL."),
) -> None:
    """Publish one message to a destination."""
    headers = _parse_headers(header) or None
    config = get_config()
    client = NATSClient(
        servers=nats_url or config.messaging.servers,
        name=f"{config.service.name}-cli",
    )

    async def _send() -> None:
        await client.connect()
        try:
            await client.publish(destination, body, headers=headers)
        finally:
            await client.disconnect()

    try:
        asyncio.run(_send())
    except BackendServiceError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e

    typer.echo(f"Sent message to '{destination}'")


@app.command()  # type: ignore[misc]
def version() -> None:
    """Show the backend service version."""
    typer.echo(f"backend-service version {__version__}")


if __name__ == "__main__":
    app()
