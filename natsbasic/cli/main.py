import sys
from typing import Annotated

import typer
from rich.markup import escape

from natsbasic import __version__, client
from natsbasic.cli.rich import get_console
from natsbasic.conf import get_settings
from natsbasic.errors import ConfigError, NatsBasicError
from natsbasic.logging import setup_logging
from natsbasic.models import InvocationConfig

app = typer.Typer(
    help="A simple NATS Pub/Sub demonstration client.",
    add_completion=False,
    rich_markup_mode="rich",
)

err_console = get_console(stderr=True)


def print_error(message: str | Exception) -> None:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(message))}")


def version_callback(value: bool):
    if value:
        get_console().print(f"nats-basic {__version__}")
        raise typer.Exit()


@app.command()
def pubsub(
    ctx: typer.Context,
    mode: Annotated[
        str | None,
        typer.Option(
            "--mode",
            "-mode",
            help='Operating mode: "pub" (publish) or "sub" (subscribe). Required.',
            show_default=False,
        ),
    ] = None,
    subject: Annotated[
        str | None,
        typer.Option(
            "--subject",
            "-subject",
            help=(
                "NATS subject to publish/subscribe to. Required. "
                "Subscribers may use the [bold]*[/bold] and [bold]>[/bold] wildcards."
            ),
            show_default=False,
        ),
    ] = None,
    msg: Annotated[
        str | None,
        typer.Option(
            "--msg",
            "-msg",
            help='Message payload to publish. Required only in "pub" mode.',
            show_default=False,
        ),
    ] = None,
    url: Annotated[
        str | None,
        typer.Option(
            "--url",
            "-url",
            help=(
                "NATS server URL. Defaults to the [bold]NATS_URL[/bold] setting, "
                "nats://127.0.0.1:4222 unless configured."
            ),
            show_default=False,
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
):
    """
    Publish one message to a NATS subject, or subscribe to a subject and print
    every message received until interrupted.

    Subscribe (start this first):
    [bold]nats-basic -mode sub -subject greetings[/bold]

    Publish (in another terminal):
    [bold]nats-basic -mode pub -subject greetings -msg "Hello NATS World!"[/bold]
    """
    settings = get_settings()
    setup_logging(settings)

    try:
        config = InvocationConfig.from_flags(mode, subject, msg, url or settings.url)
    except ConfigError as e:
        print_error(e)
        err_console.print(ctx.get_usage(), markup=False, highlight=False)
        raise typer.Exit(1) from None

    try:
        client.main(config, settings)
    except NatsBasicError as e:
        print_error(e)
        raise typer.Exit(1) from None


def run():
    try:
        app()
    except Exception as e:
        print_error(e)
        sys.exit(1)
