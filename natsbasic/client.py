import asyncio
import contextlib
import signal
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from enum import StrEnum
from typing import Any

import nats
from nats.aio.client import Client as NATS
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription
from nats.errors import Error as NatsError

from natsbasic.conf import Settings
from natsbasic.errors import (
    BrokerConnectionError,
    DrainError,
    FlushError,
    NatsBasicError,
    PublishError,
    SubscribeError,
)
from natsbasic.logging import ModeLoggerAdapter, get_mode_logger
from natsbasic.models import InvocationConfig, Mode
from natsbasic.subjects import has_wildcards

MessageHandler = Callable[[Msg], Awaitable[None]]

TERMINATION_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class State(StrEnum):
    IDLE = "idle"
    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"
    DRAINING = "draining"
    CLOSED = "closed"


def connection_options(settings: Settings) -> dict[str, Any]:
    options: dict[str, Any] = {
        "name": settings.name,
        "connect_timeout": settings.connect_timeout,
        "reconnect_time_wait": settings.reconnect_time_wait,
        "max_reconnect_attempts": settings.max_reconnect_attempts,
        "drain_timeout": settings.drain_timeout,
        "retry_on_failed_connect": settings.retry_on_failed_connect,
    }
    if settings.user:
        options["user"] = settings.user
        options["password"] = settings.password
    return options


@contextlib.asynccontextmanager
async def connect(
    url: str,
    log: ModeLoggerAdapter,
    max_reconnect_attempts: int = 60,
    retry_on_failed_connect: bool = False,
    **options: Any,
) -> AsyncGenerator[NATS]:
    """
    Open a connection to the NATS server at `url` and close it on exit.

    Unless `retry_on_failed_connect` is set, only one attempt is made to
    reach the server; the reconnect budget applies once connected.
    Extra keyword arguments are handed to `nats.connect` unchanged.
    """
    initial_attempts = max_reconnect_attempts if retry_on_failed_connect else 0

    async def on_error(e: Exception) -> None:
        log.warning(f"Connection error: {e}")

    async def on_disconnected() -> None:
        log.warning("Disconnected from NATS server.")

    async def on_reconnected() -> None:
        log.info(f"Reconnected to NATS server at {nc.connected_url.geturl()}.")

    async def on_closed() -> None:
        log.debug("Connection closed.")

    log.info(f"Connecting to NATS server at {url} ...")
    try:
        nc = await nats.connect(
            servers=[url],
            error_cb=on_error,
            disconnected_cb=on_disconnected,
            reconnected_cb=on_reconnected,
            closed_cb=on_closed,
            max_reconnect_attempts=initial_attempts,
            **options,
        )
    except (NatsError, OSError, asyncio.TimeoutError) as e:
        raise BrokerConnectionError(url, e) from e

    if not retry_on_failed_connect:
        nc.options["max_reconnect_attempts"] = max_reconnect_attempts
    log.info("Connected to NATS server successfully.")
    try:
        yield nc
    finally:
        await nc.close()


async def publish(
    nc: NATS,
    subject: str,
    payload: str,
    log: ModeLoggerAdapter,
    flush_timeout: float = 10,
) -> None:
    log.info(f'Publishing to subject "{subject}" ...')
    # non UTF-8 argv bytes arrive as surrogate escapes, send them back unchanged
    data = payload.encode(errors="surrogateescape")
    try:
        await nc.publish(subject, data)
    except NatsError as e:
        raise PublishError(f"failed to publish: {e}") from e

    # publish only buffers the message, it is not on the wire until flushed
    try:
        await nc.flush(timeout=flush_timeout)
    except (NatsError, asyncio.TimeoutError) as e:
        raise FlushError(f"failed to flush: {str(e) or type(e).__name__}") from e

    log.info(f'Message published, subject: "{subject}", payload: "{data.decode(errors="replace")}"')


@contextlib.contextmanager
def termination_event(
    log: ModeLoggerAdapter,
    signals: tuple[signal.Signals, ...] = TERMINATION_SIGNALS,
) -> Generator[asyncio.Event]:
    """Yield an event that is set as soon as one of `signals` is received."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()

    def handle_signal(sig: signal.Signals) -> None:
        log.info(f"Received signal {sig.name}, shutting down gracefully ...")
        stop.set()

    for sig in signals:
        loop.add_signal_handler(sig, handle_signal, sig)
    try:
        yield stop
    finally:
        for sig in signals:
            loop.remove_signal_handler(sig)


class Subscriber:
    """
    Subscription to a single subject over an already open connection.

    The subscriber moves through ``connected -> subscribed -> draining ->
    closed``. Messages arriving once it is closed are never handed to the
    handler.
    """

    def __init__(
        self,
        nc: NATS,
        subject: str,
        log: ModeLoggerAdapter,
        handler: MessageHandler | None = None,
    ):
        self.subject = subject
        self.state = State.CONNECTED if nc.is_connected else State.IDLE
        self.received = 0
        self._nc = nc
        self._log = log
        self._handler = handler or self.log_message
        self._subscription: Subscription | None = None

    def _set_state(self, state: State) -> None:
        self._log.debug(f"Subscriber state {self.state} -> {state}")
        self.state = state

    async def log_message(self, msg: Msg) -> None:
        self._log.info(f"Received on [{msg.subject}]: {msg.data.decode(errors='replace')}")

    async def on_message(self, msg: Msg) -> None:
        if self.state is State.CLOSED:
            self._log.debug(f"Message on [{msg.subject}] received after close, ignored.")
            return
        self.received += 1
        await self._handler(msg)

    async def subscribe(self) -> None:
        if self.state is not State.CONNECTED:
            raise SubscribeError(f"cannot subscribe to {self.subject!r} while {self.state}.")
        try:
            self._subscription = await self._nc.subscribe(self.subject, cb=self.on_message)
        except NatsError as e:
            self._set_state(State.CLOSED)
            raise SubscribeError(f"failed to subscribe to {self.subject!r}: {e}") from e
        self._set_state(State.SUBSCRIBED)
        if has_wildcards(self.subject):
            self._log.debug(f'"{self.subject}" is a wildcard subscription.')

    async def drain(self) -> None:
        if self.state is not State.SUBSCRIBED:
            return
        self._set_state(State.DRAINING)
        try:
            await self._nc.drain()
        except (NatsError, asyncio.TimeoutError) as e:
            error = DrainError(f"error during drain: {str(e) or type(e).__name__}")
            self._log.warning(str(error))
        finally:
            self._subscription = None
            self._set_state(State.CLOSED)

    async def run(self, stop: asyncio.Event) -> None:
        await self.subscribe()
        self._log.info(
            f'Subscribing to subject "{self.subject}", waiting for messages (Ctrl+C to quit) ...'
        )
        try:
            await stop.wait()
        finally:
            await self.drain()


async def run(config: InvocationConfig, settings: Settings) -> None:
    log = get_mode_logger(config.mode)
    try:
        async with connect(config.url, log, **connection_options(settings)) as nc:
            if config.mode is Mode.PUBLISH:
                await publish(
                    nc,
                    config.subject,
                    config.payload,  # type: ignore[arg-type]
                    log,
                    flush_timeout=settings.flush_timeout,
                )
            else:
                with termination_event(log) as stop:
                    await Subscriber(nc, config.subject, log).run(stop)
    except NatsBasicError as e:
        log.debug(f"Aborting: {e}")
        raise
    log.info("Bye!")


def main(config: InvocationConfig, settings: Settings) -> None:
    asyncio.run(run(config, settings))
