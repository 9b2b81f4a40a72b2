"""
Client connections and transport negotiation.

A ``ClientConnection`` is one initialized MCP ``ClientSession`` bound to one
transport and one URL. ``ConnectionNegotiator`` walks a fixed attempt plan
(Streamable HTTP first, then SSE candidates) and returns the first
connection that initializes.
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Awaitable, Callable, List, Optional

import mcp.types as types
from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.client.streamable_http import streamablehttp_client

from .config import RunnerSettings
from .errors import ConnectionFailedError
from .targets import sse_candidates, validate_target


logger = logging.getLogger(__name__)


class TransportKind(Enum):
    """Transport bindings the runner can dial."""
    STREAMABLE_HTTP = "streamable"
    SSE = "sse"

    @property
    def label(self) -> str:
        return "Streamable HTTP" if self is TransportKind.STREAMABLE_HTTP else "SSE"


class ClientConnection:
    """
    A live MCP session over one transport.

    The transport context and the session are held in an ``AsyncExitStack``;
    ``close()`` unwinds it once and later calls do nothing.
    """

    def __init__(self, kind: TransportKind, url: str, session: ClientSession, exit_stack: AsyncExitStack):
        self.kind = kind
        self.url = url
        self.session = session
        self._exit_stack = exit_stack
        self._closed = False

    @classmethod
    async def open(
        cls,
        kind: TransportKind,
        url: str,
        settings: Optional[RunnerSettings] = None,
    ) -> "ClientConnection":
        """
        Open a transport to ``url`` and run the initialize handshake.

        Args:
            kind: Transport to use
            url: Endpoint URL
            settings: Timeout and client identity (defaults if omitted)

        Returns:
            An initialized connection

        Raises:
            Exception: Whatever the transport or session raised; the
                partially opened stack is closed first. A failed connect
                surfaces as the transport's ``ExceptionGroup`` rather than
                the cancellation it triggered
        """
        settings = settings or RunnerSettings()
        stack = AsyncExitStack()
        try:
            if kind is TransportKind.SSE:
                read_stream, write_stream = await stack.enter_async_context(
                    sse_client(url, timeout=settings.timeout)
                )
            else:
                read_stream, write_stream, _ = await stack.enter_async_context(
                    streamablehttp_client(url)
                )

            session = await stack.enter_async_context(
                ClientSession(
                    read_stream,
                    write_stream,
                    read_timeout_seconds=timedelta(seconds=settings.timeout),
                    client_info=types.Implementation(
                        name=settings.client_name,
                        version=settings.client_version,
                    ),
                )
            )
            await session.initialize()
        except BaseException as e:
            # Unwind with the error in hand so a transport task group can absorb
            # the cancel it issued when its own connect failed
            if await stack.__aexit__(type(e), e, e.__traceback__):
                raise ConnectionError(f"{kind.label} transport to {url} closed during initialize") from e
            raise

        return cls(kind, url, session, stack)

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Close the session and transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._exit_stack.aclose()
        logger.debug(f"Closed {self.kind.value} connection to {self.url}")

    async def __aenter__(self) -> "ClientConnection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


Connector = Callable[[TransportKind, str], Awaitable[ClientConnection]]


@dataclass(frozen=True)
class ConnectionAttempt:
    """One step of the negotiation plan."""
    kind: TransportKind
    url: str
    retry_delay: float


class ConnectionNegotiator:
    """
    Connects to a target, preferring Streamable HTTP and falling back to SSE.

    The plan is ``streamable_attempts`` Streamable HTTP attempts against the
    target followed by one SSE attempt per candidate URL. A failed attempt
    waits its ``retry_delay`` only when the next attempt uses the same
    transport, so there is no wait after the last attempt of either phase.
    """

    def __init__(
        self,
        settings: Optional[RunnerSettings] = None,
        connector: Optional[Connector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the negotiator.

        Args:
            settings: Attempt counts and delays
            connector: Coroutine opening one connection; defaults to
                ``ClientConnection.open``
            sleep: Coroutine used for retry delays
        """
        self.settings = settings or RunnerSettings()
        self._connector = connector or self._open
        self._sleep = sleep

    async def _open(self, kind: TransportKind, url: str) -> ClientConnection:
        return await ClientConnection.open(kind, url, self.settings)

    def attempt_plan(self, url: str) -> List[ConnectionAttempt]:
        """Return the ordered attempts made for ``url``."""
        plan = [
            ConnectionAttempt(TransportKind.STREAMABLE_HTTP, url, self.settings.streamable_retry_delay)
            for _ in range(self.settings.streamable_attempts)
        ]
        plan.extend(
            ConnectionAttempt(TransportKind.SSE, candidate, self.settings.sse_retry_delay)
            for candidate in sse_candidates(url)
        )
        return plan

    async def connect(self, url: str) -> ClientConnection:
        """
        Return the first connection that initializes.

        Raises:
            InvalidTargetError: If ``url`` is not an absolute http(s) URL
            ConnectionFailedError: If every attempt in the plan failed
        """
        validate_target(url)
        plan = self.attempt_plan(url)

        for index, attempt in enumerate(plan):
            try:
                connection = await self._connector(attempt.kind, attempt.url)
            except Exception as e:
                logger.debug(
                    f"Attempt {index + 1}/{len(plan)} ({attempt.kind.value}) "
                    f"to {attempt.url} failed: {e!r}",
                    extra={"target": url},
                )
                next_attempt = plan[index + 1] if index + 1 < len(plan) else None
                if next_attempt is not None and next_attempt.kind is attempt.kind:
                    await self._sleep(attempt.retry_delay)
                continue

            print(f"[ok] Connected ({attempt.kind.value}) -> {attempt.url}")
            return connection

        transports = [kind.label for kind in TransportKind]
        raise ConnectionFailedError(
            f"Unable to connect via {' or '.join(transports)}",
            target=url,
            transports=transports,
            attempts=len(plan),
        )
