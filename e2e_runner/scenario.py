"""
Per-target E2E scenario: connect, list tools, call both weather tools,
check their text, close.
"""

import asyncio
import logging
import re
from typing import Awaitable, Callable, Iterable, Optional

from .checks import call_tool_text, list_tool_names
from .config import RunnerSettings
from .connection import ConnectionNegotiator
from .errors import ContractAssertionError


logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("get_alerts", "get_forecast")

ALERTS_PATTERN = re.compile(r"event:|no active alerts|unable to fetch", re.IGNORECASE)
FORECAST_PATTERN = re.compile(r"temperature:|unable to fetch", re.IGNORECASE)


def expect(condition: bool, message: str) -> None:
    if not condition:
        raise ContractAssertionError(message)


class ScenarioRunner:
    """Runs the E2E scenario against one target or a list of targets."""

    def __init__(
        self,
        settings: Optional[RunnerSettings] = None,
        negotiator: Optional[ConnectionNegotiator] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or RunnerSettings()
        self.negotiator = negotiator or ConnectionNegotiator(self.settings, sleep=sleep)
        self._sleep = sleep

    async def run(self, target: str) -> None:
        """
        Run the scenario for one target.

        The connection is closed after ``close_delay`` whether the checks
        pass or raise. Any failure propagates to the caller.
        """
        connection = await self.negotiator.connect(target)
        try:
            names = await list_tool_names(connection.session)
            for name in REQUIRED_TOOLS:
                expect(name in names, f"{name} not listed")

            alerts = await call_tool_text(connection.session, "get_alerts")
            expect(
                ALERTS_PATTERN.search(alerts) is not None,
                f"get_alerts text does not match /{ALERTS_PATTERN.pattern}/i",
            )

            forecast = await call_tool_text(connection.session, "get_forecast")
            expect(
                FORECAST_PATTERN.search(forecast) is not None,
                f"get_forecast text does not match /{FORECAST_PATTERN.pattern}/i",
            )
        finally:
            await self._sleep(self.settings.close_delay)
            await connection.close()

        logger.debug(f"Scenario passed for {target}")

    async def run_all(self, targets: Iterable[str]) -> None:
        """Run targets one after another, stopping at the first failure."""
        for target in targets:
            print(f"\n=== Testing {target} ===")
            await self.run(target)
