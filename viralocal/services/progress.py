"""Simulated progress for long-running wizard steps."""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


PROGRESS_SEED = 5
PROGRESS_CEILING = 95
PROGRESS_COMPLETE = 100


# Staged captions shown while the campaign is generated
CAMPAIGN_CAPTIONS = [
    (20, "Pesquisando tendências no Designi..."),
    (50, "Escrevendo copy persuasiva..."),
    (80, "Ajustando iluminação de estúdio (IA)..."),
]
CAMPAIGN_FINAL_CAPTION = "Finalizando renderização 8k..."


def next_progress(value: float) -> float:
    """
    Advance the simulated value by one tick.

    Moves faster at the beginning and slower near the end, and never goes
    past PROGRESS_CEILING on its own.
    """
    if value >= PROGRESS_CEILING:
        return value

    if value < 40:
        increment = 2
    elif value < 70:
        increment = 1
    else:
        increment = 0.5
    return min(PROGRESS_CEILING, value + increment)


def loading_caption(progress: float) -> str:
    """Caption for the campaign overlay at the given progress."""
    for threshold, caption in CAMPAIGN_CAPTIONS:
        if progress < threshold:
            return caption
    return CAMPAIGN_FINAL_CAPTION


class ProgressSimulator:
    """Ticks a progress value on the event loop while work is outstanding."""

    def __init__(
        self,
        on_tick: Callable[[float], None],
        tick_interval: float = 0.15,
    ):
        """
        Initialize progress simulator.

        Args:
            on_tick: Called with the new value after the seed and every tick
            tick_interval: Seconds between ticks
        """
        self.on_tick = on_tick
        self.tick_interval = tick_interval

        self.value: float = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, seed: float = PROGRESS_SEED) -> None:
        """Seed the value and start ticking. Restarts if already running."""
        self.stop()

        self.value = seed
        self.on_tick(self.value)
        self._task = asyncio.get_running_loop().create_task(self._tick_loop())

    def stop(self) -> None:
        """Stop ticking. The last value is kept."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _tick_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.tick_interval)

                new_value = next_progress(self.value)
                if new_value == self.value:
                    continue

                self.value = new_value
                self.on_tick(self.value)

        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Error in progress loop: {e}")
