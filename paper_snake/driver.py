"""
Fixed-cadence tick driver.

Runs SimulationSession.tick() once per elapsed interval of wall-clock time,
independent of how often the caller renders.
"""

import logging
from typing import Callable, Optional

import pygame

from paper_snake.engine import SimulationSession


logger = logging.getLogger(__name__)

Clock = Callable[[], int]


class TickDriver:
    """
    Drives a session at a fixed tick interval.

    Each call to update() runs every tick that has come due since the last
    call, up to max_catchup. Any larger backlog is dropped so a stalled
    window does not replay seconds of movement at once.
    """

    __slots__ = ['session', 'interval_ms', 'max_catchup', '_clock', '_last_tick', 'running']

    def __init__(self, session: SimulationSession, interval_ms: Optional[int] = None,
                 clock: Optional[Clock] = None, max_catchup: Optional[int] = None):
        """
        Initialize driver and start its interval from the current time.

        Args:
            session: Session to advance
            interval_ms: Milliseconds per tick, defaults to the session config
            clock: Millisecond time source, pygame.time.get_ticks by default
            max_catchup: Most ticks run by a single update()
        """
        self.session = session
        self.interval_ms = interval_ms or session.config.TICK_INTERVAL_MS
        self.max_catchup = max_catchup or session.config.MAX_CATCHUP_TICKS
        self._clock = clock if clock is not None else pygame.time.get_ticks
        self._last_tick = self._clock()
        self.running = True

    def update(self) -> int:
        """
        Run any ticks that are due.

        Returns:
            Number of ticks run
        """
        if not self.running:
            return 0

        now = self._clock()
        due = (now - self._last_tick) // self.interval_ms
        if due <= 0:
            return 0

        if due > self.max_catchup:
            logger.debug("Dropping %d overdue ticks", due - self.max_catchup)
            due = self.max_catchup
            self._last_tick = now - self.interval_ms * due

        ran = 0
        while ran < due:
            self._last_tick += self.interval_ms
            self.session.tick()
            ran += 1
            if self.session.is_game_over:
                self.stop()
                break
        return ran

    def stop(self):
        """Stop driving; later update() calls leave the session untouched."""
        self.running = False
