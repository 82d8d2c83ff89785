"""
Battle clock - drives the countdown and the per-second ticks of one battle

The clock only emits events; every decision stays in BattleEngine. It stops on
its own as soon as the session leaves the state it is driving.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Optional

from arena.core import narration
from arena.core.battle import BATTLE, COUNTDOWN, BattleEngine


logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class BattleClock:
    """
    Scheduler for one play-through

    Args:
        engine: Engine whose session is driven
        sleep: Awaitable delay, replaced by a no-op in tests
    """

    def __init__(self, engine: BattleEngine, sleep: Optional[Sleep] = None):
        self.engine = engine
        self.sleep = sleep or asyncio.sleep

    async def run_countdown(self) -> bool:
        """
        Play the countdown script, then start the battle

        Returns:
            True if the battle was started
        """
        params = self.engine.params
        script = narration.countdown_script(
            params.countdown_init_delay, params.countdown_step, params.countdown_from
        )
        for delay, message in script:
            await self.sleep(delay)
            if self.engine.session.state != COUNTDOWN:
                return False
            self.engine.countdown_message(message)

        await self.sleep(params.countdown_step)
        if self.engine.session.state != COUNTDOWN:
            return False
        return self.engine.finish_countdown().state == BATTLE

    async def run_battle(self) -> None:
        """Tick once per interval until the battle ends"""
        session = self.engine.session
        if session.state != BATTLE:
            return
        battle_id = session.battle_id

        while True:
            await self.sleep(self.engine.params.tick_interval)
            session = self.engine.session
            if session.state != BATTLE or session.battle_id != battle_id:
                break
            # Source may block on HTTP, keep it off the event loop
            await asyncio.to_thread(self.engine.tick, battle_id)

        logger.info(f"🛑 Clock stopped for battle {battle_id} ({self.engine.session.state})")

    async def run(self) -> None:
        if await self.run_countdown():
            await self.run_battle()
