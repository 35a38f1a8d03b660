"""
Voice session controller.

Owns at most one voice session per guild and drives it through an
explicit state machine:

    IDLE -> CONNECTING -> READY
    READY -> DISCONNECTED -> RECONNECTING -> READY        (healed within grace window)
    RECONNECTING -> (destroy link, backoff, reconnect) -> READY
    any -> DESTROYED                                      (leave, channel gone, retries exhausted)

Transport events are delivered through `handle_signalling` and
`handle_disconnect`; they never block. A join is ready once the transport
connect returns. Reconnects run in a per-session task that `leave` and
`join` cancel.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from verifybot import config
from verifybot.errors import ConnectError, ConnectFailure
from verifybot.models.voice_session import AbandonReason, SessionState, VoiceSession
from verifybot.services.voice_transport import VoiceTransport

logger = logging.getLogger(__name__)

AbandonCallback = Callable[[VoiceSession, AbandonReason], Awaitable[None]]


@dataclass
class RetryPolicy:
    """Exponential reconnect backoff with a ceiling and an attempt cap (0 = unlimited)."""

    base_delay: float = config.VOICE_RETRY_DELAY
    multiplier: float = config.VOICE_RETRY_BACKOFF
    max_delay: float = config.VOICE_RETRY_MAX_DELAY
    max_attempts: int = config.VOICE_MAX_RETRIES

    def delay_for(self, attempt: int) -> float:
        delay = self.base_delay * (self.multiplier ** max(attempt - 1, 0))
        return min(delay, self.max_delay)

    def exhausted(self, attempt: int) -> bool:
        return self.max_attempts > 0 and attempt > self.max_attempts


class VoiceSessionController:
    """Registry and lifecycle manager for per-guild voice sessions."""

    def __init__(
        self,
        transport: VoiceTransport,
        connect_timeout: float = config.VOICE_CONNECT_TIMEOUT,
        grace_period: float = config.VOICE_GRACE_PERIOD,
        retry_policy: Optional[RetryPolicy] = None,
        on_abandoned: Optional[AbandonCallback] = None,
        poll_interval: float = 0.5,
    ):
        self._transport = transport
        self.connect_timeout = connect_timeout
        self.grace_period = grace_period
        self.retry_policy = retry_policy or RetryPolicy()
        self.poll_interval = poll_interval
        self._on_abandoned = on_abandoned

        self._sessions: Dict[str, VoiceSession] = {}
        # Per-guild locks serialize join/leave
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def transport(self) -> VoiceTransport:
        return self._transport

    def set_abandon_callback(self, callback: Optional[AbandonCallback]):
        self._on_abandoned = callback

    def _get_lock(self, guild_id: str) -> asyncio.Lock:
        """Get or create a connection lock for the given guild."""
        if guild_id not in self._locks:
            self._locks[guild_id] = asyncio.Lock()
        return self._locks[guild_id]

    def get_session(self, guild_id: int | str) -> Optional[VoiceSession]:
        """Return the guild's live session, if any."""
        session = self._sessions.get(str(guild_id))
        if session is None or not session.is_live:
            return None
        return session

    def active_sessions(self) -> List[VoiceSession]:
        return [session for session in self._sessions.values() if session.is_live]

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def join(self, guild_id: int | str, channel: Any, origin: Any = None) -> VoiceSession:
        """
        Connect to a voice channel, replacing any existing session for the guild.

        Raises:
            ConnectError: the connection was not ready within the connect timeout
                or the transport refused it. The half-open link is torn down.
        """
        gid = str(guild_id)
        async with self._get_lock(gid):
            previous = self.get_session(gid)
            if previous is not None:
                logger.info(f"Replacing voice session in guild {gid} (channel {previous.channel_id})")
                await self._destroy(previous)

            session = VoiceSession(guild_id=gid, channel_id=str(channel.id), origin=origin)
            self._sessions[gid] = session
            self._transition(session, SessionState.CONNECTING)

            try:
                session.link = await self._open_link(session, channel)
            except BaseException:
                # Includes cancellation of the joining task.
                await self._destroy(session)
                raise

            session.retry_count = 0
            self._transition(session, SessionState.READY)
            logger.info(f"Voice session ready in guild {gid}, channel {session.channel_id}")
            return session

    async def leave(self, guild_id: int | str) -> bool:
        """Destroy the guild's session. Returns False if the bot was not connected."""
        gid = str(guild_id)
        async with self._get_lock(gid):
            session = self.get_session(gid)
            if session is None:
                # Not tracked, but py-cord may still hold a voice client.
                return await self._safe_disconnect(gid, None)
            await self._destroy(session)
            logger.info(f"Left voice channel {session.channel_id} in guild {gid}")
            return True

    async def shutdown(self):
        """Destroy every session (bot shutdown)."""
        for session in self.active_sessions():
            await self._destroy(session)

    # ------------------------------------------------------------------
    # Transport events
    # ------------------------------------------------------------------

    def handle_signalling(self, guild_id: int | str):
        """The transport is re-establishing the link on its own."""
        session = self.get_session(guild_id)
        if session is not None and session.state in (SessionState.DISCONNECTED, SessionState.RECONNECTING):
            session.recovered.set()

    def handle_disconnect(self, guild_id: int | str):
        """The transport reports the link was lost."""
        session = self.get_session(guild_id)
        if session is None:
            return
        if session.state is SessionState.CONNECTING:
            # The pending join owns this outcome; its timeout covers it.
            logger.debug(f"Ignoring disconnect while connecting in guild {session.guild_id}")
            return
        if session.state is not SessionState.READY:
            return

        self._transition(session, SessionState.DISCONNECTED)
        session.recovered = asyncio.Event()
        session.pending_retry = asyncio.create_task(self._recover(session))

    def check_health(self) -> List[str]:
        """Report ready sessions whose link has dropped. Returns the affected guild IDs."""
        dropped = []
        for session in self.active_sessions():
            if session.state is SessionState.READY and not self._transport.is_connected(session.link):
                logger.info(f"Voice link in guild {session.guild_id} is down")
                dropped.append(session.guild_id)
                self.handle_disconnect(session.guild_id)
        return dropped

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(self, session: VoiceSession, state: SessionState):
        if session.state is SessionState.DESTROYED:
            return
        logger.debug(f"Voice session {session.guild_id}: {session.state.value} -> {state.value}")
        session.state = state

    async def _open_link(self, session: VoiceSession, channel: Any) -> Any:
        try:
            return await asyncio.wait_for(self._transport.connect(channel), timeout=self.connect_timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Voice connect to {session.channel_id} in guild {session.guild_id} timed out")
            await self._safe_disconnect(session.guild_id, None)
            raise ConnectError(ConnectFailure.TIMEOUT) from e
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Voice connect to {session.channel_id} in guild {session.guild_id} failed: {e}")
            await self._safe_disconnect(session.guild_id, None)
            raise ConnectError(ConnectFailure.FAILED, str(e)) from e

    async def _safe_disconnect(self, guild_id: str, link: Any) -> bool:
        try:
            return await self._transport.disconnect(guild_id, link)
        except Exception as e:
            logger.warning(f"Error disconnecting voice client in guild {guild_id}: {e}")
            return False

    async def _destroy(self, session: VoiceSession):
        self._transition(session, SessionState.DESTROYED)

        task, session.pending_retry = session.pending_retry, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

        link, session.link = session.link, None
        await self._safe_disconnect(session.guild_id, link)

        if self._sessions.get(session.guild_id) is session:
            del self._sessions[session.guild_id]

    async def _wait_for_recovery(self, session: VoiceSession) -> bool:
        """Wait up to the grace period for the transport to heal on its own."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.grace_period
        while True:
            if session.recovered.is_set() or self._transport.is_connected(session.link):
                return True
            remaining = deadline - loop.time()
            if remaining <= 0:
                return False
            try:
                await asyncio.wait_for(session.recovered.wait(), timeout=min(remaining, self.poll_interval))
            except asyncio.TimeoutError:
                continue

    async def _recover(self, session: VoiceSession):
        gid = session.guild_id
        try:
            self._transition(session, SessionState.RECONNECTING)
            if await self._wait_for_recovery(session):
                logger.info(f"Voice link in guild {gid} recovered on its own")
                session.retry_count = 0
                self._transition(session, SessionState.READY)
                return

            logger.info(f"Voice link in guild {gid} did not recover within {self.grace_period}s, reconnecting")
            link, session.link = session.link, None
            await self._safe_disconnect(gid, link)

            while session.is_live:
                session.retry_count += 1
                if self.retry_policy.exhausted(session.retry_count):
                    await self._abandon(session, AbandonReason.RETRIES_EXHAUSTED)
                    return

                delay = self.retry_policy.delay_for(session.retry_count)
                logger.info(f"Reconnect attempt {session.retry_count} for guild {gid} in {delay:.1f}s")
                await asyncio.sleep(delay)

                channel = self._transport.resolve_channel(gid, session.channel_id)
                if channel is None:
                    await self._abandon(session, AbandonReason.CHANNEL_GONE)
                    return

                try:
                    session.link = await self._open_link(session, channel)
                except ConnectError as e:
                    logger.warning(f"Reconnect attempt {session.retry_count} for guild {gid} failed: {e}")
                    continue

                session.retry_count = 0
                self._transition(session, SessionState.READY)
                logger.info(f"Voice session in guild {gid} reconnected")
                return
        finally:
            if session.pending_retry is asyncio.current_task():
                session.pending_retry = None

    async def _abandon(self, session: VoiceSession, reason: AbandonReason):
        logger.warning(
            f"Abandoning voice session in guild {session.guild_id} "
            f"(channel {session.channel_id}): {reason.value}"
        )
        await self._destroy(session)
        if self._on_abandoned is None:
            return
        try:
            await self._on_abandoned(session, reason)
        except Exception:
            logger.exception(f"Abandon callback failed for guild {session.guild_id}")
