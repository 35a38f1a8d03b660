"""
Voice session model for per-guild voice connection state.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class SessionState(Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    RECONNECTING = "reconnecting"
    DESTROYED = "destroyed"


class AbandonReason(Enum):
    CHANNEL_GONE = "channel_gone"
    RETRIES_EXHAUSTED = "retries_exhausted"


@dataclass(eq=False)
class VoiceSession:
    """
    In-memory state of the bot's voice connection in one guild.

    Attributes:
        guild_id: Guild the session belongs to.
        channel_id: Voice channel the session targets; reconnects resolve it again.
        state: Current lifecycle state.
        retry_count: Reconnect attempts since the link was last ready.
        pending_retry: Recovery task, if a reconnect is in progress.
        link: Transport connection object (a py-cord VoiceClient in production).
        origin: Text channel that requested the join; told if the session is abandoned.
        recovered: Set when the transport reports it healed during the grace window.
    """

    guild_id: str
    channel_id: str
    state: SessionState = SessionState.IDLE
    retry_count: int = 0
    pending_retry: Optional[asyncio.Task] = None
    link: Any = None
    origin: Any = None
    recovered: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def is_live(self) -> bool:
        return self.state is not SessionState.DESTROYED
