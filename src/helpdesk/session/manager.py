"""Session manager owning one actor per session."""

import asyncio
from typing import Any

from .actor import Job, SessionActor


class SessionManager:
    """Routes work for each session id to that session's actor.

    Actors are created lazily on first use. Different sessions share nothing
    and run in parallel.
    """

    def __init__(self) -> None:
        self._actors: dict[str, SessionActor] = {}

    def get_actor(self, session_id: str) -> SessionActor:
        """Get or create the actor for a session."""
        if session_id not in self._actors:
            self._actors[session_id] = SessionActor(session_id)
        return self._actors[session_id]

    def has_session(self, session_id: str) -> bool:
        return session_id in self._actors

    def list_sessions(self) -> list[str]:
        return list(self._actors.keys())

    def is_busy(self, session_id: str) -> bool:
        """Check if a session has queued or running work."""
        actor = self._actors.get(session_id)
        return actor is not None and actor.pending > 0

    async def run(self, session_id: str, job: Job) -> Any:
        """Run a job on the session's actor and return its result."""
        return await self.get_actor(session_id).call(job)

    async def discard(self, session_id: str) -> None:
        """Drop an idle session's actor. Busy actors are kept."""
        actor = self._actors.get(session_id)
        if actor is None or actor.pending > 0:
            return
        del self._actors[session_id]
        await actor.drain()

    async def shutdown(self) -> None:
        """Wait for every actor to finish its queued work and forget them all."""
        actors = list(self._actors.values())
        self._actors.clear()
        await asyncio.gather(*(actor.drain() for actor in actors))
