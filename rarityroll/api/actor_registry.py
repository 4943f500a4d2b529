"""In-memory registry of actors and their roll states."""

import threading
import uuid
from typing import Optional

from rarityroll.engine.rarity_engine import RarityEngine
from rarityroll.models.state import RollState


class ActorSession:
    """One actor: its roll state, balances and the lock serializing its rolls."""

    def __init__(self, actor_id: str, state: RollState, balances: Optional[dict[str, float]] = None) -> None:
        self.actor_id = actor_id
        self.state = state
        self.balances: dict[str, float] = balances if balances is not None else {}
        self.lock = threading.Lock()


class ActorRegistry:
    """Creates, looks up and discards actor sessions. Safe to share between request threads."""

    def __init__(self, engine: RarityEngine) -> None:
        self._engine = engine
        self._sessions: dict[str, ActorSession] = {}
        self._lock = threading.Lock()

    @property
    def engine(self) -> RarityEngine:
        return self._engine

    def create(
        self,
        seed: Optional[int] = None,
        balances: Optional[dict[str, float]] = None,
        pity_target_tiers: Optional[list[int]] = None,
        actor_id: Optional[str] = None,
    ) -> ActorSession:
        """Register a new actor with a fresh state."""
        actor_id = actor_id or str(uuid.uuid4())
        state = self._engine.new_state(seed=seed, pity_target_tiers=pity_target_tiers)
        session = ActorSession(actor_id, state, balances)
        with self._lock:
            if actor_id in self._sessions:
                raise ValueError(f"Actor {actor_id} already exists")
            self._sessions[actor_id] = session
        return session

    def get(self, actor_id: str) -> Optional[ActorSession]:
        with self._lock:
            return self._sessions.get(actor_id)

    def remove(self, actor_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(actor_id, None) is not None

    def list_ids(self) -> list[str]:
        with self._lock:
            return list(self._sessions)
