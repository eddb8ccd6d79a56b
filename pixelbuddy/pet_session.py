"""Client session that keeps a pet alive between server round trips.

The session owns one ``PetState`` snapshot. Two independently scheduled
jobs share it through an asyncio lock: a decay job lowers the stats every
minute and a sync job pushes the rounded snapshot to the server every few
seconds. Closing the session attempts one last sync.
"""

import argparse
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from pixelbuddy.domain.pet_rules import ACTION_EFFECTS, DECAYING_STATS, clamp_stats, decay_stats
from pixelbuddy.load_secrets import api_url as default_api_url

DECAY_INTERVAL_SECONDS = 60
SYNC_INTERVAL_SECONDS = 5


@dataclass
class PetState:
    pet_id: str
    name: str
    hunger: float
    happiness: float
    energy: float
    hygiene: float
    health: float = 100
    world_open: bool = False
    world_code: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PetState":
        return cls(
            pet_id=str(payload["id"]),
            name=payload["name"],
            hunger=payload["hunger"],
            happiness=payload["happiness"],
            energy=payload["energy"],
            hygiene=payload["hygiene"],
            health=payload.get("health", 100),
            world_open=payload.get("world_open", False),
            world_code=payload.get("world_code"),
        )

    def stats(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in DECAYING_STATS}

    def update_stats(self, stats: Dict[str, float]) -> None:
        for name in DECAYING_STATS:
            setattr(self, name, stats[name])


class PetSession:
    def __init__(
        self,
        user_id: str,
        api_url: str = default_api_url,
        *,
        decay_interval: float = DECAY_INTERVAL_SECONDS,
        sync_interval: float = SYNC_INTERVAL_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.user_id = user_id
        self.decay_interval = decay_interval
        self.sync_interval = sync_interval
        self.state: Optional[PetState] = None
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._lock = asyncio.Lock()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=api_url.rstrip("/"), timeout=10)

    async def start(self) -> PetState:
        """Fetch (or create) the pet and start the decay and sync jobs

        Raises:
            RuntimeError: The session is already running

        Returns:
            PetState: The snapshot loaded from the server
        """
        if self.scheduler is not None:
            raise RuntimeError("Session already started")
        response = await self._client.get(f"/pet/{self.user_id}")
        response.raise_for_status()
        async with self._lock:
            self.state = PetState.from_payload(response.json())

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.decay_once, "interval", seconds=self.decay_interval, id="decay", max_instances=1
        )
        self.scheduler.add_job(
            self.sync_once, "interval", seconds=self.sync_interval, id="sync", max_instances=1
        )
        self.scheduler.start()
        logging.info(f"Session started for pet {self.state.pet_id} ({self.state.name})")
        return self.state

    async def decay_once(self) -> None:
        async with self._lock:
            if self.state is None:
                return
            self.state.update_stats(decay_stats(self.state.stats()))

    async def sync_once(self) -> bool:
        """Push the clamped snapshot to the server

        Returns:
            bool: False if there was nothing to sync or the request failed
        """
        async with self._lock:
            if self.state is None:
                return False
            pet_id = self.state.pet_id
            snapshot = clamp_stats(self.state.stats())

        try:
            response = await self._client.post(f"/pet/{pet_id}/sync", json=snapshot)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logging.error(f"Failed to sync pet {pet_id}: {e}")
            return False
        return True

    async def perform_action(self, action: str) -> PetState:
        """Apply a care action on the server and adopt the returned stats"""
        pet_id = self._require_state().pet_id
        response = await self._client.post(f"/pet/{pet_id}/action", json={"action": action})
        response.raise_for_status()
        async with self._lock:
            self.state = PetState.from_payload(response.json())
        return self.state

    async def set_world_open(self, world_open: bool) -> PetState:
        pet_id = self._require_state().pet_id
        response = await self._client.post(f"/pet/{pet_id}/world", json={"open": world_open})
        response.raise_for_status()
        data = response.json()
        async with self._lock:
            self.state.world_open = data["world_open"]
            self.state.world_code = data["world_code"]
        return self.state

    async def talk(self, message: str) -> str:
        pet_id = self._require_state().pet_id
        response = await self._client.post(f"/pet/{pet_id}/talk", json={"message": message})
        response.raise_for_status()
        return response.json()["response"]

    async def close(self) -> None:
        """Stop both jobs and make a best-effort final sync"""
        if self.scheduler is not None and self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        self.scheduler = None
        try:
            if await self.sync_once():
                logging.info("Final sync done")
        finally:
            if self._owns_client:
                await self._client.aclose()

    def _require_state(self) -> PetState:
        if self.state is None:
            raise RuntimeError("Session not started")
        return self.state


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keep a Pixel Buddy alive from the terminal")
    parser.add_argument("--user-id", type=str, help="Owner key of the pet", required=True)
    parser.add_argument("--api-url", type=str, help="Base URL of the API", default=default_api_url)
    parser.add_argument(
        "--action",
        action="append",
        default=[],
        choices=sorted(ACTION_EFFECTS),
        help="Care action to apply after connecting (repeatable)",
    )
    return parser


async def main(user_id: str, api_url: str, actions: List[str]):
    session = PetSession(user_id, api_url)
    state = await session.start()
    try:
        for action in actions:
            state = await session.perform_action(action)
        print(state)
        await asyncio.Event().wait()
    finally:
        await session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    parser = get_parser()
    args = parser.parse_args()
    try:
        asyncio.run(main(args.user_id, args.api_url, args.action))
    except KeyboardInterrupt:
        logging.info("Session stopped")
