"""CRUD helpers for pets, memories and the AI brain log.

These helpers never commit. The service layer opens the session and wraps
calls in ``session.begin()``.
"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pixelbuddy.models.schemas import AiBrain, Memory, Pet


class ReadData:
    @staticmethod
    async def read_pet(pet_id: UUID, session: AsyncSession, for_update: bool = False) -> Optional[Pet]:
        """Read a pet by its id

        Args:
            pet_id (UUID): To identify the pet
            for_update (bool): Lock the row until the surrounding transaction ends

        Returns:
            Optional[Pet]: None if the pet does not exist
        """
        stmt = select(Pet).where(Pet.id == pet_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def read_pet_by_user_id(user_id: str, session: AsyncSession) -> Optional[Pet]:
        stmt = select(Pet).where(Pet.user_id == user_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def world_code_exists(world_code: str, session: AsyncSession) -> bool:
        """Check the code against every pet, open or not"""
        stmt = select(Pet.id).where(Pet.world_code == world_code).limit(1)
        result = await session.execute(stmt)
        return result.scalars().first() is not None

    @staticmethod
    async def read_open_world(world_code: str, session: AsyncSession) -> Optional[Pet]:
        stmt = select(Pet).where(Pet.world_code == world_code, Pet.world_open.is_(True))
        result = await session.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def read_open_worlds(limit: int, session: AsyncSession) -> List[Pet]:
        """Read open worlds, most visited first

        Args:
            limit (int): Maximum number of worlds to return

        Returns:
            List[Pet]: Pets whose world is open
        """
        stmt = (
            select(Pet)
            .where(Pet.world_open.is_(True))
            .order_by(desc(Pet.visits_count), desc(Pet.last_seen))
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def read_memories(pet_id: UUID, limit: int, session: AsyncSession) -> List[Memory]:
        """Read the most recent memories of a pet, newest first

        Args:
            pet_id (UUID): To identify the pet
            limit (int): Truncate the log to this many entries

        Returns:
            List[Memory]: Memory rows ordered by created_at descending
        """
        stmt = (
            select(Memory)
            .where(Memory.pet_id == pet_id)
            .order_by(desc(Memory.created_at), desc(Memory.id))
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


class CreateData:
    @staticmethod
    async def add_pet(user_id: str, name: str, session: AsyncSession) -> Pet:
        """Add a new pet with default stats to the session

        Args:
            user_id (str): Owner key
            name (str): Initial name

        Returns:
            Pet: The flushed pet row with its generated id
        """
        new_pet = Pet(user_id=user_id, name=name)
        session.add(new_pet)
        await session.flush()
        await session.refresh(new_pet)
        return new_pet

    @staticmethod
    async def add_memory(pet_id: UUID, memory_type: str, content: str, session: AsyncSession) -> Memory:
        new_memory = Memory(pet_id=pet_id, memory_type=memory_type, content=content)
        session.add(new_memory)
        await session.flush()
        return new_memory

    @staticmethod
    async def add_ai_brain(
        prompt: str, response: str, context: dict, model: str, session: AsyncSession
    ) -> AiBrain:
        new_entry = AiBrain(prompt=prompt, response=response, context=context, model=model)
        session.add(new_entry)
        await session.flush()
        return new_entry


class UpdateData:
    @staticmethod
    async def update_pet_stats(
        pet: Pet,
        stats: Dict[str, int],
        session: AsyncSession,
        timestamp_column: Optional[str] = None,
    ) -> Pet:
        """Write already clamped stats to a pet row

        Args:
            pet (Pet): Row loaded in this session
            stats (Dict[str, int]): Stat values keyed by column name
            timestamp_column (Optional[str]): last_fed, last_played, ... to stamp with now
        """
        for name, value in stats.items():
            setattr(pet, name, value)
        if timestamp_column is not None:
            setattr(pet, timestamp_column, datetime.now())
        await session.flush()
        await session.refresh(pet)
        return pet

    @staticmethod
    async def update_pet_name(pet: Pet, name: str, session: AsyncSession) -> Pet:
        pet.name = name
        await session.flush()
        await session.refresh(pet)
        return pet

    @staticmethod
    async def update_world(
        pet: Pet, world_open: bool, world_code: Optional[str], session: AsyncSession
    ) -> Pet:
        """Open or close the world of a pet

        Args:
            pet (Pet): Row loaded in this session
            world_open (bool): New open flag
            world_code (Optional[str]): New code, None when closing
        """
        pet.world_open = world_open
        pet.world_code = world_code
        await session.flush()
        await session.refresh(pet)
        return pet

    @staticmethod
    async def increment_visits(pet_id: UUID, session: AsyncSession) -> None:
        stmt = (
            update(Pet)
            .where(Pet.id == pet_id)
            .values(visits_count=Pet.visits_count + 1)
        )
        await session.execute(stmt)
