"""DB service layer for pet use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- CRUD helpers never commit; every use case runs inside session.begin().
"""

import logging
import random
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from pixelbuddy.crud import CreateData, ReadData, UpdateData
from pixelbuddy.db import Session
from pixelbuddy.domain.pet_rules import (
    ACTION_MEMORIES,
    ACTION_TIMESTAMPS,
    BIRTH_MEMORY,
    DECAYING_STATS,
    DEFAULT_PET_NAME,
    apply_action as apply_action_rules,
    clamp_stats,
    conversation_memory,
    validate_action,
    validate_name,
    visit_memory,
)
from pixelbuddy.domain.world_code import (
    MAX_GENERATION_ATTEMPTS,
    generate_world_code,
    is_valid_world_code,
    normalize_world_code,
)
from pixelbuddy.exceptions import GenerationExhausted, NotFound
from pixelbuddy.models.schema_models import (
    MemorySchema,
    OpenWorldSchema,
    PetSchema,
    VisitedPetSchema,
    WorldSchema,
)

OPEN_WORLDS_LIMIT = 20
CHAT_MEMORY_LIMIT = 5
MEMORY_LIST_LIMIT = 50

_rng = random.SystemRandom()


def _pet_stats(pet) -> Dict[str, int]:
    return {name: getattr(pet, name) for name in DECAYING_STATS + ("health",)}


def parse_pet_id(pet_id: str) -> UUID:
    """Parse a path pet id; anything that is not a UUID names no pet"""
    try:
        return UUID(pet_id)
    except ValueError:
        raise NotFound(f"Pet {pet_id} not found")


async def _require_pet(pet_id: UUID, session, for_update: bool = False):
    pet = await ReadData.read_pet(pet_id, session, for_update=for_update)
    if pet is None:
        raise NotFound(f"Pet {pet_id} not found")
    return pet


async def get_or_create_pet(user_id: str) -> PetSchema:
    """Return the pet owned by user_id, creating it with the birth memory if missing."""
    async with Session() as session:
        async with session.begin():
            pet = await ReadData.read_pet_by_user_id(user_id, session)
            if pet is not None:
                return PetSchema.model_validate(pet)

    try:
        async with Session() as session:
            async with session.begin():
                pet = await CreateData.add_pet(user_id, DEFAULT_PET_NAME, session)
                await CreateData.add_memory(pet.id, "action", BIRTH_MEMORY, session)
                logging.info(f"Created pet {pet.id} for user {user_id}")
                return PetSchema.model_validate(pet)
    except IntegrityError:
        # Another request created it between the read and the insert.
        logging.warning(f"Pet for user {user_id} was created concurrently, reading it back")
        async with Session() as session:
            pet = await ReadData.read_pet_by_user_id(user_id, session)
            return PetSchema.model_validate(pet)


async def apply_action(pet_id: UUID, action: str) -> PetSchema:
    """Apply a care action, stamp its timestamp and log it as a memory

    Args:
        pet_id (UUID): To identify the pet
        action (str): feed, play, clean or sleep

    Raises:
        ValidationError: Unknown action
        NotFound: The pet does not exist

    Returns:
        PetSchema: The pet after the action
    """
    validate_action(action)
    async with Session() as session:
        async with session.begin():
            pet = await _require_pet(pet_id, session, for_update=True)
            new_stats = apply_action_rules(_pet_stats(pet), action)
            pet = await UpdateData.update_pet_stats(
                pet, new_stats, session, timestamp_column=ACTION_TIMESTAMPS[action]
            )
            await CreateData.add_memory(pet.id, "action", ACTION_MEMORIES[action], session)
            return PetSchema.model_validate(pet)


async def rename_pet(pet_id: UUID, name: str) -> PetSchema:
    name = validate_name(name)
    async with Session() as session:
        async with session.begin():
            pet = await _require_pet(pet_id, session, for_update=True)
            pet = await UpdateData.update_pet_name(pet, name, session)
            return PetSchema.model_validate(pet)


async def sync_stats(pet_id: UUID, stats: Dict[str, float]) -> PetSchema:
    """Overwrite the decaying stats with a clamped client snapshot

    Args:
        pet_id (UUID): To identify the pet
        stats (Dict[str, float]): hunger, happiness, energy and hygiene from the client

    Returns:
        PetSchema: The stored pet
    """
    clamped = clamp_stats({name: stats[name] for name in DECAYING_STATS})
    async with Session() as session:
        async with session.begin():
            pet = await _require_pet(pet_id, session, for_update=True)
            pet = await UpdateData.update_pet_stats(pet, clamped, session)
            return PetSchema.model_validate(pet)


async def set_world_open(pet_id: UUID, world_open: bool, rng: Optional[random.Random] = None) -> WorldSchema:
    """Open the world of a pet with a fresh code, or close it

    The uniqueness check and the update are not one atomic step; the unique
    constraint on world_code rejects the loser of a race.

    Args:
        pet_id (UUID): To identify the pet
        world_open (bool): Open (and regenerate the code) or close
        rng (Optional[random.Random]): Source of randomness for the code

    Raises:
        NotFound: The pet does not exist
        GenerationExhausted: No unique code after MAX_GENERATION_ATTEMPTS draws

    Returns:
        WorldSchema: world_code, world_open and visits_count
    """
    rng = rng or _rng
    try:
        async with Session() as session:
            async with session.begin():
                pet = await _require_pet(pet_id, session, for_update=True)
                world_code = None
                if world_open:
                    for _ in range(MAX_GENERATION_ATTEMPTS):
                        candidate = generate_world_code(rng)
                        if not await ReadData.world_code_exists(candidate, session):
                            world_code = candidate
                            break
                    else:
                        logging.error(f"No unique world code after {MAX_GENERATION_ATTEMPTS} attempts")
                        raise GenerationExhausted("Failed to generate unique code")
                pet = await UpdateData.update_world(pet, world_open, world_code, session)
                logging.info(f"World of pet {pet_id} {'opened as ' + world_code if world_open else 'closed'}")
                return WorldSchema.model_validate(pet)
    except IntegrityError as e:
        logging.error(f"World code collided on write: {e}")
        raise GenerationExhausted("World code collided with a concurrent request") from e


async def visit_world(world_code: str) -> VisitedPetSchema:
    """Resolve an open world by code, count the visit and return the host pet

    Raises:
        NotFound: No open world has this code
    """
    world_code = normalize_world_code(world_code)
    if not is_valid_world_code(world_code):
        raise NotFound("World not found or closed")
    async with Session() as session:
        async with session.begin():
            pet = await ReadData.read_open_world(world_code, session)
            if pet is None:
                raise NotFound("World not found or closed")
            await UpdateData.increment_visits(pet.id, session)
            await session.refresh(pet)
            await CreateData.add_memory(pet.id, "visit", visit_memory(pet.visits_count), session)
            return VisitedPetSchema.model_validate(pet)


async def list_open_worlds(limit: int = OPEN_WORLDS_LIMIT) -> List[OpenWorldSchema]:
    async with Session() as session:
        pets = await ReadData.read_open_worlds(limit, session)
        return [OpenWorldSchema.model_validate(pet) for pet in pets]


async def list_memories(pet_id: UUID, limit: int = MEMORY_LIST_LIMIT) -> List[MemorySchema]:
    async with Session() as session:
        await _require_pet(pet_id, session)
        memories = await ReadData.read_memories(pet_id, limit, session)
        return [MemorySchema.model_validate(memory) for memory in memories]


async def read_chat_context(pet_id: UUID) -> tuple[PetSchema, List[str]]:
    """Read the pet and the contents of its most recent memories for a chat prompt"""
    async with Session() as session:
        pet = await _require_pet(pet_id, session)
        memories = await ReadData.read_memories(pet_id, CHAT_MEMORY_LIMIT, session)
        return PetSchema.model_validate(pet), [memory.content for memory in memories]


async def record_conversation(
    pet: PetSchema, message: str, reply: str, model: str
) -> None:
    """Store a successful LLM exchange in the AI brain and the memory log"""
    context = {
        "pet_id": str(pet.id),
        "stats": {"hunger": pet.hunger, "happiness": pet.happiness},
    }
    async with Session() as session:
        async with session.begin():
            await CreateData.add_ai_brain(message, reply, context, model, session)
            await CreateData.add_memory(
                pet.id, "conversation", conversation_memory(message, reply), session
            )
