import logging
from typing import List

from fastapi import APIRouter, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from pixelbuddy.load_secrets import action_rate_limit
from pixelbuddy.models.dc_models import (
    ActionModel,
    ErrorModel,
    RenameModel,
    SyncModel,
    SyncResponseModel,
    TalkModel,
    TalkResponseModel,
    WorldToggleModel,
)
from pixelbuddy.models.schema_models import (
    MemorySchema,
    OpenWorldSchema,
    PetSchema,
    VisitedPetSchema,
    WorldSchema,
)
from pixelbuddy.services import chat, pet_db

# Actions and talk draw from one per-client bucket.
limiter = Limiter(key_func=get_remote_address)
action_limit = limiter.shared_limit(
    action_rate_limit, scope="pet_actions", error_message="Too many actions, please slow down!"
)

pet_router = APIRouter(
    prefix="/api",
    responses={400: {"model": ErrorModel}, 404: {"model": ErrorModel}},
)


class PetAPI:
    @staticmethod
    @pet_router.get("/pet/{user_id}", response_model=PetSchema)
    async def get_pet(user_id: str):
        """Get the pet of a user, creating it on first access"""
        return await pet_db.get_or_create_pet(user_id)

    @staticmethod
    @pet_router.post("/pet/{pet_id}/action", response_model=PetSchema, responses={429: {"model": ErrorModel}})
    @action_limit
    async def perform_action(request: Request, pet_id: str, body: ActionModel):
        """Apply feed, play, clean or sleep to the pet

        Args:
            request (Request): Client address for the rate limit
            pet_id (str): To identify the pet
            body (ActionModel): action name
        """
        logging.info(f"pet {pet_id} action: {body.action}")
        return await pet_db.apply_action(pet_db.parse_pet_id(pet_id), body.action)

    @staticmethod
    @pet_router.post("/pet/{pet_id}/rename", response_model=PetSchema)
    async def rename_pet(pet_id: str, body: RenameModel):
        return await pet_db.rename_pet(pet_db.parse_pet_id(pet_id), body.name)

    @staticmethod
    @pet_router.post("/pet/{pet_id}/sync", response_model=SyncResponseModel)
    async def sync_pet(pet_id: str, body: SyncModel):
        """Store the stat snapshot the client decayed locally"""
        await pet_db.sync_stats(pet_db.parse_pet_id(pet_id), body.model_dump())
        return SyncResponseModel(success=True)

    @staticmethod
    @pet_router.get("/pet/{pet_id}/memories", response_model=List[MemorySchema])
    async def get_memories(
        pet_id: str,
        limit: int = Query(default=pet_db.MEMORY_LIST_LIMIT, ge=1, le=pet_db.MEMORY_LIST_LIMIT),
    ):
        return await pet_db.list_memories(pet_db.parse_pet_id(pet_id), limit)


class WorldAPI:
    @staticmethod
    @pet_router.post("/pet/{pet_id}/world", response_model=WorldSchema)
    async def toggle_world(pet_id: str, body: WorldToggleModel):
        """Open the pet's world with a fresh code, or close it"""
        return await pet_db.set_world_open(pet_db.parse_pet_id(pet_id), body.open)

    @staticmethod
    @pet_router.get("/world/{world_code}", response_model=VisitedPetSchema)
    async def visit_world(world_code: str):
        return await pet_db.visit_world(world_code)

    @staticmethod
    @pet_router.get("/worlds", response_model=List[OpenWorldSchema])
    async def list_worlds():
        return await pet_db.list_open_worlds()


class ChatAPI:
    @staticmethod
    @pet_router.post("/pet/{pet_id}/talk", response_model=TalkResponseModel, responses={429: {"model": ErrorModel}})
    @action_limit
    async def talk(request: Request, pet_id: str, body: TalkModel):
        """Talk to the pet. Falls back to a canned reply when the LLM is down"""
        return await chat.talk_to_pet(pet_db.parse_pet_id(pet_id), body.message)
