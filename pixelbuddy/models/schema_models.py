from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime


class PetSchema(BaseModel):
    id: UUID
    user_id: str
    name: str
    hunger: int
    happiness: int
    energy: int
    hygiene: int
    health: int
    sprite: int
    color: Optional[str] = None
    age_seconds: int
    generation: int
    is_alive: bool
    world_code: Optional[str] = None
    world_open: bool
    visits_count: int
    created_at: datetime
    updated_at: datetime
    last_seen: datetime
    last_fed: datetime
    last_played: datetime
    last_cleaned: datetime
    last_slept: datetime

    class Config:
        from_attributes = True


class VisitedPetSchema(BaseModel):
    """Public view of a pet returned to visitors of its world."""
    id: UUID
    name: str
    hunger: int
    happiness: int
    energy: int
    hygiene: int
    health: int
    sprite: int
    color: Optional[str] = None
    visits_count: int
    age_seconds: int

    class Config:
        from_attributes = True


class WorldSchema(BaseModel):
    world_code: Optional[str] = None
    world_open: bool
    visits_count: int

    class Config:
        from_attributes = True


class OpenWorldSchema(BaseModel):
    name: str
    world_code: str
    visits_count: int
    last_seen: datetime
    sprite: int
    color: Optional[str] = None

    class Config:
        from_attributes = True


class MemorySchema(BaseModel):
    memory_type: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
