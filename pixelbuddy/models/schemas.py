from sqlalchemy import CheckConstraint, Index
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, Boolean, DateTime, Integer, String, TEXT, Uuid
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class Pet(Base):
    __tablename__ = "pets"
    __table_args__ = (
        CheckConstraint("hunger >= 0 AND hunger <= 100", name="ck_pets_hunger"),
        CheckConstraint("happiness >= 0 AND happiness <= 100", name="ck_pets_happiness"),
        CheckConstraint("energy >= 0 AND energy <= 100", name="ck_pets_energy"),
        CheckConstraint("hygiene >= 0 AND hygiene <= 100", name="ck_pets_hygiene"),
        CheckConstraint("health >= 0 AND health <= 100", name="ck_pets_health"),
        Index("idx_pets_world_open", "world_open"),
    )
    id = Column(Uuid, primary_key=True, default=uuid7)
    user_id = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(20), nullable=False, default="Buddy")

    # hunger is fullness: 100 = full, 0 = starving
    hunger = Column(Integer, nullable=False, default=50)
    happiness = Column(Integer, nullable=False, default=50)
    energy = Column(Integer, nullable=False, default=50)
    hygiene = Column(Integer, nullable=False, default=50)
    health = Column(Integer, nullable=False, default=100)

    sprite = Column(Integer, nullable=False, default=0)
    color = Column(String(7), default="#FF6B9D")

    age_seconds = Column(Integer, nullable=False, default=0)
    generation = Column(Integer, nullable=False, default=1)
    is_alive = Column(Boolean, nullable=False, default=True)

    world_code = Column(TEXT, unique=True, nullable=True)
    world_open = Column(Boolean, nullable=False, default=False)
    visits_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    last_seen = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    last_fed = Column(DateTime, default=datetime.now)
    last_played = Column(DateTime, default=datetime.now)
    last_cleaned = Column(DateTime, default=datetime.now)
    last_slept = Column(DateTime, default=datetime.now)

    memories = relationship(
        "Memory",
        primaryjoin="Pet.id == foreign(Memory.pet_id)",
        back_populates="pet",
        cascade="all, delete",
    )


class Memory(Base):
    __tablename__ = "memories"
    __table_args__ = (Index("idx_memories_pet_id", "pet_id", "created_at"),)
    id = Column(Uuid, primary_key=True, default=uuid7)
    pet_id = Column(Uuid, nullable=False)
    memory_type = Column(String(20), nullable=False)  # action, conversation, visit, mood, death
    content = Column(TEXT, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    pet = relationship(
        "Pet",
        primaryjoin="foreign(Memory.pet_id) == Pet.id",
        back_populates="memories",
    )


class AiBrain(Base):
    __tablename__ = "ai_brain"
    id = Column(Uuid, primary_key=True, default=uuid7)
    prompt = Column(TEXT, nullable=False)
    response = Column(TEXT, nullable=False)
    context = Column(JSON().with_variant(JSONB, "postgresql"))
    model = Column(String(50), default="llama3.2:1b")
    created_at = Column(DateTime, default=datetime.now)
