import argparse
import asyncio

from pixelbuddy.db import create_tables, engine
from pixelbuddy.domain.pet_rules import validate_name
from pixelbuddy.services import pet_db


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a sample pet")
    parser.add_argument("--user-id", type=str, help="Owner key", default="demo-user-001")
    parser.add_argument("--name", type=str, help="Pet name", default="Demo Buddy")
    return parser


async def main(user_id: str, name: str):
    name = validate_name(name)
    await create_tables()
    pet = await pet_db.get_or_create_pet(user_id)
    if pet.name != name:
        pet = await pet_db.rename_pet(pet.id, name)
    await engine.dispose()
    print(f"Sample pet ready: {pet.name} ({pet.id}) for user {pet.user_id}")


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.user_id, args.name))
