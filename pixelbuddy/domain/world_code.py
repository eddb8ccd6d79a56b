"""World code rules.

Codes look like ``XXXX-XX``: six characters from an alphabet without the
visually ambiguous 0, 1, O and I, with a hyphen after the fourth.
"""

import random
import re

WORLD_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
WORLD_CODE_LENGTH = 6
HYPHEN_POSITION = 4
MAX_GENERATION_ATTEMPTS = 100

WORLD_CODE_PATTERN = re.compile(
    rf"^[{WORLD_CODE_ALPHABET}]{{{HYPHEN_POSITION}}}-"
    rf"[{WORLD_CODE_ALPHABET}]{{{WORLD_CODE_LENGTH - HYPHEN_POSITION}}}$"
)


def generate_world_code(rng: random.Random) -> str:
    """Draw one candidate code. Uniqueness is checked by the caller."""
    chars = [rng.choice(WORLD_CODE_ALPHABET) for _ in range(WORLD_CODE_LENGTH)]
    return "".join(chars[:HYPHEN_POSITION]) + "-" + "".join(chars[HYPHEN_POSITION:])


def normalize_world_code(code: str) -> str:
    return code.strip().upper()


def is_valid_world_code(code: str) -> bool:
    return bool(WORLD_CODE_PATTERN.match(code))
