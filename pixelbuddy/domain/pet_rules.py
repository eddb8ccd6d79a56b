"""Pet stat rules that are independent from HTTP and DB.

Rule of thumb:
- OK: stat tables, clamping, decay math, prompt and memory text.
- Not OK: touching DB sessions, httpx, FastAPI, datetime.now(), etc.
"""

import math
from typing import Dict, List, Mapping

from pixelbuddy.exceptions import ValidationError

STAT_MIN = 0
STAT_MAX = 100
NAME_MAX_LENGTH = 20
MESSAGE_MAX_LENGTH = 500
DEFAULT_PET_NAME = "Buddy"
BIRTH_MEMORY = "Born into this world!"

# Stats the client decays and syncs. health is only changed server side.
DECAYING_STATS = ("hunger", "happiness", "energy", "hygiene")

ACTION_EFFECTS: Dict[str, Dict[str, int]] = {
    "feed": {"hunger": 30},
    "play": {"happiness": 20, "energy": -10},
    "clean": {"hygiene": 40},
    "sleep": {"energy": 30},
}

ACTION_TIMESTAMPS = {
    "feed": "last_fed",
    "play": "last_played",
    "clean": "last_cleaned",
    "sleep": "last_slept",
}

ACTION_MEMORIES = {
    "feed": "Owner fed me!",
    "play": "Owner played with me!",
    "clean": "Owner cleaned me!",
    "sleep": "Owner put me to sleep!",
}

# Points lost per decay tick (one tick per minute on the client).
DECAY_PER_TICK = {
    "hunger": 1.0,
    "happiness": 0.5,
    "energy": 0.5,
    "hygiene": 0.5,
}

LOW_MOOD_THRESHOLD = 40
HIGH_MOOD_THRESHOLD = 70


def clamp_stat(value: float) -> int:
    """Round a stat half up and clamp it to [0, 100].

    Raises:
        ValidationError: The value is NaN or infinite
    """
    if not math.isfinite(value):
        raise ValidationError("Stat values must be finite numbers")
    rounded = math.floor(value + 0.5)
    return max(STAT_MIN, min(STAT_MAX, rounded))


def clamp_stats(stats: Mapping[str, float]) -> Dict[str, int]:
    return {name: clamp_stat(value) for name, value in stats.items()}


def validate_action(action: str) -> str:
    if action not in ACTION_EFFECTS:
        raise ValidationError(
            f"Invalid action '{action}'. Expected one of: {', '.join(ACTION_EFFECTS)}"
        )
    return action


def apply_action(stats: Mapping[str, int], action: str) -> Dict[str, int]:
    """Apply the delta table of an action to the current stats

    Args:
        stats (Mapping[str, int]): Current stat values keyed by stat name
        action (str): feed, play, clean or sleep

    Returns:
        Dict[str, int]: Only the stats the action touched, clamped to [0, 100]
    """
    validate_action(action)
    return {
        name: clamp_stat(stats[name] + delta)
        for name, delta in ACTION_EFFECTS[action].items()
    }


def decay_stats(stats: Mapping[str, float]) -> Dict[str, float]:
    """Apply one decay tick, floored at 0. Fractions are kept so they accumulate."""
    decayed = dict(stats)
    for name, amount in DECAY_PER_TICK.items():
        decayed[name] = max(float(STAT_MIN), stats[name] - amount)
    return decayed


def validate_name(name: str) -> str:
    name = (name or "").strip()
    if not name or len(name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Name must be 1-{NAME_MAX_LENGTH} characters")
    return name


def validate_message(message: str) -> str:
    message = (message or "").strip()
    if not message or len(message) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"Message must be 1-{MESSAGE_MAX_LENGTH} characters")
    return message


def average_mood(stats: Mapping[str, float]) -> float:
    return sum(stats[name] for name in DECAYING_STATS) / len(DECAYING_STATS)


def fallback_response(name: str, stats: Mapping[str, float]) -> str:
    """Canned reply used when the LLM cannot be reached."""
    mood = average_mood(stats)
    if mood < LOW_MOOD_THRESHOLD:
        return "*tired* I'm not feeling great... maybe some care would help?"
    if mood > HIGH_MOOD_THRESHOLD:
        return "Yay! I'm so happy to see you! Everything is awesome!"
    return f"Hi! I'm {name}! What would you like to do together?"


def build_chat_prompt(
    name: str, stats: Mapping[str, int], memories: List[str], message: str
) -> str:
    """Build the LLM prompt from the pet's identity, stats and recent memories

    Args:
        name (str): Pet name
        stats (Mapping[str, int]): Current stats
        memories (List[str]): Most recent memory contents, newest first
        message (str): What the owner said

    Returns:
        str: Prompt for a 1-2 sentence in-character answer
    """
    stat_text = ", ".join(f"{stat}={stats[stat]}" for stat in DECAYING_STATS)
    memory_text = ". ".join(memories) if memories else "none yet"
    return (
        f"You are {name}, a virtual pet (like a Tamagotchi). "
        f"Your stats: {stat_text}. "
        f"Recent memories: {memory_text}. "
        f'Owner says: "{message}". '
        f"Respond in 1-2 sentences as {name}, showing personality based on your stats "
        f"(low stats = grumpy, high stats = cheerful)."
    )


def conversation_memory(message: str, reply: str) -> str:
    return f'Owner said: "{message}". I replied: "{reply}"'


def visit_memory(visits_count: int) -> str:
    return f"A visitor dropped by my world! That makes {visits_count} visits."
