"""
Leaderboard module - scoring, ranking and persistence of the top scores.
"""

from decimal import Decimal, ROUND_HALF_UP

from config import LEADERBOARD_KEY, MAX_LEADERBOARD, MAX_NAME_LENGTH
from logging_setup import logger
from store import load_json, save_json


class InvalidNameError(ValueError):
    """Raised when a player name is empty after trimming."""


def normalize_name(name) -> str:
    """Trim and truncate a player name; empty names are rejected."""
    name = (name or "").strip()[:MAX_NAME_LENGTH].strip()
    if not name:
        raise InvalidNameError("Name must not be empty")
    return name


def calculate_score(questions: list, answers: list) -> int:
    """Count answers matching the correct index. Unset answers count as wrong."""
    return sum(
        1 for q, a in zip(questions, answers)
        if a is not None and a == q["answer"]
    )


def calculate_percent(score: int, total: int) -> int:
    """
    Percentage of ``score`` out of ``total``, rounded half up.

    Computed on the exact value so 1/8 gives 13 and 2/3 gives 67.
    """
    if total <= 0:
        return 0
    exact = Decimal(100 * score) / Decimal(total)
    return int(exact.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _rank_key(entry: dict):
    return (-entry["score"], -entry["percent"])


def record_entry(leaderboard: list, name: str, score: int, percent: int,
                 limit: int = MAX_LEADERBOARD) -> list:
    """
    Add an entry and return the new leaderboard (input untouched).

    Entries are ordered by score then percent, both descending; equal
    entries keep their insertion order. Only the top ``limit`` are kept.
    """
    entries = list(leaderboard)
    entries.append({"name": name, "score": score, "percent": percent})
    entries.sort(key=_rank_key)
    return entries[:limit]


def is_top_score(leaderboard: list, score: int, percent: int,
                 limit: int = MAX_LEADERBOARD) -> bool:
    """Check if a result would make it onto the leaderboard."""
    if len(leaderboard) < limit:
        return True

    lowest = leaderboard[-1]
    return (score, percent) > (lowest["score"], lowest["percent"])


def _valid_entry(entry) -> bool:
    if not isinstance(entry, dict):
        return False
    if not isinstance(entry.get("name"), str) or not entry["name"]:
        return False
    for field in ("score", "percent"):
        value = entry.get(field)
        if isinstance(value, bool) or not isinstance(value, int):
            return False
    return True


def load_leaderboard(store) -> list:
    """Load the leaderboard from the store, dropping malformed entries."""
    entries = load_json(store, LEADERBOARD_KEY, [])
    valid = [
        {"name": e["name"], "score": e["score"], "percent": e["percent"]}
        for e in entries if _valid_entry(e)
    ]
    if len(valid) != len(entries):
        logger.warning("Dropped %d malformed leaderboard entries", len(entries) - len(valid))
    return valid


def save_leaderboard(store, leaderboard: list) -> None:
    save_json(store, LEADERBOARD_KEY, leaderboard)


def add_score(store, name: str, score: int, percent: int) -> list:
    """
    Add a new score to the stored leaderboard.
    Returns the updated leaderboard.
    """
    scores = record_entry(load_leaderboard(store), name, score, percent)
    save_leaderboard(store, scores)
    logger.info("Recorded score %d (%d%%) for %s", score, percent, name)
    return scores
