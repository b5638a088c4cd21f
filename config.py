"""
Configuration - file locations, store keys and the shape of a quiz.
"""

import os
import sys
from pathlib import Path


# Determine base path (works for both dev and PyInstaller exe)
if getattr(sys, 'frozen', False):
    BASE_DIR = Path(sys.executable).parent
else:
    BASE_DIR = Path(__file__).parent

QUESTIONS_FILE = Path(os.environ.get("TRIVIA_QUESTIONS_FILE", BASE_DIR / "questions.json"))
STORE_FILE = Path(os.environ.get("TRIVIA_STORE_FILE", BASE_DIR / "store.json"))

# Set TRIVIA_REALTIME=0 to serve with waitress and no Socket.IO feedback
REALTIME_FEEDBACK = os.environ.get("TRIVIA_REALTIME", "1") != "0"

HOST = '127.0.0.1'
PORT = 5000

# Store keys
LEADERBOARD_KEY = "leaderboard"
LAST_QUIZ_KEY = "lastQuizQuestions"

MAX_LEADERBOARD = 5
MAX_NAME_LENGTH = 32

# How long the correct/incorrect feedback stays visible
FEEDBACK_SECONDS = 1.8

DEFAULT_CATEGORIES = ("NFL", "MLB", "NBA", "Tennis")
DEFAULT_BASE_QUOTA = 3
DEFAULT_BONUS_SLOTS = 3
DEFAULT_TOTAL = 15


class ConfigError(ValueError):
    """Raised when a quiz configuration does not add up."""


class QuizConfig:
    """
    Shape of a generated quiz.

    Every category gets ``base_quota`` questions and ``bonus_slots`` randomly
    chosen categories get one more, so ``total`` must equal
    ``base_quota * len(categories) + bonus_slots``.
    """

    def __init__(self, categories=DEFAULT_CATEGORIES, base_quota: int = DEFAULT_BASE_QUOTA,
                 bonus_slots: int = DEFAULT_BONUS_SLOTS, total: int = DEFAULT_TOTAL):
        self.categories = tuple(categories)
        self.base_quota = base_quota
        self.bonus_slots = bonus_slots
        self.total = total
        self.validate()

    def validate(self) -> None:
        if not self.categories:
            raise ConfigError("At least one category is required")
        if len(set(self.categories)) != len(self.categories):
            raise ConfigError(f"Duplicate categories in {list(self.categories)}")
        if self.base_quota < 0:
            raise ConfigError(f"base_quota must not be negative, got {self.base_quota}")
        if not 0 <= self.bonus_slots <= len(self.categories):
            raise ConfigError(
                f"bonus_slots must be between 0 and {len(self.categories)}, got {self.bonus_slots}"
            )

        expected = self.total - self.base_quota * len(self.categories)
        if self.bonus_slots != expected:
            raise ConfigError(
                f"bonus_slots={self.bonus_slots} does not match total={self.total} "
                f"with base_quota={self.base_quota} over {len(self.categories)} categories "
                f"(expected {expected})"
            )

    def to_dict(self) -> dict:
        return {
            "categories": list(self.categories),
            "base_quota": self.base_quota,
            "bonus_slots": self.bonus_slots,
            "total": self.total,
        }

    def __repr__(self):
        return (f"QuizConfig(categories={self.categories!r}, base_quota={self.base_quota}, "
                f"bonus_slots={self.bonus_slots}, total={self.total})")
