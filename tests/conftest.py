import os
import random
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import QuizConfig
from store import MemoryStore


CATEGORIES = ("NFL", "MLB", "NBA", "Tennis")


def make_bank(per_category=10, categories=CATEGORIES):
    """Build a bank of four-choice questions, ``per_category`` per category."""
    bank = []
    for category in categories:
        for i in range(per_category):
            bank.append({
                "question": f"{category} question {i}",
                "choices": [f"{category} {i} right", f"{category} {i} wrong a",
                            f"{category} {i} wrong b", f"{category} {i} wrong c"],
                "answer": i % 4,
                "category": category,
            })
    return bank


class ManualHandle:
    def __init__(self, scheduler, entry):
        self.scheduler = scheduler
        self.entry = entry

    def cancel(self):
        self.entry["cancelled"] = True


class ManualScheduler:
    """Scheduler whose callbacks only run when the test calls fire()."""

    def __init__(self):
        self.scheduled = []

    def schedule_once(self, duration, callback):
        entry = {"duration": duration, "callback": callback, "cancelled": False}
        self.scheduled.append(entry)
        return ManualHandle(self, entry)

    @property
    def pending(self):
        return [e for e in self.scheduled if not e["cancelled"] and not e.get("fired")]

    def fire(self):
        for entry in self.pending:
            entry["fired"] = True
            entry["callback"]()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def bank():
    return make_bank()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def quiz_config():
    return QuizConfig()


@pytest.fixture
def scheduler():
    return ManualScheduler()
