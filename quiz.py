"""
Quiz logic module - handles question loading, category-balanced selection,
repeat avoidance and answer shuffling.
"""

import json
import random
from pathlib import Path

from config import QUESTIONS_FILE, QuizConfig
from logging_setup import logger


class QuestionBankError(Exception):
    """Raised when the question bank cannot be loaded."""


# ========================================
# Random Utilities
# ========================================

def shuffle(items, rng=random) -> list:
    """Return a shuffled copy of ``items`` (Fisher-Yates, input untouched)."""
    arr = list(items)
    for i in range(len(arr) - 1, 0, -1):
        j = rng.randint(0, i)
        arr[i], arr[j] = arr[j], arr[i]
    return arr


def pick_random(items, n: int, rng=random) -> list:
    """Pick ``n`` random items; all of them if fewer than ``n`` exist."""
    return shuffle(items, rng)[:max(n, 0)]


# ========================================
# Question Bank
# ========================================

def validate_question(q) -> bool:
    """Check a raw record has a question, 2+ choices and an answer in range."""
    if not isinstance(q, dict):
        return False
    if not isinstance(q.get("question"), str) or not q["question"].strip():
        return False

    choices = q.get("choices")
    if not isinstance(choices, list) or len(choices) < 2:
        return False
    if not all(isinstance(c, str) for c in choices):
        return False

    answer = q.get("answer")
    if isinstance(answer, bool) or not isinstance(answer, int):
        return False
    if not 0 <= answer < len(choices):
        return False

    category = q.get("category", q.get("sport"))
    return isinstance(category, str)


def load_questions(filepath=None) -> list:
    """
    Load the question bank from a JSON array file.

    Invalid records are skipped and duplicate question texts keep their first
    occurrence. Raises QuestionBankError when the file cannot be read.
    """
    if filepath is None:
        filepath = QUESTIONS_FILE
    filepath = Path(filepath)

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except (IOError, json.JSONDecodeError) as e:
        raise QuestionBankError(f"Error loading questions from {filepath}: {e}") from e

    if not isinstance(raw, list):
        raise QuestionBankError(f"Question bank {filepath} must be a JSON array")

    questions = []
    seen = set()
    for position, q in enumerate(raw):
        if not validate_question(q):
            logger.warning("Skipping invalid question #%d in %s", position, filepath.name)
            continue
        if q["question"] in seen:
            logger.warning("Skipping duplicate question #%d: %r", position, q["question"])
            continue

        seen.add(q["question"])
        questions.append({
            "question": q["question"],
            "choices": list(q["choices"]),
            "answer": q["answer"],
            "category": q.get("category", q.get("sport")),
        })

    logger.info("Loaded %d questions from %s", len(questions), filepath.name)
    return questions


def question_keys(questions) -> list:
    """The keys (question texts) of a question list, in order."""
    return [q["question"] for q in questions]


def category_counts(questions) -> dict:
    counts = {}
    for q in questions:
        counts[q["category"]] = counts.get(q["category"], 0) + 1
    return counts


# ========================================
# Quiz Generation
# ========================================

def category_quotas(config: QuizConfig, rng=random) -> list:
    """
    Give every category the base quota and one extra to the first
    ``bonus_slots`` categories of a shuffled order.

    Returns ``(category, quota)`` pairs in that shuffled order.
    """
    order = shuffle(config.categories, rng)
    return [
        (category, config.base_quota + (1 if i < config.bonus_slots else 0))
        for i, category in enumerate(order)
    ]


def shuffle_choices(question: dict, rng=random) -> dict:
    """Return a copy of ``question`` with choices shuffled and answer remapped."""
    pairs = shuffle(enumerate(question["choices"]), rng)
    choices = [choice for _, choice in pairs]
    answer = next(pos for pos, (idx, _) in enumerate(pairs) if idx == question["answer"])

    instance = dict(question)
    instance["choices"] = choices
    instance["answer"] = answer
    return instance


def _pick_for_category(bank, fresh, excluded, category, quota, rng) -> list:
    """Sample ``quota`` questions, topping up from excluded ones if starved."""
    if len(fresh) >= quota:
        return pick_random(fresh, quota, rng)

    stale = [q for q in bank if q["category"] == category and q["question"] in excluded]
    missing = quota - len(fresh)
    logger.info(
        "Category %s has %d fresh questions for a quota of %d; reusing up to %d from last quiz",
        category, len(fresh), quota, missing
    )
    return shuffle(fresh, rng) + pick_random(stale, missing, rng)


def generate_quiz(bank: list, excluded=(), config: QuizConfig = None, rng=random) -> list:
    """
    Build a category-balanced quiz from ``bank``.

    Questions whose key is in ``excluded`` (the previous quiz) are avoided
    unless a category would otherwise fall short of its quota. The result is
    shuffled across categories and every question has its choices shuffled.
    It may be shorter than ``config.total`` when the bank is too small.
    """
    if config is None:
        config = QuizConfig()
    excluded = set(excluded)

    by_category = {category: [] for category in config.categories}
    dropped = 0
    for q in bank:
        if q["question"] in excluded:
            continue
        if q["category"] in by_category:
            by_category[q["category"]].append(q)
        else:
            dropped += 1
    if dropped:
        logger.debug("Dropped %d questions with unrecognized categories", dropped)

    picked = []
    for category, quota in category_quotas(config, rng):
        picked.extend(
            _pick_for_category(bank, by_category[category], excluded, category, quota, rng)
        )

    picked = shuffle(picked, rng)

    if len(picked) < config.total:
        logger.warning(
            "Question bank too small: generated %d of %d questions", len(picked), config.total
        )

    return [shuffle_choices(q, rng) for q in picked]
