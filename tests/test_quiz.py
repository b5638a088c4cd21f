"""
Tests for question loading and quiz generation.
Run: python -m pytest tests/test_quiz.py -v
"""

import json
import random

import pytest

from config import ConfigError, QuizConfig
from quiz import (
    QuestionBankError,
    category_quotas,
    generate_quiz,
    load_questions,
    pick_random,
    question_keys,
    shuffle,
    shuffle_choices,
)
from conftest import make_bank


class TestRandomUtilities:

    def test_shuffle_keeps_elements(self, rng):
        items = list(range(20))
        result = shuffle(items, rng)
        assert sorted(result) == items

    def test_shuffle_does_not_mutate_input(self, rng):
        items = [1, 2, 3, 4, 5]
        shuffle(items, rng)
        assert items == [1, 2, 3, 4, 5]

    def test_shuffle_accepts_any_iterable(self, rng):
        assert sorted(shuffle(("b", "a", "c"), rng)) == ["a", "b", "c"]

    def test_shuffle_short_sequences(self, rng):
        assert shuffle([], rng) == []
        assert shuffle(["only"], rng) == ["only"]

    def test_shuffle_draws_from_zero_to_i(self):
        """Each swap index must be drawn from [0, i], from the end down to 1."""
        calls = []

        class RecordingRandom:
            def randint(self, a, b):
                calls.append((a, b))
                return a

        shuffle([1, 2, 3, 4], RecordingRandom())
        assert calls == [(0, 3), (0, 2), (0, 1)]

    def test_pick_random_returns_n(self, rng):
        picked = pick_random(list(range(10)), 4, rng)
        assert len(picked) == 4
        assert len(set(picked)) == 4

    def test_pick_random_more_than_available(self, rng):
        picked = pick_random([1, 2, 3], 10, rng)
        assert sorted(picked) == [1, 2, 3]

    def test_pick_random_zero(self, rng):
        assert pick_random([1, 2, 3], 0, rng) == []


class TestQuizConfig:

    def test_default_adds_up(self):
        cfg = QuizConfig()
        assert cfg.total == 15
        assert cfg.base_quota * len(cfg.categories) + cfg.bonus_slots == 15

    def test_mismatched_bonus_slots_rejected(self):
        with pytest.raises(ConfigError):
            QuizConfig(categories=("A", "B", "C", "D"), base_quota=3, bonus_slots=2, total=15)

    def test_bonus_slots_beyond_categories_rejected(self):
        with pytest.raises(ConfigError):
            QuizConfig(categories=("A", "B"), base_quota=1, bonus_slots=3, total=5)

    def test_duplicate_categories_rejected(self):
        with pytest.raises(ConfigError):
            QuizConfig(categories=("A", "A"), base_quota=1, bonus_slots=0, total=2)

    def test_empty_categories_rejected(self):
        with pytest.raises(ConfigError):
            QuizConfig(categories=(), base_quota=0, bonus_slots=0, total=0)


class TestCategoryQuotas:

    def test_quotas_sum_to_total(self, rng, quiz_config):
        quotas = category_quotas(quiz_config, rng)
        assert sum(q for _, q in quotas) == 15

    def test_bonus_categories_get_one_extra(self, rng, quiz_config):
        quotas = dict(category_quotas(quiz_config, rng))
        assert sorted(quotas.values()) == [3, 4, 4, 4]
        assert set(quotas) == set(quiz_config.categories)

    def test_bonus_categories_vary(self):
        rng = random.Random(7)
        cfg = QuizConfig()
        base_categories = set()
        for _ in range(50):
            quotas = dict(category_quotas(cfg, rng))
            base_categories.update(c for c, q in quotas.items() if q == 3)
        assert len(base_categories) > 1


class TestShuffleChoices:

    def test_correct_choice_follows_answer(self, rng):
        question = {"question": "Q", "choices": ["a", "b", "c", "d"], "answer": 2, "category": "NFL"}
        for _ in range(20):
            instance = shuffle_choices(question, rng)
            assert instance["choices"][instance["answer"]] == "c"
            assert sorted(instance["choices"]) == ["a", "b", "c", "d"]

    def test_original_untouched(self, rng):
        question = {"question": "Q", "choices": ["a", "b", "c"], "answer": 0, "category": "NFL"}
        shuffle_choices(question, rng)
        assert question == {"question": "Q", "choices": ["a", "b", "c"], "answer": 0, "category": "NFL"}


class TestGenerateQuiz:

    def test_length_matches_total(self, bank, rng, quiz_config):
        quiz = generate_quiz(bank, config=quiz_config, rng=rng)
        assert len(quiz) == 15

    def test_each_category_meets_base_quota(self, bank, rng, quiz_config):
        for _ in range(20):
            quiz = generate_quiz(bank, config=quiz_config, rng=rng)
            counts = {}
            for q in quiz:
                counts[q["category"]] = counts.get(q["category"], 0) + 1
            assert set(counts) == set(quiz_config.categories)
            assert all(3 <= n <= 4 for n in counts.values())

    def test_no_duplicate_questions(self, bank, rng):
        quiz = generate_quiz(bank, rng=rng)
        keys = question_keys(quiz)
        assert len(set(keys)) == len(keys)

    def test_correct_choice_preserved(self, bank, rng):
        originals = {q["question"]: q["choices"][q["answer"]] for q in bank}
        for q in generate_quiz(bank, rng=rng):
            assert q["choices"][q["answer"]] == originals[q["question"]]

    def test_bank_not_mutated(self, bank, rng):
        snapshot = json.dumps(bank)
        generate_quiz(bank, rng=rng)
        assert json.dumps(bank) == snapshot

    def test_avoids_excluded_questions(self, bank, rng):
        first = generate_quiz(bank, rng=rng)
        excluded = set(question_keys(first))
        for _ in range(10):
            second = generate_quiz(bank, excluded, rng=rng)
            assert excluded.isdisjoint(question_keys(second))
            assert len(second) == 15

    def test_interleaves_categories(self, bank):
        """The final order is shuffled rather than grouped by category."""
        rng = random.Random(99)
        grouped = 0
        for _ in range(20):
            quiz = generate_quiz(bank, rng=rng)
            categories = [q["category"] for q in quiz]
            runs = sum(1 for a, b in zip(categories, categories[1:]) if a != b) + 1
            if runs == 4:
                grouped += 1
        assert grouped < 20

    def test_starved_category_tops_up_from_excluded(self, rng):
        bank = make_bank(per_category=5)
        nfl_keys = [q["question"] for q in bank if q["category"] == "NFL"]
        # Only one fresh NFL question remains
        excluded = set(nfl_keys[:4])

        quiz = generate_quiz(bank, excluded, rng=rng)
        nfl = [q["question"] for q in quiz if q["category"] == "NFL"]

        assert len(quiz) == 15
        assert nfl_keys[4] in nfl
        assert len(nfl) >= 3

    def test_unrecognized_categories_dropped(self, rng):
        bank = make_bank() + make_bank(categories=("Cricket",))
        quiz = generate_quiz(bank, rng=rng)
        assert all(q["category"] != "Cricket" for q in quiz)
        assert len(quiz) == 15

    def test_small_bank_gives_short_quiz(self, rng):
        bank = make_bank(per_category=2)
        quiz = generate_quiz(bank, rng=rng)
        assert len(quiz) == 8

    def test_custom_config(self, rng):
        cfg = QuizConfig(categories=("NFL", "NBA"), base_quota=2, bonus_slots=1, total=5)
        quiz = generate_quiz(make_bank(), config=cfg, rng=rng)
        assert len(quiz) == 5
        assert {q["category"] for q in quiz} == {"NFL", "NBA"}


class TestLoadQuestions:

    def test_loads_valid_bank(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps(make_bank(per_category=2)), encoding="utf-8")
        questions = load_questions(path)
        assert len(questions) == 8
        assert set(questions[0]) == {"question", "choices", "answer", "category"}

    def test_accepts_sport_field(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps([
            {"question": "Q1", "choices": ["a", "b"], "answer": 1, "sport": "NBA"}
        ]), encoding="utf-8")
        assert load_questions(path)[0]["category"] == "NBA"

    def test_skips_invalid_and_duplicate_records(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps([
            {"question": "Q1", "choices": ["a", "b"], "answer": 0, "category": "NFL"},
            {"question": "Q1", "choices": ["c", "d"], "answer": 1, "category": "NFL"},
            {"question": "Q2", "choices": ["a"], "answer": 0, "category": "NFL"},
            {"question": "Q3", "choices": ["a", "b"], "answer": 2, "category": "NFL"},
            {"question": "Q4", "choices": ["a", "b"], "answer": True, "category": "NFL"},
            {"question": "Q5", "choices": ["a", "b"], "answer": 0},
            "not a question",
        ]), encoding="utf-8")
        questions = load_questions(path)
        assert question_keys(questions) == ["Q1"]
        assert questions[0]["choices"] == ["a", "b"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(QuestionBankError):
            load_questions(tmp_path / "missing.json")

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(QuestionBankError):
            load_questions(path)

    def test_non_array_raises(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps({"question": "Q"}), encoding="utf-8")
        with pytest.raises(QuestionBankError):
            load_questions(path)

    def test_bundled_bank_supports_default_quiz(self):
        questions = load_questions()
        quiz = generate_quiz(questions, rng=random.Random(3))
        assert len(quiz) == 15
