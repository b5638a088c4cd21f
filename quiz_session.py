"""
Quiz session - the state of one player's run through a generated quiz.

A session starts by asking for the player's name, then walks through the
questions. Each answer locks its question for the rest of the run. Once all
questions are locked the quiz can be submitted, which records the score on
the leaderboard. A completed quiz can be restarted with new questions.
"""

import random

from config import LAST_QUIZ_KEY, QuizConfig
from leaderboard import add_score, calculate_percent, calculate_score, load_leaderboard, normalize_name
from logging_setup import logger
from quiz import generate_quiz, question_keys
from store import load_json, save_json


AWAITING_NAME = "awaiting_name"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"


class SessionStateError(Exception):
    """Raised when an action is not valid in the session's current state."""


class QuizSession:

    def __init__(self, bank: list, store, config: QuizConfig = None, rng=None, feedback=None):
        self.bank = bank
        self.store = store
        self.config = config or QuizConfig()
        self.rng = rng or random
        self.feedback = feedback

        self.state = AWAITING_NAME
        self.player_name = None
        self.final_score = None
        self.final_percent = None
        self.leaderboard = load_leaderboard(store)

        self.questions = []
        self.answers = []
        self.locked = []
        self.current_index = 0
        self.excluded_keys = set()
        self._new_quiz()

    # ------------------------------------------------------------------ #
    #  Generation                                                         #
    # ------------------------------------------------------------------ #

    def _new_quiz(self) -> None:
        """Generate questions avoiding the last quiz, then remember this one."""
        last_keys = load_json(self.store, LAST_QUIZ_KEY, [])
        self.excluded_keys = {k for k in last_keys if isinstance(k, str)}
        self.questions = generate_quiz(self.bank, self.excluded_keys, self.config, self.rng)
        self.answers = [None] * len(self.questions)
        self.locked = [False] * len(self.questions)
        self.current_index = 0
        self.final_score = None
        self.final_percent = None

        # Written now so an abandoned quiz still counts as the last one
        save_json(self.store, LAST_QUIZ_KEY, question_keys(self.questions))

    def _require(self, state: str, action: str) -> None:
        if self.state != state:
            raise SessionStateError(f"Cannot {action} while {self.state}")

    # ------------------------------------------------------------------ #
    #  Actions                                                            #
    # ------------------------------------------------------------------ #

    def enter_name(self, name: str) -> None:
        self._require(AWAITING_NAME, "enter a name")
        if not self.questions:
            raise SessionStateError("No questions available for this quiz")
        self.player_name = normalize_name(name)
        self.state = IN_PROGRESS
        logger.info("Quiz started for %s with %d questions", self.player_name, self.total)

    def select_answer(self, choice_index: int):
        """
        Answer the current question and lock it.

        Returns whether the answer was correct, or None if the question was
        already locked (the earlier answer stands).
        """
        self._require(IN_PROGRESS, "answer")
        question = self.current_question
        if not 0 <= choice_index < len(question["choices"]):
            raise ValueError(f"Choice index {choice_index} out of range")

        if self.locked[self.current_index]:
            return None

        self.answers[self.current_index] = choice_index
        self.locked[self.current_index] = True

        correct = choice_index == question["answer"]
        if self.feedback is not None:
            self.feedback.show(correct)
        return correct

    def go_next(self) -> bool:
        """Move forward once the current question is answered. Returns True if moved."""
        self._require(IN_PROGRESS, "navigate")
        if not self.locked[self.current_index] or self.is_last:
            return False
        self.current_index += 1
        return True

    def go_previous(self) -> bool:
        self._require(IN_PROGRESS, "navigate")
        if self.current_index == 0:
            return False
        self.current_index -= 1
        return True

    def submit(self):
        """
        Finish the quiz and record the score.

        Returns the score, or None when some questions are still unanswered.
        """
        self._require(IN_PROGRESS, "submit")
        if not self.can_submit:
            return None

        self.final_score = self.score
        self.final_percent = calculate_percent(self.final_score, self.total)
        self.leaderboard = add_score(self.store, self.player_name, self.final_score, self.final_percent)
        self.state = COMPLETED
        return self.final_score

    def restart(self) -> None:
        """Start a fresh quiz for the same player after completing one."""
        self._require(COMPLETED, "restart")
        if self.feedback is not None:
            self.feedback.cancel()
        self._new_quiz()
        self.state = IN_PROGRESS

    # ------------------------------------------------------------------ #
    #  Queries                                                            #
    # ------------------------------------------------------------------ #

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> dict:
        return self.questions[self.current_index]

    @property
    def is_last(self) -> bool:
        return self.current_index >= self.total - 1

    @property
    def can_submit(self) -> bool:
        return self.total > 0 and all(self.locked)

    @property
    def score(self) -> int:
        return calculate_score(self.questions, self.answers)

    def results(self) -> list:
        """Per-question review of the player's answers."""
        review = []
        for q, a in zip(self.questions, self.answers):
            review.append({
                "question": q["question"],
                "category": q["category"],
                "correct_answer": q["choices"][q["answer"]],
                "your_answer": q["choices"][a] if a is not None else None,
                "correct": a == q["answer"],
            })
        return review

    def _client_question(self, index: int) -> dict:
        q = self.questions[index]
        view = {
            "question": q["question"],
            "choices": q["choices"],
            "category": q["category"],
            "locked": self.locked[index],
            "your_answer": self.answers[index],
        }
        # Only reveal the correct answer once it can no longer be changed
        if self.locked[index]:
            view["correct_index"] = q["answer"]
        return view

    def to_dict(self) -> dict:
        data = {
            "state": self.state,
            "name": self.player_name,
            "total": self.total,
            "current_index": self.current_index,
            "answered": sum(self.locked),
            "can_submit": self.can_submit,
        }
        if self.state == IN_PROGRESS and self.questions:
            data["question"] = self._client_question(self.current_index)
        if self.state == COMPLETED:
            data["score"] = self.final_score
            data["percent"] = self.final_percent
            data["results"] = self.results()
            data["leaderboard"] = self.leaderboard
        return data
