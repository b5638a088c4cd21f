"""
Answer feedback - the short-lived "correct"/"incorrect" signal shown after
each answer, cleared by a timer that restarts on every new answer.
"""

import functools
import threading

from config import FEEDBACK_SECONDS


CORRECT_EMOJIS = ["💯", "💸"] * 5
INCORRECT_EMOJIS = ["💩"] * 10


class TimerHandle:
    """Cancel handle for a callback scheduled with TimerScheduler."""

    def __init__(self, timer: threading.Timer):
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class TimerScheduler:
    """Runs a callback once after a delay on a daemon timer thread."""

    def schedule_once(self, duration: float, callback) -> TimerHandle:
        timer = threading.Timer(duration, callback)
        timer.daemon = True
        timer.start()
        return TimerHandle(timer)


class AnswerFeedback:
    """
    Holds the feedback for the latest answer.

    ``show`` cancels any pending clear, replaces the feedback and schedules a
    new clear after ``duration`` seconds. ``on_change`` is called with the
    state dict every time the feedback is shown or cleared.
    """

    def __init__(self, scheduler=None, duration: float = FEEDBACK_SECONDS, on_change=None):
        self.scheduler = scheduler or TimerScheduler()
        self.duration = duration
        self.on_change = on_change

        self.lock = threading.Lock()
        self.correct = None
        # Bumped on every show so a front end can restart its animation
        self.key = 0
        self._handle = None

    @property
    def active(self) -> bool:
        return self.correct is not None

    @property
    def emojis(self) -> list:
        if self.correct is None:
            return []
        return list(CORRECT_EMOJIS if self.correct else INCORRECT_EMOJIS)

    def show(self, correct: bool) -> None:
        with self.lock:
            self._cancel_pending()
            self.correct = bool(correct)
            self.key += 1
            self._handle = self.scheduler.schedule_once(
                self.duration, functools.partial(self._expire, self.key)
            )
            state = self.to_dict()
        self._notify(state)

    def clear(self) -> None:
        with self.lock:
            self._handle = None
            if self.correct is None:
                return
            self.correct = None
            state = self.to_dict()
        self._notify(state)

    def _expire(self, key: int) -> None:
        # A timer that lost the race with a newer answer must not clear it
        if key == self.key:
            self.clear()

    def cancel(self) -> None:
        """Drop any visible feedback without waiting for the timer."""
        with self.lock:
            self._cancel_pending()
            was_active = self.correct is not None
            self.correct = None
            state = self.to_dict()
        if was_active:
            self._notify(state)

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self, state: dict) -> None:
        if self.on_change is not None:
            self.on_change(state)

    def to_dict(self) -> dict:
        return {
            "active": self.active,
            "correct": self.correct,
            "emojis": self.emojis,
            "key": self.key,
        }
