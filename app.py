"""
Sports Trivia - Flask application
Serves the quiz as a JSON API and pushes answer feedback over Socket.IO.
"""

import os
import threading
import webbrowser

from flask import Flask, jsonify, request
from flask_socketio import SocketIO

import config
from config import QuizConfig
from feedback import AnswerFeedback
from leaderboard import InvalidNameError, load_leaderboard
from logging_setup import logger
from quiz import QuestionBankError, category_counts, load_questions
from quiz_session import QuizSession, SessionStateError
from store import JsonFileStore


def create_app(questions_file=None, store=None, quiz_config: QuizConfig = None,
               rng=None, scheduler=None) -> Flask:
    """
    Build the quiz app.

    The quiz configuration is validated here so a bad configuration fails
    at startup. The question bank itself is loaded on the first start.
    """
    quiz_config = quiz_config or QuizConfig()
    store = store if store is not None else JsonFileStore(config.STORE_FILE)

    app = Flask(__name__)
    socketio = SocketIO(app, cors_allowed_origins="*", async_mode='threading')

    def emit_feedback(state):
        socketio.emit('answer_feedback', state)

    feedback = AnswerFeedback(scheduler=scheduler, on_change=emit_feedback)

    # Single player: one quiz at a time, kept in memory
    current_quiz = {
        "bank": None,
        "load_error": None,
        "session": None,
    }

    def ensure_bank():
        """Load the question bank once; a failure is retried on the next start."""
        if current_quiz["bank"] is None:
            try:
                bank = load_questions(questions_file)
            except QuestionBankError as e:
                current_quiz["load_error"] = str(e)
                logger.error("%s", e)
                raise

            current_quiz["bank"] = bank
            current_quiz["load_error"] = None

            counts = category_counts(bank)
            for category in quiz_config.categories:
                if counts.get(category, 0) < quiz_config.base_quota + 1:
                    logger.warning("Only %d questions in category %s",
                                   counts.get(category, 0), category)
        return current_quiz["bank"]

    def active_session() -> QuizSession:
        session = current_quiz["session"]
        if session is None:
            raise SessionStateError("No quiz in progress; start one first")
        return session

    def session_response(session, **extra):
        payload = {"success": True}
        payload.update(extra)
        payload["quiz"] = session.to_dict()
        return jsonify(payload)

    @app.errorhandler(SessionStateError)
    def handle_state_error(e):
        return jsonify({"success": False, "error": str(e)}), 409

    # ========================================
    # Quiz Game API Routes
    # ========================================

    @app.route('/api/quiz/start', methods=['GET'])
    def quiz_start_game():
        """Start a new quiz: generate questions and wait for the player's name."""
        try:
            bank = ensure_bank()
        except QuestionBankError as e:
            return jsonify({
                "success": False,
                "state": "load_error",
                "error": str(e)
            }), 503

        feedback.cancel()
        session = QuizSession(bank, store, quiz_config, rng=rng, feedback=feedback)
        current_quiz["session"] = session

        response = session_response(session)
        response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    @app.route('/api/quiz/state', methods=['GET'])
    def quiz_state():
        """Get the current quiz as the player sees it."""
        if current_quiz["session"] is None:
            return jsonify({
                "success": True,
                "quiz": None,
                "load_error": current_quiz["load_error"]
            })
        return session_response(current_quiz["session"])

    @app.route('/api/quiz/name', methods=['POST'])
    def quiz_enter_name():
        """Set the player's name and begin answering."""
        data = request.get_json(silent=True) or {}
        session = active_session()

        name = data.get('name', '')
        if not isinstance(name, str):
            return jsonify({"success": False, "error": "Name must be a string"}), 400

        try:
            session.enter_name(name)
        except InvalidNameError as e:
            return jsonify({"success": False, "error": str(e)}), 400

        return session_response(session)

    @app.route('/api/quiz/answer', methods=['POST'])
    def quiz_check_answer():
        """Answer the current question. A question can only be answered once."""
        data = request.get_json(silent=True) or {}
        session = active_session()

        answer_index = data.get('answer_index')
        if isinstance(answer_index, bool) or not isinstance(answer_index, int):
            return jsonify({"success": False, "error": "answer_index must be an integer"}), 400

        try:
            correct = session.select_answer(answer_index)
        except ValueError as e:
            return jsonify({"success": False, "error": str(e)}), 400

        return session_response(
            session,
            already_locked=correct is None,
            correct=correct,
            correct_index=session.current_question["answer"],
            score=session.score
        )

    @app.route('/api/quiz/next', methods=['POST'])
    def quiz_next():
        """Go to the next question (only after answering the current one)."""
        session = active_session()
        moved = session.go_next()
        return session_response(session, moved=moved)

    @app.route('/api/quiz/previous', methods=['POST'])
    def quiz_previous():
        """Go back to the previous question."""
        session = active_session()
        moved = session.go_previous()
        return session_response(session, moved=moved)

    @app.route('/api/quiz/submit', methods=['POST'])
    def quiz_submit():
        """Submit a fully answered quiz and record the score."""
        session = active_session()
        score = session.submit()

        if score is None:
            return jsonify({
                "success": False,
                "error": "All questions must be answered before submitting",
                "quiz": session.to_dict()
            }), 400

        return session_response(session)

    @app.route('/api/quiz/restart', methods=['POST'])
    def quiz_restart():
        """Start a new quiz for the same player after finishing one."""
        session = active_session()
        session.restart()
        return session_response(session)

    @app.route('/api/quiz/feedback', methods=['GET'])
    def quiz_feedback():
        """Get the feedback for the latest answer, for clients without Socket.IO."""
        return jsonify({
            "success": True,
            "feedback": feedback.to_dict()
        })

    @app.route('/api/quiz/leaderboard', methods=['GET'])
    def quiz_get_scores():
        """Get the current quiz leaderboard."""
        return jsonify({
            "success": True,
            "scores": load_leaderboard(store),
            "total": quiz_config.total
        })

    return app


def open_browser():
    """Open the browser after a short delay."""
    webbrowser.open(f'http://{config.HOST}:{config.PORT}')


if __name__ == '__main__':
    app = create_app()

    print("Sports Trivia starting...")
    print(f"Process ID: {os.getpid()}")
    print(f"Questions file: {config.QUESTIONS_FILE}")
    print(f"Store file: {config.STORE_FILE}")
    print()

    # Open browser after a short delay
    threading.Timer(1.5, open_browser).start()

    if config.REALTIME_FEEDBACK:
        print(f"Starting server with SocketIO at http://{config.HOST}:{config.PORT}")
        print("Press Ctrl+C to stop")
        app.extensions['socketio'].run(app, host=config.HOST, port=config.PORT,
                                       debug=False, allow_unsafe_werkzeug=True)
    else:
        # Use waitress for production-ready serving without live feedback
        from waitress import serve
        print(f"Starting server at http://{config.HOST}:{config.PORT}")
        print("Press Ctrl+C to stop")
        serve(app, host=config.HOST, port=config.PORT, threads=4)
