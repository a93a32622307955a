from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from protools_chat.chat_log import JsonFileStore
from protools_chat.config import Settings
from protools_chat.counter import SessionCounter
from protools_chat.llm import LLMError, select_llm
from protools_chat.logging import configure_logging, get_logger
from protools_chat.prompts import EMPTY_REPLY, LIMIT_REACHED_REPLY

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, llm=None, counter: Optional[SessionCounter] = None) -> Flask:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    if llm is None:
        llm = select_llm(settings)
    if counter is None:
        store = JsonFileStore(f"{settings.log_path}.counter") if settings.log_path else None
        counter = SessionCounter(store, limit=settings.daily_limit)

    app = Flask(__name__)
    CORS(app, origins="*", send_wildcard=True, methods=["POST", "OPTIONS"], allow_headers=["Content-Type"])

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return jsonify({"error": "Method not allowed"}), 405

    @app.get("/health")
    def health():
        return jsonify({
            "ok": True,
            "provider": llm.name if llm else None,
            "requests_today": counter.current(),
        })

    @app.post("/chat")
    def chat():
        if not counter.try_acquire():
            logger.info("daily_limit_reached", limit=counter.limit)
            return jsonify({"error": "limit_reached", "reply": LIMIT_REACHED_REPLY}), 429

        data = request.get_json(silent=True) or {}
        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, str) or not message.strip():
            counter.release()
            return jsonify({"error": "No message provided"}), 400

        if llm is None:
            counter.release()
            return jsonify({
                "error": "No API key configured. Set OPENAI_API_KEY or GEMINI_API_KEY in the environment."
            }), 500

        try:
            reply = llm.generate(message.strip())
        except LLMError as exc:
            counter.release()
            logger.warning("upstream_failed", provider=llm.name, error=str(exc))
            return jsonify({"error": "API error", "details": str(exc)}), 500

        logger.info("chat_proxied", provider=llm.name, requests_today=counter.current())
        return jsonify({"reply": reply or EMPTY_REPLY})

    return app


if __name__ == "__main__":
    # Run: python app.py
    create_app().run(host="127.0.0.1", port=5000, debug=True)
