import pytest

from app import create_app
from protools_chat.config import Settings
from protools_chat.counter import SessionCounter
from protools_chat.llm import LLMError
from protools_chat.prompts import EMPTY_REPLY, LIMIT_REACHED_REPLY


class FakeLLM:
    name = "fake"

    def __init__(self, reply="Try Module 6.", error=None):
        self.reply = reply
        self.error = error
        self.messages = []

    def generate(self, message):
        self.messages.append(message)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def counter():
    return SessionCounter(limit=2, today=lambda: "2026-01-16")


def client_for(llm, counter, settings=None):
    app = create_app(settings or Settings(), llm=llm, counter=counter)
    app.config["TESTING"] = True
    return app.test_client()


def test_chat_returns_reply_and_counts(counter):
    llm = FakeLLM()
    client = client_for(llm, counter)

    res = client.post("/chat", json={"message": "  explain parallel trends "})

    assert res.status_code == 200
    assert res.get_json() == {"reply": "Try Module 6."}
    assert llm.messages == ["explain parallel trends"]
    assert counter.current() == 1


def test_daily_limit_returns_429(counter):
    llm = FakeLLM()
    client = client_for(llm, counter)
    client.post("/chat", json={"message": "one"})
    client.post("/chat", json={"message": "two"})

    res = client.post("/chat", json={"message": "three"})

    assert res.status_code == 429
    assert res.get_json() == {"error": "limit_reached", "reply": LIMIT_REACHED_REPLY}
    assert len(llm.messages) == 2


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": 42}, None])
def test_missing_message_is_rejected(counter, body):
    client = client_for(FakeLLM(), counter)

    res = client.post("/chat", json=body) if body is not None else client.post("/chat", data="not json")

    assert res.status_code == 400
    assert res.get_json() == {"error": "No message provided"}


def test_upstream_failure_does_not_count(counter):
    client = client_for(FakeLLM(error=LLMError("quota")), counter)

    res = client.post("/chat", json={"message": "hi"})

    assert res.status_code == 500
    assert res.get_json() == {"error": "API error", "details": "quota"}
    assert counter.current() == 0


def test_empty_upstream_answer_gets_placeholder(counter):
    client = client_for(FakeLLM(reply=""), counter)

    res = client.post("/chat", json={"message": "hi"})

    assert res.get_json() == {"reply": EMPTY_REPLY}


def test_no_api_key_configured(counter):
    client = client_for(None, counter, settings=Settings())

    res = client.post("/chat", json={"message": "hi"})

    assert res.status_code == 500
    assert "No API key configured" in res.get_json()["error"]


def test_get_on_chat_is_not_allowed(counter):
    res = client_for(FakeLLM(), counter).get("/chat")

    assert res.status_code == 405
    assert res.get_json() == {"error": "Method not allowed"}


def test_cors_headers_present(counter):
    res = client_for(FakeLLM(), counter).post(
        "/chat", json={"message": "hi"}, headers={"Origin": "https://example.org"}
    )

    assert res.headers.get("Access-Control-Allow-Origin") == "*"


def test_health(counter):
    client = client_for(FakeLLM(), counter)
    client.post("/chat", json={"message": "hi"})

    res = client.get("/health")

    assert res.get_json() == {"ok": True, "provider": "fake", "requests_today": 1}


def test_cors_preflight_allows_any_origin(counter):
    res = client_for(FakeLLM(), counter).options(
        "/chat",
        headers={
            "Origin": "https://student.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert res.headers.get("Access-Control-Allow-Origin") == "*"
    assert "POST" in res.headers.get("Access-Control-Allow-Methods", "")


def test_rejected_requests_give_their_slot_back(counter):
    client = client_for(FakeLLM(), counter)
    client.post("/chat", json={"message": ""})
    client_for(None, counter).post("/chat", json={"message": "hi"})

    assert counter.current() == 0
    assert client.post("/chat", json={"message": "one"}).status_code == 200
    assert client.post("/chat", json={"message": "two"}).status_code == 200
    assert client.post("/chat", json={"message": "three"}).status_code == 429
