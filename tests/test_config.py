from protools_chat.chat_log import JsonFileStore, MemoryStore
from protools_chat.config import MAX_LOG_ENTRIES, Settings, build_context


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("PROTOOLS_FALLBACK_URL", "https://proxy.example/chat")
    monkeypatch.setenv("PROTOOLS_FALLBACK_ENABLED", "no")
    monkeypatch.setenv("PROTOOLS_FALLBACK_TIMEOUT", "3.5")
    monkeypatch.setenv("PROTOOLS_MAX_LOG_ENTRIES", "not a number")
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")

    settings = Settings.from_env()

    assert settings.fallback_url == "https://proxy.example/chat"
    assert settings.fallback_enabled is False
    assert settings.fallback_timeout == 3.5
    assert settings.max_log_entries == MAX_LOG_ENTRIES
    assert settings.gemini_api_key == "g-key"


def test_build_context_defaults_to_memory_and_course_base():
    context = build_context(Settings())

    assert isinstance(context.chat_log.store, MemoryStore)
    assert context.matcher.knowledge_base is context.knowledge_base
    assert context.matcher.match("How do I merge two datasets?").found


def test_build_context_uses_configured_files(tmp_path):
    kb_path = tmp_path / "kb.csv"
    kb_path.write_text("keywords,question,answer\nweather,Weather?,Not my area.\n", encoding="utf-8")
    settings = Settings(knowledge_path=str(kb_path), log_path=str(tmp_path / "log.json"), max_log_entries=5)

    context = build_context(settings)

    assert len(context.knowledge_base) == 1
    assert context.matcher.match("What's the weather like?").entry.answer == "Not my area."
    assert isinstance(context.chat_log.store, JsonFileStore)
    assert context.chat_log.capacity == 5


def test_build_context_falls_back_when_file_is_unusable(tmp_path):
    context = build_context(Settings(knowledge_path=str(tmp_path / "missing.xlsx")))

    assert len(context.knowledge_base) > 1
