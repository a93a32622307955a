from protools_chat.knowledge import default_knowledge_base, load_knowledge_base


def test_default_base_entries_are_well_formed():
    kb = default_knowledge_base()

    assert len(kb) > 10
    for e in kb:
        assert e.keywords
        assert all(k == k.lower() and k.strip() for k in e.keywords)
        assert e.question and e.answer


def test_default_base_keeps_insertion_order():
    kb = default_knowledge_base()

    assert kb.questions()[0] == "How do I merge or join datasets?"
    assert kb.questions()[-1] == "Thank you"
    assert kb.find("What is regression discontinuity?") is kb[kb.questions().index("What is regression discontinuity?")]


def test_load_from_csv(tmp_path):
    path = tmp_path / "kb.csv"
    path.write_text(
        " Keywords ,Question,Answer\n"
        "\"merge, join\",How do I merge?,Use merge.\n"
        ",Blank row,\n"
        "git,Git basics,Commit often.\n",
        encoding="utf-8",
    )

    kb = load_knowledge_base(path)

    assert kb is not None
    assert len(kb) == 2
    assert kb[0].keywords == frozenset({"merge", "join"})
    assert kb[1].answer == "Commit often."


def test_load_with_missing_columns_returns_none(tmp_path):
    path = tmp_path / "kb.csv"
    path.write_text("keywords,answer\nmerge,Use merge.\n", encoding="utf-8")

    assert load_knowledge_base(path) is None


def test_load_missing_file_returns_none(tmp_path):
    assert load_knowledge_base(tmp_path / "nope.csv") is None
