"""Tests for summary request building."""

import pytest

from daily_digest.config import SummaryConfig
from daily_digest.llm.prompts import SummaryRequest, build_summary_request, truncate_content

from conftest import make_article


def test_request_fills_named_slots():
    article = make_article(title="Scaling Laws", source="Lab Blog", content="Larger models do better.")
    prompt = build_summary_request(article, SummaryConfig(language="Korean", target_chars=300)).render()

    assert "Title: Scaling Laws" in prompt
    assert "Source: Lab Blog" in prompt
    assert "Larger models do better." in prompt
    assert "in Korean" in prompt
    assert "300 characters" in prompt
    assert "2-3 sentences" in prompt


def test_content_is_cut_to_character_budget():
    article = make_article(content="가" * 5000)
    request = build_summary_request(article, SummaryConfig(max_chars=2000))

    assert request.content == "가" * 2000 + "..."


def test_truncation_drops_partial_trailing_word():
    text = "word " * 30 + "unfinished"
    cut = truncate_content(text, 147)

    assert cut.endswith("word...")
    assert "unfin" not in cut


def test_truncation_keeps_short_text_unchanged():
    assert truncate_content("short", 2000) == "short"


def test_braces_in_content_do_not_break_rendering():
    article = make_article(content="def f(): return {'a': 1}")
    prompt = build_summary_request(article, SummaryConfig()).render()

    assert "{'a': 1}" in prompt


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "  "},
        {"target_chars": 0},
        {"language": ""},
        {"content": "x" * 50, "max_content_chars": 10},
    ],
)
def test_invalid_requests_are_rejected(overrides):
    fields = {
        "title": "T",
        "source": "S",
        "content": "",
        "language": "Korean",
        "target_chars": 300,
        "max_content_chars": 2000,
    }
    fields.update(overrides)

    with pytest.raises(ValueError):
        SummaryRequest(**fields).validate()
