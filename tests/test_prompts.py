"""Tests for the dream prompt template and builder."""

from __future__ import annotations

from dream_sequence_mcp.prompts.dream import DEFAULT_PROMPT_TEMPLATE, build_prompt


class TestBuildPrompt:
    def test_replaces_every_occurrence(self):
        out = build_prompt("Joy", "Sunflowers", "{QUESTION}/{ANSWER}/{QUESTION}/{ANSWER}")
        assert out == "Joy/Sunflowers/Joy/Sunflowers"

    def test_missing_placeholder_is_noop(self):
        assert build_prompt("Joy", "Sunflowers", "Only {ANSWER} here") == "Only Sunflowers here"
        assert build_prompt("Joy", "Sunflowers", "No placeholders") == "No placeholders"

    def test_default_template_mentions_theme_and_detail(self):
        out = build_prompt("What is joy?", "A child laughing")
        assert "{QUESTION}" not in out
        assert "{ANSWER}" not in out
        assert out.startswith("(Cinematic visual style defined by: What is joy?): A child laughing.")
        assert out.count("What is joy?") == DEFAULT_PROMPT_TEMPLATE.count("{QUESTION}")

    def test_deterministic_under_reapplication(self):
        template = "{QUESTION} :: {ANSWER}"
        first = build_prompt("T", "D", template)
        assert build_prompt("T", "D", template) == first
        # Already-rendered text has no placeholders left, so rendering again is a no-op.
        assert build_prompt("T", "D", first) == first

    def test_theme_placeholder_text_is_expanded_by_detail(self):
        out = build_prompt("theme {ANSWER}", "detail", "{QUESTION}")
        # Theme is substituted first, then its literal {ANSWER} is filled too.
        assert out == "theme detail"
