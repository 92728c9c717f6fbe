"""Tests for the classification oracles."""

import inspect
import json

import pytest
import requests

from artifact_lanes.config import DEFAULT_OPENAI_CONFIG, OpenAIConfig
from artifact_lanes.etl.classify import (
    ClassificationResult,
    FallbackOracle,
    HeuristicOracle,
    RemoteOracle,
    build_oracle,
)
from artifact_lanes.etl.llm import RemoteServiceError, ResponseParseError, extract_json_object


class TestHeuristicOracle:
    """Deterministic keyword classification."""

    def test_default_lane_and_title(self):
        """Should fall back to lane A and use the first words as title."""
        result = HeuristicOracle().classify("Keep artifacts atomic: one idea per post.")

        assert result.lane == "A"
        assert result.title == "Keep artifacts atomic: one idea per post."
        assert result.tags == []
        assert result.method == "heuristic"

    def test_title_first_eight_words_of_first_line(self):
        """Should take at most eight words from the first line only."""
        text = "one two three four five six seven eight nine ten\nsecond line"

        result = HeuristicOracle().classify(text)

        assert result.title == "one two three four five six seven eight"

    def test_diagram_wins_over_other_lanes(self):
        """Should pick B whenever a visual keyword appears."""
        text = "A prompt template that outputs JSON schema notes, plus a diagram."

        assert HeuristicOracle().classify(text).lane == "B"

    def test_lane_priority_order(self):
        """Should scan C before D before E."""
        oracle = HeuristicOracle()

        assert oracle.classify("Rubric Prompt Template: output only JSON").lane == "C"
        assert oracle.classify("The API returns a list").lane == "D"
        assert oracle.classify("An insight worth keeping").lane == "E"

    def test_substring_matches(self):
        """Should match keywords inside longer words, e.g. 'graph' in 'Task Graph'."""
        text = "Task Graph Schema (JSON): nodes, edges, params."

        assert HeuristicOracle().classify(text).lane == "B"

    def test_vocabulary_tags(self):
        """Should collect vocabulary terms in vocabulary order, hyphenated."""
        text = "The Agent follows the north star; kernel first, agent again."

        result = HeuristicOracle().classify(text)

        assert result.tags == ["kernel", "agent", "north-star"]

    def test_summary_collapses_whitespace(self):
        """Should take the first 140 characters with whitespace collapsed."""
        text = "line one\n\n   line two " + "x" * 200

        result = HeuristicOracle().classify(text)

        assert result.summary.startswith("line one line two x")
        assert "\n" not in result.summary
        assert len(result.summary) <= 140

    @pytest.mark.parametrize("text", ["", "   ", "\n\n"])
    def test_empty_input(self, text):
        """Should not raise on empty or whitespace-only input."""
        result = HeuristicOracle().classify(text)

        assert result.lane == "A"
        assert result.title == ""
        assert result.summary == ""


class TestExtractJsonObject:
    """Lenient decoding of model output."""

    def test_plain_json(self):
        assert extract_json_object('{"lane": "B"}') == {"lane": "B"}

    def test_code_fenced_json(self):
        assert extract_json_object('```json\n{"lane": "C"}\n```') == {"lane": "C"}

    def test_json_embedded_in_prose(self):
        text = 'Sure! Here it is: {"lane": "D", "tags": ["a"]} Hope that helps.'

        assert extract_json_object(text) == {"lane": "D", "tags": ["a"]}

    @pytest.mark.parametrize("text", ["no json here", "[1, 2, 3]", "{broken", ""])
    def test_unparseable(self, text):
        with pytest.raises(ResponseParseError):
            extract_json_object(text)


class TestRemoteOracle:
    """Structured-output chat classification."""

    def test_classify(self, monkeypatch, openai_config, chat_response):
        """Should send one JSON-mode request and decode the reply."""
        calls = []
        reply = {
            "title": "Atomic Artifacts",
            "lane": "E",
            "status": "draft",
            "tags": ["kernel", "notes"],
            "summary": "Keep ideas small.",
            "publish_targets": ["twitter"],
            "content": "Keep artifacts atomic.",
        }
        reply_text = "```json\n" + json.dumps(reply) + "\n```"

        def fake_post(url, json=None, headers=None, timeout=None):
            calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
            return chat_response(reply_text)

        monkeypatch.setattr(requests, "post", fake_post)

        result = RemoteOracle(openai_config).classify("Keep artifacts atomic.", "")

        assert len(calls) == 1
        assert calls[0]["url"] == "https://llm.test/v1/chat/completions"
        assert calls[0]["headers"]["Authorization"] == "Bearer test-key"
        payload = calls[0]["json"]
        assert payload["model"] == "test-chat"
        assert payload["temperature"] == 0.2
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["messages"][0]["role"] == "system"
        assert payload["messages"][1]["content"] == (
            "FRONTMATTER:\n(none)\n\nCONTENT:\nKeep artifacts atomic."
        )
        assert result == ClassificationResult(
            title="Atomic Artifacts",
            lane="E",
            status="draft",
            tags=["kernel", "notes"],
            summary="Keep ideas small.",
            publish_targets=["twitter"],
            content="Keep artifacts atomic.",
            method="remote",
        )

    def test_passes_frontmatter_hints(self, monkeypatch, openai_config, chat_response):
        """Should include raw frontmatter in the user message."""
        seen = []

        def fake_post(url, json=None, headers=None, timeout=None):
            seen.append(json["messages"][1]["content"])
            return chat_response('{"title": "t", "lane": "A"}')

        monkeypatch.setattr(requests, "post", fake_post)

        RemoteOracle(openai_config).classify("body", 'status: "draft"')

        assert seen[0].startswith('FRONTMATTER:\nstatus: "draft"\n\nCONTENT:\nbody')

    def test_http_error(self, monkeypatch, openai_config, make_response):
        """Should raise on non-2xx responses."""
        monkeypatch.setattr(
            requests,
            "post",
            lambda *a, **kw: make_response({"error": "rate limited"}, status_code=429),
        )

        with pytest.raises(RemoteServiceError, match="429"):
            RemoteOracle(openai_config).classify("body")

    def test_unparseable_reply(self, monkeypatch, openai_config, chat_response):
        """Should treat a non-JSON reply as a hard failure."""
        monkeypatch.setattr(requests, "post", lambda *a, **kw: chat_response("I cannot help"))

        with pytest.raises(ResponseParseError):
            RemoteOracle(openai_config).classify("body")


class TestClassificationResultFromDict:
    """Lenient construction from model output."""

    def test_mistyped_fields(self):
        """Should coerce or drop fields of the wrong type."""
        result = ClassificationResult.from_dict(
            {
                "title": None,
                "lane": 5,
                "tags": "kernel",
                "publish_targets": "github",
                "content": "  ",
            }
        )

        assert result.title == ""
        assert result.lane == "5"
        assert result.tags == []
        assert result.publish_targets == "github"
        assert result.content is None


class TestBuildOracle:
    """Oracle selection."""

    def test_dry_run_uses_heuristic(self, openai_config):
        assert isinstance(build_oracle(openai_config, dry_run=True), HeuristicOracle)

    def test_missing_key_uses_heuristic(self, openai_config):
        openai_config.api_key = ""

        assert isinstance(build_oracle(openai_config), HeuristicOracle)

    def test_none_config_uses_default(self):
        """Should accept an explicit None and use the environment config."""
        assert RemoteOracle(None).config is DEFAULT_OPENAI_CONFIG
        assert inspect.signature(RemoteOracle).parameters["config"].annotation == (
            OpenAIConfig | None
        )
        assert inspect.signature(build_oracle).parameters["config"].annotation == (
            OpenAIConfig | None
        )

    def test_configured_uses_fallback(self, openai_config):
        oracle = build_oracle(openai_config)

        assert isinstance(oracle, FallbackOracle)
        assert isinstance(oracle.primary, RemoteOracle)
        assert isinstance(oracle.fallback, HeuristicOracle)