"""Agent tests with the gateway calls replaced by canned replies."""
import json

import pytest

import tenderdesk.agents.analysis_agent as analysis_agent
import tenderdesk.agents.draft_agent as draft_agent
import tenderdesk.agents.draft_writer_agent as draft_writer_agent
import tenderdesk.agents.extraction_agent as extraction_agent
import tenderdesk.agents.monitor_agent as monitor_agent
from tenderdesk.llm.client import GatewayError
from tenderdesk.models import RequirementItem
from tenderdesk.pipeline.rfp_pipeline import tender_from_extraction


def _reply(content):
    calls = []

    def _fake(messages, **kwargs):
        calls.append({"messages": messages, **kwargs})
        return content

    return _fake, calls


class TestExtractionAgent:
    def test_parses_fenced_json(self, monkeypatch):
        payload = {
            "title": "Bridge Inspection Services",
            "client": "State DOT",
            "deadline": "2030-06-01",
            "requirements": ["Licensed engineers", "Drone survey"],
            "goals": "Inspect 40 bridges",
            "scope": "Statewide",
            "evaluation": "Technical 70%, Price 30%",
            "clientSummary": "State transport agency.",
        }
        fake, calls = _reply("```json\n" + json.dumps(payload) + "\n```")
        monkeypatch.setattr(extraction_agent, "chat_completion", fake)

        result = extraction_agent.run_extraction_agent("RFP text")
        assert result.title == "Bridge Inspection Services"
        assert result.requirements == "- Licensed engineers\n- Drone survey"
        assert result.client_summary == "State transport agency."
        assert calls[0]["response_format"] == {"type": "json_object"}

    def test_truncates_long_documents(self, monkeypatch):
        fake, calls = _reply('{"title": "T"}')
        monkeypatch.setattr(extraction_agent, "chat_completion", fake)

        extraction_agent.run_extraction_agent("q" * 20000)
        user_prompt = calls[0]["messages"][1]["content"]
        assert user_prompt.count("q") == extraction_agent.MAX_DOCUMENT_CHARS

    def test_unparseable_reply_uses_fallback(self, monkeypatch):
        fake, _ = _reply("I could not read this document.")
        monkeypatch.setattr(extraction_agent, "chat_completion", fake)

        result = extraction_agent.run_extraction_agent("garbled")
        assert result.title == "RFP Document"
        assert result.client == "Client Organization"
        assert result.deadline

        tender = tender_from_extraction(result)
        assert tender.client_name == "Client Organization"
        assert tender.deadline is not None

    def test_repeated_document_is_cached(self, monkeypatch):
        fake, calls = _reply('{"title": "Cached"}')
        monkeypatch.setattr(extraction_agent, "chat_completion", fake)

        first = extraction_agent.run_extraction_agent("same text")
        second = extraction_agent.run_extraction_agent("same text")
        assert first.title == second.title == "Cached"
        assert len(calls) == 1


class TestAnalysisAgent:
    def test_maps_tool_arguments(self, monkeypatch):
        captured = {}

        def _fake_tool_call(messages, tool, **kwargs):
            captured["tool"] = tool["function"]["name"]
            captured["prompt"] = messages[1]["content"]
            return {
                "analysis": [
                    {"requirementId": "REQ-01", "isMet": True, "explanation": "Section 2 covers it"},
                    {"requirement_id": "REQ-02", "is_met": False, "explanation": "Missing", "suggestion": "Add SLA"},
                    {"requirementId": "REQ-99", "isMet": True, "explanation": "Unknown id"},
                ]
            }

        monkeypatch.setattr(analysis_agent, "chat_completion_tool_call", _fake_tool_call)
        requirements = [
            RequirementItem(id="REQ-01", title="24/7 support"),
            RequirementItem(id="REQ-02", title="Uptime SLA", mandatory=False),
        ]
        result = analysis_agent.analyze_draft("<p>draft</p>", requirements)

        assert captured["tool"] == "analyze_requirements"
        assert "[OPTIONAL] REQ-02: Uptime SLA" in captured["prompt"]
        assert [(a.requirement_id, a.is_met) for a in result] == [("REQ-01", True), ("REQ-02", False)]
        assert result[1].suggestion == "Add SLA"

    def test_no_requirements_skips_gateway(self, monkeypatch):
        def _fail(*args, **kwargs):
            raise AssertionError("gateway should not be called")

        monkeypatch.setattr(analysis_agent, "chat_completion_tool_call", _fail)
        assert analysis_agent.analyze_draft("draft", []) == []


class TestDraftAgents:
    def test_generate_draft_includes_requirement_tags(self, monkeypatch):
        fake, calls = _reply("<h1>Response</h1>")
        monkeypatch.setattr(draft_agent, "chat_completion", fake)

        content = draft_agent.generate_draft(
            [RequirementItem(id="r1", title="Training", mandatory=False, description="Two sessions")],
            {"title": "LMS rollout"},
            existing_content="<p>Intro</p>",
        )
        prompt = calls[0]["messages"][1]["content"]
        assert content == "<h1>Response</h1>"
        assert "- [OPTIONAL] Training: Two sessions" in prompt
        assert "Existing draft content to build upon:\n<p>Intro</p>" in prompt

    def test_empty_reply_is_an_error(self, monkeypatch):
        fake, _ = _reply("   ")
        monkeypatch.setattr(draft_agent, "chat_completion", fake)
        with pytest.raises(GatewayError, match="No draft content generated"):
            draft_agent.generate_tender_draft({"title": "T"})

    def test_tender_context_fills_missing_fields(self):
        context = draft_agent.build_tender_context({"title": "T", "win_themes": ["Speed"]})
        assert "Tender Title: T" in context
        assert "Client: N/A" in context
        assert 'Win Themes: ["Speed"]' in context
        assert "Deliverables: []" in context

    def test_draft_writer_requires_target_for_sections(self):
        with pytest.raises(ValueError):
            draft_writer_agent.run_draft_writer("add_section", current_draft="<p>x</p>")
        with pytest.raises(ValueError):
            draft_writer_agent.run_draft_writer("translate")

    def test_draft_writer_improve_prompt(self, monkeypatch):
        fake, calls = _reply("<p>Better</p>")
        monkeypatch.setattr(draft_writer_agent, "chat_completion", fake)

        result = draft_writer_agent.run_draft_writer(
            "improve_section", current_draft="<p>Old</p>", target_requirement="Data residency"
        )
        prompt = calls[0]["messages"][1]["content"]
        assert result == "<p>Better</p>"
        assert "REQUIREMENT TO ADDRESS:\nData residency" in prompt
        assert "CURRENT DRAFT:\n<p>Old</p>" in prompt


class TestMonitorAgent:
    def test_normalizes_reply(self, monkeypatch):
        reply = json.dumps(
            {
                "overallScore": 140,
                "summary": "Mostly there",
                "requirements": [
                    {"requirement": "SLA", "status": "MET", "coverage": 90},
                    {"requirement": "Training", "status": "unclear", "coverage": -5, "suggestions": ["a", "b"]},
                ],
                "nextSteps": ["Add training plan"],
            }
        )
        fake, _ = _reply(reply)
        monkeypatch.setattr(monitor_agent, "chat_completion", fake)

        analysis = monitor_agent.monitor_requirements("<p>draft</p>", "- SLA\n- Training")
        assert analysis.overall_score == 100.0
        assert [r.status for r in analysis.requirements] == ["met", "missing"]
        assert analysis.requirements[1].coverage == 0.0
        assert analysis.requirements[1].suggestions == "a\nb"
        assert analysis.next_steps == ["Add training plan"]

    def test_unparseable_reply_is_gateway_error(self, monkeypatch):
        fake, _ = _reply("not json at all")
        monkeypatch.setattr(monitor_agent, "chat_completion", fake)
        with pytest.raises(GatewayError, match="could not be parsed"):
            monitor_agent.monitor_requirements("draft", "reqs")
