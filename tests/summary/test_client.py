import asyncio
from datetime import datetime

import pytest
from pydantic_ai.messages import ModelMessage, ModelResponse, ToolCallPart, UserPromptPart
from pydantic_ai.models.function import AgentInfo, FunctionModel
from pydantic_ai.models.test import TestModel

from quill.journal.config import AppConfig
from quill.journal.exceptions import GenerationFailure
from quill.journal.summary.client import SummaryClient
from quill.journal.summary.models import DateRange

BODY = "Slept well and went for a long walk with [NAME]."


def _use_model(monkeypatch, model):
    def model_factory(model_config, app_config=None):
        return model

    monkeypatch.setattr("quill.journal.summary.client.get_model", model_factory)


def _prompts(messages: list[ModelMessage]) -> list[str]:
    return [
        part.content
        for message in messages
        for part in message.parts
        if isinstance(part, UserPromptPart) and isinstance(part.content, str)
    ]


def _tool_call(info: AgentInfo, args: dict) -> ModelResponse:
    return ModelResponse(
        parts=[ToolCallPart(tool_name=info.output_tools[0].name, args=args)]
    )


@pytest.mark.asyncio
class TestGenerate:
    async def test_generate_returns_structured_summary(self, monkeypatch):
        _use_model(
            monkeypatch,
            TestModel(
                custom_output_args={
                    "summary": "Rested and active day.",
                    "themes": ["rest", "exercise"],
                    "observations": "Sleep is improving.",
                }
            ),
        )
        client = SummaryClient(AppConfig())

        result = await client.generate("Monday", BODY, mood=7, tags=["sleep"])

        assert result.summary_text == "Rested and active day. Sleep is improving."
        assert result.word_count == 7
        assert result.key_themes == ["rest", "exercise"]

    async def test_prompt_carries_entry_fields(self, monkeypatch):
        prompts: list[str] = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            prompts.extend(_prompts(messages))
            return _tool_call(info, {"summary": "A calm day."})

        _use_model(monkeypatch, FunctionModel(respond))
        client = SummaryClient(AppConfig())

        await client.generate("Monday", BODY, mood=7, tags=["sleep", "walk"])
        await client.generate("", BODY)

        assert "Title: Monday" in prompts[0]
        assert "Mood Score: 7/10" in prompts[0]
        assert "Tags: sleep, walk" in prompts[0]
        assert BODY in prompts[0]
        assert "Title: Untitled" in prompts[1]
        assert "Mood Score: Not provided" in prompts[1]
        assert "Tags: None" in prompts[1]

    async def test_short_content_rejected_without_call(self, monkeypatch):
        calls = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            calls.append(messages)
            return _tool_call(info, {"summary": "unused"})

        _use_model(monkeypatch, FunctionModel(respond))
        client = SummaryClient(AppConfig())

        with pytest.raises(GenerationFailure, match="too short"):
            await client.generate("Title", "   short  ")
        assert calls == []

    async def test_code_fences_and_tags_stripped(self, monkeypatch):
        _use_model(
            monkeypatch,
            TestModel(
                custom_output_args={"summary": "```markdown\n<b>Calm</b> day\n```"}
            ),
        )
        client = SummaryClient(AppConfig())

        result = await client.generate("Monday", BODY)

        assert result.summary_text == "Calm day"
        assert result.word_count == 2

    async def test_empty_completion_is_failure(self, monkeypatch):
        _use_model(monkeypatch, TestModel(custom_output_args={"summary": "  "}))
        client = SummaryClient(AppConfig())

        with pytest.raises(GenerationFailure, match="empty"):
            await client.generate("Monday", BODY)

    async def test_upstream_error_retried_then_failure(self, monkeypatch):
        attempts = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            attempts.append(1)
            raise RuntimeError("upstream unavailable")

        _use_model(monkeypatch, FunctionModel(respond))
        client = SummaryClient(AppConfig(generation={"max_attempts": 2}))

        with pytest.raises(GenerationFailure) as exc_info:
            await client.generate("Monday", BODY)
        assert len(attempts) == 2
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_timeout_is_failure(self, monkeypatch):
        async def respond(
            messages: list[ModelMessage], info: AgentInfo
        ) -> ModelResponse:
            await asyncio.sleep(5)
            return _tool_call(info, {"summary": "too late"})

        _use_model(monkeypatch, FunctionModel(respond))
        client = SummaryClient(
            AppConfig(generation={"timeout": 0.05, "max_attempts": 1})
        )

        with pytest.raises(GenerationFailure) as exc_info:
            await client.generate("Monday", BODY)
        assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)


@pytest.mark.asyncio
class TestGenerateCombined:
    async def test_combined_prompt_and_recommendations(self, monkeypatch):
        prompts: list[str] = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            prompts.extend(_prompts(messages))
            return _tool_call(
                info,
                {
                    "overview": "Mood improved over the week.",
                    "themes": ["sleep"],
                    "recommendations": "Keep walking.",
                },
            )

        _use_model(monkeypatch, FunctionModel(respond))
        client = SummaryClient(AppConfig())

        result = await client.generate_combined(
            ["Slept badly.", "Walked a lot."],
            "custom",
            date_range=DateRange(
                start=datetime(2024, 3, 1), end=datetime(2024, 3, 7)
            ),
            overall_mood=5.5,
        )

        assert result.summary_text == (
            "Mood improved over the week. Recommendations: Keep walking."
        )
        assert result.key_themes == ["sleep"]
        prompt = prompts[0]
        assert "combined clinical overview from these 2 journal summaries" in prompt
        assert "Entry 1: Slept badly." in prompt
        assert "Entry 2: Walked a lot." in prompt
        assert "Period: 2024-03-01 to 2024-03-07" in prompt
        assert "Average mood: 5.5/10" in prompt

    async def test_combined_without_optional_context(self, monkeypatch):
        prompts: list[str] = []

        def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
            prompts.extend(_prompts(messages))
            return _tool_call(info, {"overview": "Steady week."})

        _use_model(monkeypatch, FunctionModel(respond))
        client = SummaryClient(AppConfig())

        result = await client.generate_combined(["Slept well all week."], "weekly")

        assert result.summary_text == "Steady week."
        assert "weekly clinical overview" in prompts[0]
        assert "Period:" not in prompts[0]
        assert "Average mood" not in prompts[0]

    async def test_combined_empty_input_rejected(self, monkeypatch):
        _use_model(monkeypatch, TestModel())
        client = SummaryClient(AppConfig())

        with pytest.raises(GenerationFailure):
            await client.generate_combined([])
