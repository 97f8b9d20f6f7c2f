from types import SimpleNamespace

import pytest

from paperlens.application.prompts import PromptRegistry
from paperlens.infrastructure.llm.openai_text_generator import OpenAITextGenerator


class _FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.content is None:
            return SimpleNamespace(choices=[])
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeClient:
    def __init__(self, content):
        self.chat = SimpleNamespace(completions=_FakeCompletions(content))
        self.closed = False

    async def close(self):
        self.closed = True


@pytest.mark.asyncio
async def test_complete_sends_system_and_user_messages():
    client = _FakeClient("  • one\n• two  ")
    generator = OpenAITextGenerator("key", model="gpt-4o-mini", client=client)

    text = await generator.complete(system="be brief", user="summarize this")

    assert text == "• one\n• two"
    call = client.chat.completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["messages"] == [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "summarize this"},
    ]
    assert call["temperature"] == 0.3


@pytest.mark.asyncio
async def test_complete_without_choices_is_empty():
    generator = OpenAITextGenerator("key", model="m", client=_FakeClient(None))
    assert await generator.complete(system="s", user="u") == ""


@pytest.mark.asyncio
async def test_close_closes_client():
    client = _FakeClient("x")
    await OpenAITextGenerator("key", model="m", client=client).close()
    assert client.closed is True


def test_prompt_registry_renders_paper_fields():
    registry = PromptRegistry()
    assert registry.list() == ["detailed_summary", "medium_summary", "short_summary"]

    rendered = registry.get("Short_Summary").render(
        title="Graph Learning",
        authors="Ada Lovelace",
        domain="Computer Science",
        journal="ArXiv",
        published="2024-01-02",
        abstract="We study graphs.",
    )
    assert "Graph Learning" in rendered
    assert "We study graphs." in rendered

    with pytest.raises(KeyError):
        registry.get("haiku")
