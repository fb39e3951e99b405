# File: tests/test_codegen.py
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from site_indexer.errors import StrategyBuildError
from site_indexer.extraction.codegen import ENTRYPOINT, SYSTEM_PROMPT, OpenAICodeGenerator, build_prompt


def fake_client(content):
    choices = [SimpleNamespace(message=SimpleNamespace(content=content))] if content is not None else []
    create = AsyncMock(return_value=SimpleNamespace(choices=choices))
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


def test_prompt_describes_the_function_and_includes_markup():
    prompt = build_prompt("<html><body>sample</body></html>")
    assert f"async def {ENTRYPOINT}(page) -> str" in prompt
    assert "networkidle" in prompt
    assert "script" in prompt and "footer" in prompt
    assert prompt.rstrip().endswith("<html><body>sample</body></html>")


@pytest.mark.asyncio()
async def test_generate_returns_answer_text():
    client, create = fake_client("async def extract_text(page):\n    return ''")
    generator = OpenAICodeGenerator(client, model="test-model")

    answer = await generator.generate("<html></html>")

    assert answer.startswith("async def extract_text")
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["temperature"] == 0.0
    assert kwargs["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert "<html></html>" in kwargs["messages"][1]["content"]


@pytest.mark.asyncio()
@pytest.mark.parametrize("content", [None, "", "  \n"])
async def test_empty_answer_is_a_build_error(content):
    client, _ = fake_client(content)
    with pytest.raises(StrategyBuildError):
        await OpenAICodeGenerator(client).generate("<html></html>")
