# File: site_indexer/extraction/codegen.py
"""
Code generation client for the generated extraction strategy.

The service receives the raw markup of one page plus a fixed description of
the function to write and must answer with source code only.
"""
from __future__ import annotations

from typing import Protocol

from openai import AsyncOpenAI

from site_indexer.errors import StrategyBuildError
from site_indexer.extraction.base import NON_CONTENT_TAGS
from site_indexer.logger import get_logger

__all__ = ("CodeGenerator", "OpenAICodeGenerator", "ENTRYPOINT", "SYSTEM_PROMPT", "build_prompt")

logger = get_logger("codegen")

ENTRYPOINT = "extract_text"

SYSTEM_PROMPT = (
    "You write small, self-contained Python functions. "
    "Answer with Python source code only: no prose, no explanations."
)

_PROMPT_TEMPLATE = """\
Below is the HTML of a page from the website we are going to crawl.

Write one Python function with exactly this signature:

    async def {entrypoint}(page) -> str

`page` is a restricted page handle. These are the ONLY operations it supports:

    await page.wait_for_load_state("networkidle")   # wait for dynamic content
    await page.remove(css_selector)                 # remove all matching elements, returns count
    await page.inner_text("body")                   # rendered text of the first match, "" if none
    await page.text_content("body")                 # raw text of the first match, "" if none
    await page.title()                              # document title
    page.url                                        # loaded URL

The function must:
1. wait for dynamic content to finish loading;
2. remove these non-content elements: {tags};
3. return only the main textual content of the page as a string, with runs of
   whitespace collapsed to single spaces and leading/trailing whitespace removed.
   Return "" when there is no text.

Rules: do not import anything except `re`; do not use names or attributes that
start with an underscore; do not define classes; do not use getattr, eval, exec,
open or type. Plain str/list methods and the `re` module are available.

HTML:
{markup}
"""


def build_prompt(markup: str) -> str:
    tags = ", ".join(sorted(NON_CONTENT_TAGS))
    return _PROMPT_TEMPLATE.format(entrypoint=ENTRYPOINT, tags=tags, markup=markup)


class CodeGenerator(Protocol):
    async def generate(self, markup: str) -> str: ...


class OpenAICodeGenerator:
    """Chat-completion backed generator; the client is injected by the caller."""

    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-4o-mini", temperature: float = 0.0) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature

    async def generate(self, markup: str) -> str:
        logger.info("Requesting extractor source from %s (%d chars of markup)", self.model, len(markup))
        completion = await self.client.chat.completions.create(
            model=self.model,
            temperature=self.temperature,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(markup)},
            ],
        )
        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise StrategyBuildError("Code generation service returned no content")
        return content
