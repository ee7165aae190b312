"""
Campfire - ResponseSynthesizer
===============================
Builds the grounded prompt from matched products and asks the chat model
for a friendly answer.

The answer is never empty: no matches, an LLM failure or a blank completion
all yield ``NO_ANSWER_RESPONSE`` with the user's question embedded.
"""

from __future__ import annotations

import json
import time
from collections.abc import Sequence

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from campfire.config.prompt_templates import NO_ANSWER_RESPONSE, NO_CONTEXT_PLACEHOLDER, PRODUCT_CONTEXT_TEMPLATE, SEARCH_PROMPT_TEMPLATE, SYSTEM_PROMPT
from campfire.config.settings import settings
from campfire.src.core.clients import ChatModel
from campfire.src.core.models import QueryMatch
from campfire.src.utils.async_utils import run_with_timeout
from campfire.src.utils.logger import get_logger

logger = get_logger(__name__)


def fallback_answer(query_text: str) -> str:
    return NO_ANSWER_RESPONSE.format(question=query_text)


def format_products(matches: Sequence[QueryMatch]) -> str:
    """Numbered grounding block, one entry per matched product in match order."""
    if not matches:
        return NO_CONTEXT_PLACEHOLDER

    blocks = [
        PRODUCT_CONTEXT_TEMPLATE.format(position=i, name=m.product.name, description=m.product.description, price=m.product.price)
        for i, m in enumerate(matches, 1)
    ]
    return "\n".join(blocks)


def build_messages(query_text: str, matches: Sequence[QueryMatch]) -> list[BaseMessage]:
    """System instruction + user prompt carrying the question and the grounding block."""
    prompt = SEARCH_PROMPT_TEMPLATE.format(question=query_text, products=format_products(matches))
    return [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]


class ResponseSynthesizer:
    """
    Parameters
    ----------
    llm
        ``ChatModel``-compatible object (``ChatGoogleGenerativeAI`` in production).
    timeout
        Bound for the chat call in seconds.
    """

    __slots__ = ("_llm", "_timeout")

    def __init__(self, llm: ChatModel, timeout: float | None = None) -> None:
        self._llm = llm
        self._timeout = timeout or settings.REMOTE_CALL_TIMEOUT_SECONDS


    async def synthesize(self, query_text: str, matches: Sequence[QueryMatch]) -> str:
        """Return the answer text for *query_text* grounded on *matches*."""
        if not matches:
            logger.info("[SYNTH] No matches: answering with the fallback message.")
            return fallback_answer(query_text)

        messages = build_messages(query_text, matches)
        logger.debug("[SYNTH] %s", json.dumps([{"role": m.type, "content": m.content} for m in messages], ensure_ascii=False))

        t_llm = time.perf_counter()
        try:
            response_obj = await run_with_timeout(self._llm.ainvoke(messages), self._timeout, "chat completion")
            answer = self._extract_text(response_obj)
        except Exception:
            logger.exception("[SYNTH] LLM call failed.")
            return fallback_answer(query_text)

        llm_ms = (time.perf_counter() - t_llm) * 1000
        if not answer.strip():
            logger.warning("[SYNTH] LLM returned an empty completion after %.1fms.", llm_ms)
            return fallback_answer(query_text)

        logger.info("[SYNTH] LLM response: %.1fms (%d chars)", llm_ms, len(answer))
        return answer


    @staticmethod
    def _extract_text(response_obj: object) -> str:
        """Text of the first completion; content may be a string or a list of parts."""
        content = response_obj.content if hasattr(response_obj, "content") else response_obj
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = [part if isinstance(part, str) else part.get("text", "") for part in content if isinstance(part, (str, dict))]
            return "".join(parts)
        return str(content)
