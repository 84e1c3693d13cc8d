import json
import time
from typing import Any, Dict, List, Optional

from reason3.llm import Message, ModelTransport
from reason3.logger import get_logger
from reason3.prompts import CHAT_SYSTEM_PROMPT

logger = get_logger(__name__)

CHAT_TEMPERATURE = 0.7
CHAT_UNAVAILABLE_REPLY = "Sorry, I can't reach the assistant right now. Please try again in a moment."


class AnalysisChat:
    """Follow-up Q&A about the latest analysis, kept as one running conversation."""

    def __init__(self, transport: Optional[ModelTransport] = None):
        self.transport = transport
        self.history: List[Message] = [{"role": "system", "content": CHAT_SYSTEM_PROMPT}]
        # Serialized form of the result the context turns describe
        self._context_key: Optional[str] = None

    def set_context(self, result: Optional[Dict[str, Any]]) -> None:
        """Point the assistant at a new analysis result.

        The context turn pair always sits right after the system prompt and is
        replaced, not appended, so history holds at most one result.
        """
        if result is None:
            return
        key = json.dumps(result, sort_keys=True, ensure_ascii=False)
        if key == self._context_key:
            return
        turns: List[Message] = [
            {
                "role": "user",
                "content": "Context update: here is the latest analysis result as JSON. "
                           "Use it to answer my next questions.\n" + key,
            },
            {"role": "assistant", "content": "Understood. Ask me anything about this analysis."},
        ]
        if self._context_key is None:
            self.history[1:1] = turns
        else:
            self.history[1:3] = turns
        self._context_key = key
        logger.info("Chat context updated | target='%s'", str(result.get("analysis_target", ""))[:80])

    async def send(self, text: str) -> str:
        if self.transport is None:
            logger.warning("Chat unavailable: no transport configured")
            return CHAT_UNAVAILABLE_REPLY

        self.history.append({"role": "user", "content": text})
        start = time.perf_counter()
        try:
            reply = await self.transport.complete(self.history, temperature=CHAT_TEMPERATURE, json_mode=False)
        except Exception as exc:
            logger.error("Chat ERROR | elapsed=%.2fs error=%s", time.perf_counter() - start, exc, exc_info=True)
            # Drop the unanswered turn so the next message starts clean
            self.history.pop()
            return CHAT_UNAVAILABLE_REPLY

        self.history.append({"role": "assistant", "content": reply})
        logger.info("Chat reply | elapsed=%.2fs resp_len=%d", time.perf_counter() - start, len(reply))
        return reply
