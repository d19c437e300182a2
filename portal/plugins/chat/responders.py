"""
Reply generators for chat sessions: canned keyword responses in mock mode,
OpenAI chat completions otherwise.
"""
import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from openai import AsyncOpenAI, OpenAIError

from portal.core.errors import UpstreamUnavailable
from portal.core.simulator import simulate_delay
from portal.plugins.chat import personas

FALLBACK_REPLY = "I apologize, but I could not generate a response."


class ChatResponder(ABC):
    """Produces one assistant reply from the persona, recent history and the new message."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    async def generate(self, bot_type: str, history: List[Dict[str, str]], message: str) -> str:
        pass


class MockChatResponder(ChatResponder):

    def __init__(self, delay_ms: int = 500, rng: Optional[random.Random] = None, logger: Optional[logging.Logger] = None):
        super().__init__(logger=logger)
        self.delay_ms = delay_ms
        self.rng = rng

    async def generate(self, bot_type: str, history: List[Dict[str, str]], message: str) -> str:
        self.logger.info(f"[MOCK] AI Chat - Bot: {bot_type}, Message: {message[:50]}...")
        # completions are slower than the data APIs
        await simulate_delay(self.delay_ms + 500)
        return personas.pick_canned_response(bot_type, message, self.rng)


class LiveChatResponder(ChatResponder):

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-4",
        max_tokens: int = 500,
        temperature: float = 0.7,
        client: Optional[AsyncOpenAI] = None,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger=logger)
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def build_messages(self, bot_type: str, history: List[Dict[str, str]], message: str) -> List[Dict[str, str]]:
        system_prompt = personas.SYSTEM_PROMPTS.get(bot_type, personas.SYSTEM_PROMPTS["campus"])
        return (
            [{"role": "system", "content": system_prompt}]
            + [{"role": m["role"], "content": m["content"]} for m in history]
            + [{"role": "user", "content": message}]
        )

    async def generate(self, bot_type: str, history: List[Dict[str, str]], message: str) -> str:
        try:
            completion = await self.client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(bot_type, history, message),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            self.logger.error(f"Chat completion failed for bot {bot_type}: {e}")
            raise UpstreamUnavailable(f"Chat completion failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        return content or FALLBACK_REPLY


def get_responder(mock_mode: bool, config: dict, delay_ms: int = 500, logger=None) -> ChatResponder:
    """Factory: canned responder in mock mode, otherwise OpenAI from the openai config section."""
    if mock_mode:
        return MockChatResponder(delay_ms=delay_ms, logger=logger)
    return LiveChatResponder(
        api_key=config.get("api_key"),
        model=config.get("model") or "gpt-4",
        max_tokens=int(config.get("max_tokens") or 500),
        logger=logger,
    )
