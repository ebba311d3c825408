"""
Interactive After Effects agent.

Runs an OpenAI Agents SDK agent in-process with the tools from ae_tools and
reads prompts from stdin. The command manager must be set up before use.
"""

import asyncio
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agents import Agent, ModelSettings, Runner
from agents.extensions.models.litellm_model import LitellmModel
from agents.tracing import set_tracing_disabled

from ae_system_prompt import SYSTEM_PROMPT
from ae_tools import ALL_TOOLS

set_tracing_disabled(True)

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit", ":q"}
NEW_CHAT_COMMAND = "/new"


@dataclass
class ConversationItem:
    role: str  # "user" | "assistant"
    content: str
    created_at_ms: int = field(default_factory=lambda: int(time.time() * 1000))


class ConversationStore:
    """Text-only history of user and assistant turns; tool noise is never stored."""

    def __init__(self, max_kept_messages: int = 32) -> None:
        self._items: List[ConversationItem] = []
        self._max_kept_messages = max_kept_messages

    def add_user(self, text: str) -> None:
        self._append(ConversationItem(role="user", content=text))

    def add_assistant(self, text: str) -> None:
        self._append(ConversationItem(role="assistant", content=text))

    def recent_items(self, k: int) -> List[ConversationItem]:
        return self._items[-k:] if k > 0 else []

    def clear(self) -> None:
        self._items.clear()

    def build_input(self, last_k: int) -> List[Dict[str, Any]]:
        return [{"role": item.role, "content": item.content} for item in self.recent_items(last_k)]

    def _append(self, item: ConversationItem) -> None:
        self._items.append(item)
        # Keep memory bounded
        if len(self._items) > self._max_kept_messages:
            self._items = self._items[-self._max_kept_messages :]


class AfterEffectsAgent:
    def __init__(self, model: str, api_key: Optional[str], max_turns: int = 10, last_k: int = 8):
        self.agent = Agent(
            name="AfterEffectsCopilot",
            instructions=SYSTEM_PROMPT,
            model=LitellmModel(model=model, api_key=api_key),
            model_settings=ModelSettings(include_usage=True),
            tools=ALL_TOOLS,
        )
        self.max_turns = max_turns
        self.last_k = last_k
        self.store = ConversationStore(max_kept_messages=max(32, last_k * 4))
        self.running = True
        logger.info(f"🤖 Agent ready with {len(ALL_TOOLS)} tools (model={model}, max_turns={max_turns})")

    async def ask(self, user_prompt: str, out=None) -> str:
        """Run one user turn, streaming text to `out`, and return the full reply."""
        out = out or sys.stdout
        self.store.add_user(user_prompt)
        input_items = self.store.build_input(self.last_k)
        logger.info(f"🧱 Built input items (count={len(input_items)})")

        stream_result = Runner.run_streamed(self.agent, input=input_items, max_turns=self.max_turns)
        full_response = ""
        async for event in stream_result.stream_events():
            if event.type == "raw_response_event" and hasattr(event.data, "delta"):
                chunk_text = event.data.delta
                if isinstance(chunk_text, str):
                    full_response += chunk_text
                    out.write(chunk_text)
                    out.flush()
            elif event.type == "run_item_stream_event":
                logger.info(f"🧰 Stream event: {event.name}")

        final_output = stream_result.final_output
        if not full_response and final_output:
            full_response = str(final_output)
            out.write(full_response)
        out.write("\n")
        out.flush()

        self.store.add_assistant(full_response)
        return full_response

    async def repl(self) -> None:
        """Read prompts from stdin until EOF or an exit command."""
        print("After Effects copilot. Type /new for a fresh chat, exit to quit.", file=sys.stderr)
        while self.running:
            try:
                line = await asyncio.to_thread(input, "you> ")
            except EOFError:
                break
            prompt = line.strip()
            if not prompt:
                continue
            if prompt.lower() in EXIT_COMMANDS:
                break
            if prompt == NEW_CHAT_COMMAND:
                self.store.clear()
                logger.info("🧼 Cleared conversation for new chat")
                continue
            try:
                await self.ask(prompt)
            except Exception as e:
                logger.error(f"❌ Agent run failed: {e}")
        logger.info("👋 Agent session ended")

    def shutdown(self) -> None:
        logger.info("Shutting down agent")
        self.running = False
