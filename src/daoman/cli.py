"""CLI interface for DAOman."""

import asyncio
import uuid

from .agent import Relay
from .agent.prompt import MAX_HISTORY_TURNS
from .app import Services, build_services
from .errors import user_message
from .logging import configure_logger, get_logger

BANNER = """
╔══════════════════════════════════════════╗
║              DAOman relay                ║
║    Grounded answers, straight from DAO   ║
╚══════════════════════════════════════════╝

Commands:
  /exit, /quit  - Exit the CLI
  /reset        - Forget the conversation
  /facts        - Show the facts sent with the last question
  /help         - Show this help

Type your message and press Enter.
"""


class CLI:
    """Interactive command-line interface for the relay (text only)."""

    def __init__(self, relay: Relay | None = None, services: Services | None = None) -> None:
        self.logger = get_logger()
        if relay is None:
            services = services or build_services(self.logger)
            relay = services.relay
        self.services = services
        self.relay = relay
        self.chat_id = self._new_chat_id()
        self.last_facts = ""
        self._history: list[dict[str, str]] = []

    def _new_chat_id(self) -> str:
        """Generate a new chat ID."""
        return f"cli-{uuid.uuid4().hex[:8]}"

    def _reset(self) -> None:
        """Start a fresh conversation."""
        old_chat_id = self.chat_id
        self.chat_id = self._new_chat_id()
        self._history = []
        self.last_facts = ""
        self.logger.log("session_reset", old_chat_id=old_chat_id, chat_id=self.chat_id)
        print(f"\n✓ Conversation cleared. New chat_id: {self.chat_id}")

    def _format_response(self, response: str) -> str:
        """Format the answer for display."""
        return "\n".join(["\n" + "─" * 40, response, "─" * 40])

    async def _process_message(self, message: str) -> None:
        """Send a message through the relay and print the answer."""
        try:
            result = await self.relay.ask(
                message, list(self._history), chat_id=self.chat_id
            )
        except Exception as e:
            print(f"\n❌ {user_message(e)}")
            self.logger.log("error", chat_id=self.chat_id, error=str(e))
            return

        self.last_facts = result.facts
        self._history.append({"role": "user", "content": message})
        self._history.append({"role": "assistant", "content": result.answer})
        del self._history[:-MAX_HISTORY_TURNS]
        print(self._format_response(result.answer))

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        cmd = command.lower().strip()

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            self.logger.log("session_end", chat_id=self.chat_id)
            return False

        if cmd == "/reset":
            self._reset()
            return True

        if cmd == "/facts":
            print(self.last_facts or "(no facts for the last question)")
            return True

        if cmd == "/help":
            print(BANNER)
            return True

        return True  # Unknown command, continue

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        print(f"Session: {self.chat_id}\n")
        self.logger.log("session_start", chat_id=self.chat_id)

        try:
            while True:
                try:
                    user_input = (await asyncio.to_thread(input, "you> ")).strip()
                except (KeyboardInterrupt, EOFError):
                    print("\n👋 Goodbye!")
                    break

                if not user_input:
                    continue

                if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                    if not await self._handle_command(user_input):
                        break
                    continue

                await self._process_message(user_input)
        finally:
            if self.services is not None:
                await self.services.close()


async def run_cli() -> None:
    """Run the CLI with default configuration."""
    configure_logger()
    cli = CLI()
    await cli.run()
