"""CLI interface for the helpdesk agent."""

import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from .agent import AgentConfig, ExchangeResult, GroqGateway, SessionController, StopReason
from .agent.events import DoneEvent, ErrorEvent, TokenEvent
from .errors import ExchangeError, ValidationError
from .history import HistoryStore
from .logging import configure_logger, get_logger
from .memory import MemoryStore, RecallMemoryTool, SaveMemoryTool
from .tools import DEFAULT_ALLOWED_DOMAINS, FAQTool, SearchSiteTool, ToolRegistry

DB_PATH = Path.home() / ".helpdesk" / "helpdesk.db"


BANNER = """
╔══════════════════════════════════════════╗
║           Edge Helpdesk v0.1.0           ║
╚══════════════════════════════════════════╝

Commands:
  /exit, /quit  - Exit the CLI
  /reset        - Reset session (erase history and memory)
  /stream       - Toggle streamed replies
  /help         - Show this help

Type your message and press Enter.
"""


@dataclass
class StorageConfig:
    """Where session data and logs live."""

    db_path: Path = DB_PATH
    log_dir: Path | None = None
    allowed_domains: tuple[str, ...] = field(default=DEFAULT_ALLOWED_DOMAINS)


def _config_from_env() -> tuple[AgentConfig, StorageConfig]:
    """Load configuration from environment variables."""
    timeout = os.getenv("HELPDESK_EXCHANGE_TIMEOUT")
    max_turns = int(os.getenv("HELPDESK_MAX_TURNS", "5"))
    if max_turns < 1:
        raise ValueError(f"HELPDESK_MAX_TURNS must be at least 1, got {max_turns}")
    agent_config = AgentConfig(
        model=os.getenv("HELPDESK_MODEL", "llama-3.1-8b-instant"),
        max_turns=max_turns,
        exchange_timeout=float(timeout) if timeout else None,
    )

    domains = os.getenv("HELPDESK_ALLOWED_DOMAINS")
    log_dir = os.getenv("HELPDESK_LOG_DIR")
    storage_config = StorageConfig(
        db_path=Path(os.getenv("HELPDESK_DB_PATH", str(DB_PATH))).expanduser(),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        allowed_domains=tuple(d.strip() for d in domains.split(",") if d.strip())
        if domains
        else DEFAULT_ALLOWED_DOMAINS,
    )

    return agent_config, storage_config


def build_registry(memory_store: MemoryStore, allowed_domains=DEFAULT_ALLOWED_DOMAINS) -> ToolRegistry:
    """Create the registry with the built-in tools."""
    registry = ToolRegistry()
    registry.register(SearchSiteTool(allowed_domains))
    registry.register(FAQTool())
    registry.register(SaveMemoryTool(memory_store))
    registry.register(RecallMemoryTool(memory_store))
    return registry


class CLI:
    """Interactive command-line interface for the helpdesk."""

    def __init__(
        self,
        config: AgentConfig | None = None,
        storage: StorageConfig | None = None,
        gateway: GroqGateway | None = None,
    ) -> None:
        if config is None or storage is None:
            env_agent, env_storage = _config_from_env()
            config = config or env_agent
            storage = storage or env_storage

        self.config = config
        self.history_store = HistoryStore(storage.db_path)
        self.history_store.init_db()
        self.memory_store = MemoryStore(storage.db_path)
        self.memory_store.init_db()

        self.registry = build_registry(self.memory_store, storage.allowed_domains)
        self.controller = SessionController(
            gateway or GroqGateway(model=config.model),
            self.registry,
            self.history_store,
            self.memory_store,
            config=config,
        )
        self.session_id = self._new_session_id()
        self.streaming = False
        self.logger = get_logger()

    def _new_session_id(self) -> str:
        """Generate a new session ID."""
        return f"cli-{uuid.uuid4().hex[:8]}"

    async def _reset(self) -> None:
        """Erase the session and start a new one."""
        old_session_id = self.session_id
        await self.controller.reset(old_session_id)
        self.session_id = self._new_session_id()
        print(f"\n✓ Session reset. New session: {self.session_id}")

    def _format_summary(self, tools_used: list[str], memory_delta: dict[str, str]) -> str:
        """Banner with tools used and memory written, empty when there is neither."""
        lines = []
        if tools_used:
            lines.append(f"🔧 Tools: {', '.join(tools_used)}")
        if memory_delta:
            saved = ", ".join(f"{k}={v}" for k, v in memory_delta.items())
            lines.append(f"🧠 Remembered: {saved}")
        return "\n".join(lines)

    def _format_response(self, result: ExchangeResult) -> str:
        """Format the agent's response for display."""
        output = ["\n" + "─" * 40]
        output.append(result.reply)
        output.append("─" * 40)

        summary = self._format_summary(result.tools_used, result.memory_delta)
        if summary:
            output.append(summary)

        if result.stop_reason != StopReason.COMPLETE:
            output.append(f"⚠ Stopped: {result.stop_reason.value} (turns: {result.turns})")

        return "\n".join(output)

    async def _process_message(self, message: str) -> None:
        """Send a message through the controller and print the reply."""
        if self.streaming:
            await self._process_streaming(message)
            return

        try:
            result = await self.controller.handle(self.session_id, message)
        except (ValidationError, ExchangeError) as e:
            print(f"\n❌ Error: {e}")
            return

        print(self._format_response(result))

    async def _process_streaming(self, message: str) -> None:
        print()
        try:
            async for event in self.controller.handle_streaming(self.session_id, message):
                if isinstance(event, TokenEvent):
                    print(event.token, end="", flush=True)
                elif isinstance(event, DoneEvent):
                    print()
                    summary = self._format_summary(event.tools_used, event.memory_delta)
                    if summary:
                        print(summary)
                elif isinstance(event, ErrorEvent):
                    print(f"❌ Error: {event.error}")
        except ValidationError as e:
            print(f"❌ Error: {e}")

    async def _handle_command(self, command: str) -> bool:
        """Handle a special command. Returns True if should continue, False to exit."""
        cmd = command.lower().strip()

        if cmd in ("/exit", "/quit", "exit", "quit"):
            print("\n👋 Goodbye!")
            self.logger.log("cli_exit", session_id=self.session_id)
            return False

        if cmd == "/reset":
            await self._reset()
            return True

        if cmd == "/stream":
            self.streaming = not self.streaming
            print(f"Streaming {'on' if self.streaming else 'off'}")
            return True

        if cmd == "/help":
            print(BANNER)
            return True

        return True  # Unknown command, continue

    def close(self) -> None:
        self.history_store.close()
        self.memory_store.close()

    async def run(self) -> None:
        """Run the interactive CLI."""
        print(BANNER)
        print(f"Session: {self.session_id}\n")

        try:
            while True:
                try:
                    user_input = input("you> ").strip()

                    if not user_input:
                        continue

                    if user_input.startswith("/") or user_input.lower() in ("exit", "quit"):
                        if not await self._handle_command(user_input):
                            break
                        continue

                    await self._process_message(user_input)

                except KeyboardInterrupt:
                    print("\n👋 Goodbye!")
                    break
                except EOFError:
                    print("\n👋 Goodbye!")
                    break
        finally:
            await self.controller.sessions.shutdown()
            self.close()


async def run_cli() -> None:
    """Run the CLI with configuration from the environment."""
    agent_config, storage_config = _config_from_env()
    configure_logger(storage_config.log_dir)

    if not os.getenv("GROQ_API_KEY"):
        print("❌ Error: GROQ_API_KEY environment variable not set")
        print("Please set it in your .env file or environment")
        return

    cli = CLI(config=agent_config, storage=storage_config)
    await cli.run()
