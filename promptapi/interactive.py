#!/usr/bin/env python3
"""
promptapi Interactive CLI

Ask questions about the configured REST API from the terminal, either
one at a time (``-q``) or in a REPL.
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config_loader import load_api_config, load_app_config
from .errors import ConfigError
from .orchestration import OrchestrationSession, SessionState
from .orchestrator import PromptOrchestrator

logger = logging.getLogger(__name__)

BANNER = """
╔════════════════════════════════════════════════════════════════╗
║                      promptapi Interactive                      ║
║                                                                 ║
║  Ask questions in plain language about a REST API               ║
╚════════════════════════════════════════════════════════════════╝

Available commands:
  /help        - Show this help message
  /trace       - Show the API calls made for the last question
  /operations  - List the operations the planner may use
  /verbose     - Toggle verbose logging
  /quit        - Exit the CLI
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("promptapi").setLevel(level)


def print_trace(session: Optional[OrchestrationSession]) -> None:
    """Print the calls made during a session."""
    if session is None or not session.history:
        print("\nNo API calls to show. Ask a question first.\n")
        return

    print("\n" + "═" * 70)
    print(f"API CALLS (depth {session.depth}/{session.max_depth})")
    print("═" * 70)
    for call in session.as_trace():
        status = call["status_code"] if call["success"] else f"FAILED: {call['error']}"
        print(f"\n┌─ Call {call['step']}: {call['operation']}")
        print(f"│  Arguments: {json.dumps(call['arguments'])}")
        print(f"│  Result: {status}")
        payload = call["payload"]
        if len(payload) > 200:
            payload = payload[:200] + "..."
        print(f"│  Payload: {payload}")
        print("└" + "─" * 68)
    print()


class InteractiveCLI:
    """REPL around a PromptOrchestrator."""

    def __init__(self, orchestrator: PromptOrchestrator, verbose: bool = False):
        self.orchestrator = orchestrator
        self.verbose = verbose
        self.last_session: Optional[OrchestrationSession] = None

    def toggle_verbose(self) -> None:
        self.verbose = not self.verbose
        logging.getLogger("promptapi").setLevel(
            logging.DEBUG if self.verbose else logging.WARNING
        )
        print(f"\nVerbose mode: {'ON' if self.verbose else 'OFF'}\n")

    def print_operations(self) -> None:
        print("\nOperations:")
        print("─" * 64)
        print(self.orchestrator.registry.get_operations_summary())
        print()

    def process_query(self, query: str) -> None:
        """Answer one question and print the result."""
        session = self.orchestrator.run(query)
        self.last_session = session

        if session.state is SessionState.DONE and session.response is not None:
            print("\n" + session.response.text + "\n")
            calls = len(session.history)
            print(f"({calls} API call{'s' if calls != 1 else ''}, /trace for details)\n")
        else:
            print(f"\nError: {session.error}\n")

    def handle_command(self, command: str) -> bool:
        """
        Run a slash command.

        Returns:
            False if the CLI should exit, True otherwise
        """
        command = command.lower()
        if command in ("/quit", "/exit", "/q"):
            print("\nGoodbye!\n")
            return False
        if command in ("/help", "/h", "/?"):
            print(BANNER)
        elif command == "/trace":
            print_trace(self.last_session)
        elif command == "/operations":
            self.print_operations()
        elif command == "/verbose":
            self.toggle_verbose()
        else:
            print(f"\nUnknown command: {command}")
            print("Type /help for available commands.\n")
        return True

    def run(self) -> None:
        """Run the interactive loop."""
        print(BANNER)
        while True:
            try:
                user_input = input(">>> ").strip()
            except EOFError:
                print("\nGoodbye!\n")
                break
            except KeyboardInterrupt:
                print("\n\nType /quit to exit.\n")
                continue

            if not user_input:
                continue
            if user_input.startswith("/"):
                if not self.handle_command(user_input):
                    break
                continue
            try:
                self.process_query(user_input)
            except KeyboardInterrupt:
                print("\n\nQuery interrupted.\n")


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="promptapi Interactive CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              # Start interactive mode
  %(prog)s -v                           # Start with verbose logging
  %(prog)s -q "List all books"          # Answer a single question
  %(prog)s -q "List all books" --json   # Answer with the call trace as JSON
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-q", "--query", type=str, help="Answer a single question and exit")
    parser.add_argument("--config", type=str, help="Application config file (YAML)")
    parser.add_argument("--api-config", type=str, help="API descriptor file (JSON or YAML)")
    parser.add_argument("--json", action="store_true", help="Output results as JSON (for scripting)")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        app_config = load_app_config(args.config)
        api_config = load_api_config(args.api_config or app_config.api.config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    orchestrator = PromptOrchestrator(api_config, app_config)
    try:
        if not args.query:
            InteractiveCLI(orchestrator, verbose=args.verbose).run()
            return 0

        session = orchestrator.run(args.query)
        succeeded = session.state is SessionState.DONE and session.response is not None
        if args.json:
            print(
                json.dumps(
                    {
                        "query": args.query,
                        "answer": session.response.text if succeeded else None,
                        "error": None if succeeded else str(session.error),
                        "calls": session.as_trace(),
                    },
                    indent=2,
                )
            )
        elif succeeded:
            print(session.response.text)
        else:
            print(f"Error: {session.error}", file=sys.stderr)
        return 0 if succeeded else 1
    finally:
        orchestrator.close()


if __name__ == "__main__":
    sys.exit(main())
