"""
Interactive harness for exercising a vault without MCP integration.

Usage:
    python harness.py <VAULT_ROOT> [--watch]

Runs a quick smoke test (todos, stats, notes, prompts) and then drops you
into a REPL. With --watch, the vault watcher runs and every published event
is printed as it arrives.
"""

import json
import logging
import sys
from pathlib import Path

# Add src/ to path so imports work without installing
sys.path.insert(0, str(Path(__file__).parent / "src"))

from bouldy_vault.app_state import AppContext
from bouldy_vault.config import Settings
from bouldy_vault.errors import VaultError
from bouldy_vault.tools.note_tools import handle_note_list
from bouldy_vault.tools.prompt_tools import handle_prompt_list
from bouldy_vault.tools.todo_tools import (
    handle_archive_completed,
    handle_archive_months,
    handle_schema_status,
    handle_todo_create,
    handle_todo_facets,
    handle_todo_list,
    handle_todo_stats,
    handle_todo_toggle,
)


def smoke_test(ctx: AppContext) -> None:
    """Quick automated checks against the vault on disk."""
    print("\n=== Smoke Test ===")
    print(f"  Vault root:  {ctx.vault_root}")
    schema = handle_schema_status(ctx)
    print(f"  Schema:      v{schema['version']} ({schema['name']}, marker={schema['marker']})")

    todos = handle_todo_list(ctx)
    open_todos = [t for t in todos if not t["completed"]]
    print(f"\n  Todos: {len(todos)} ({len(open_todos)} open)")
    for t in todos[:5]:
        mark = "x" if t["completed"] else " "
        print(f"    [{mark}] #{t['id']} {t['title']}  due={t['dueDate'] or '-'}")
    if len(todos) > 5:
        print(f"    ... and {len(todos) - 5} more")

    facets = handle_todo_facets(ctx)
    print(f"  Projects:    {facets['projects']}")
    print(f"  Contexts:    {facets['contexts']}")

    stats = handle_todo_stats(ctx)
    print(f"\n  Completed:   {stats['totalCompleted']}")
    print(f"  Streak:      {stats['currentStreak']} (longest {stats['longestStreak']})")
    print(f"  Archives:    {handle_archive_months(ctx)}")

    try:
        notes = handle_note_list(ctx)
        print(f"\n  Notes: {len(notes)}")
        for n in notes[:5]:
            print(f"    {n['title']}")
    except FileNotFoundError as e:
        print(f"\n  Notes: unavailable ({e})")

    prompts = handle_prompt_list(ctx)
    print(f"  Prompts: {len(prompts)}")

    print("\n=== Smoke Test Complete ===\n")


def repl(ctx: AppContext) -> None:
    print("Interactive mode. Type 'help' for commands, 'quit' to exit.\n")

    commands = {
        "help":    "Show this help",
        "todos":   "List todos",
        "add":     "Add a todo. Usage: add <title>",
        "toggle":  "Toggle a todo. Usage: toggle <id>",
        "archive": "Archive completed todos",
        "stats":   "Show completion stats",
        "events":  "Show recent events. Usage: events [since]",
        "watcher": "Show watcher status",
        "quit":    "Exit",
    }

    while True:
        try:
            line = input("bouldy> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        parts = line.split()
        cmd = parts[0].lower()

        if cmd in ("quit", "exit"):
            break

        elif cmd == "help":
            for k, v in commands.items():
                print(f"  {k:10s} {v}")

        elif cmd == "todos":
            for t in handle_todo_list(ctx):
                mark = "x" if t["completed"] else " "
                print(f"  [{mark}] #{t['id']:<4d} {t['title']}")

        elif cmd == "add":
            if len(parts) < 2:
                print("Usage: add <title>")
                continue
            print(json.dumps(handle_todo_create(ctx, title=" ".join(parts[1:])), indent=2))

        elif cmd == "toggle":
            if len(parts) < 2 or not parts[1].isdigit():
                print("Usage: toggle <id>")
                continue
            print(json.dumps(handle_todo_toggle(ctx, todo_id=int(parts[1])), indent=2))

        elif cmd == "archive":
            print(json.dumps(handle_archive_completed(ctx), indent=2))

        elif cmd == "stats":
            print(json.dumps(handle_todo_stats(ctx), indent=2))

        elif cmd == "events":
            since = int(parts[1]) if len(parts) > 1 and parts[1].isdigit() else 0
            for e in ctx.bus.recent(since=since):
                print(f"  #{e['seq']:<4d} {e['name']:20s} {json.dumps(e['payload'])}")

        elif cmd == "watcher":
            print(json.dumps(ctx.watcher_status(), indent=2))

        else:
            print(f"Unknown command: {cmd}. Type 'help' for available commands.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python harness.py <VAULT_ROOT> [--watch]")
        sys.exit(1)

    vault_root = Path(sys.argv[1]).resolve()
    if not vault_root.is_dir():
        print(f"Error: {vault_root} is not a directory")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = Settings.from_env()
    settings.vault_root = vault_root
    with AppContext(settings) as ctx:
        smoke_test(ctx)

        if "--watch" in sys.argv[2:]:
            ctx.bus.subscribe(lambda e: print(f"\n  <event> {e['name']} {json.dumps(e['payload'])}"))
            try:
                ctx.start_watcher()
            except VaultError as e:
                print(f"Watcher not started: {e}")

        repl(ctx)

    print("Done.")


if __name__ == "__main__":
    main()
