"""
Interactive command shell for jsondb.

Reads one command per line, runs it against the loaded database and
prints the result:
- init <path>: create a database directory and load it
- load <path>: load an existing database directory
- create <collection>: create an empty collection
- insert <collection> <json>: append a document to a collection
- info, help, quit

Invariants:
    - All mutable state lives in ShellContext, passed to every handler
    - A failed command prints an error and the loop continues
    - EOF ends the loop like quit

How to change safely:
    - Add commands to Shell._commands, don't rename existing ones
    - Keep handler output on the shell's output stream, never stdout directly
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TextIO

from ..config import Settings
from ..database import Database
from ..errors import JsonDbError, NoDatabaseLoadedError, UnsupportedOperationError
from ..storage.codec import Operation

logger = logging.getLogger(__name__)

NAME = "jsondb"

HELP_TEXT = """
Usage: <command> [arguments]

Commands:
  init   <path>                       - create DB directory if it doesn't exist
  load   <path>                       - load the DB (directory must exist)
  info                                - display info about the loaded database
  create <collection>                 - create a new collection in the database
  insert <collection> <data>          - insert a new record into a collection
  query  <collection> <clause>        - query records from a collection
  update <collection> <clause> <data> - update records in a collection
  delete <collection> <clause>        - delete records from a collection
  drop   <collection>                 - drop a collection from the database
  help                                - display this help message
  quit                                - leave the shell
"""


class CommandError(JsonDbError):
    """Command line could not be understood."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="COMMAND_ERROR")


@dataclass
class ShellContext:
    """State carried between commands.

    Attributes:
        settings: Loaded configuration
        database: Currently loaded database, if any
        prompt: Prompt shown before each command
    """

    settings: Settings = field(default_factory=Settings)
    database: Optional[Database] = None
    prompt: str = ""

    def __post_init__(self) -> None:
        if not self.prompt:
            self.prompt = self.settings.prompt

    def require_database(self) -> Database:
        if self.database is None:
            raise NoDatabaseLoadedError()
        return self.database

    def attach(self, database: Database, label: str) -> None:
        self.database = database
        self.prompt = f" ({label})> "


class Shell:
    """Line-oriented command loop.

    Example:
        >>> shell = Shell(stdin=io.StringIO("init ./mydb\\ncreate users\\n"), stdout=out)
        >>> shell.run(ShellContext())
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._commands: Dict[str, Callable[[ShellContext, str], bool]] = {
            "help": self.cmd_help,
            "h": self.cmd_help,
            "?": self.cmd_help,
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
            "q": self.cmd_quit,
            "info": self.cmd_info,
            "init": self.cmd_init,
            "load": self.cmd_load,
            "create": self.cmd_create,
            "insert": self.cmd_insert,
            "query": self._reserved(Operation.QUERY),
            "update": self._reserved(Operation.UPDATE),
            "delete": self._reserved(Operation.DELETE),
            "drop": self.cmd_drop,
        }

    def run(self, ctx: ShellContext) -> None:
        """Read and execute commands until quit or EOF."""
        self._print("enter commands (type 'help' for list, 'quit' to exit)")

        while True:
            self._write(ctx.prompt)
            line = self.stdin.readline()
            if not line:
                self._write(f"\n{NAME}: bye\n\n")
                return
            if not self.execute(ctx, line):
                return

    def execute(self, ctx: ShellContext, line: str) -> bool:
        """Execute one command line.

        Returns:
            False when the shell should stop, True otherwise
        """
        line = line.strip()
        if not line:
            return True

        cmd, rest = _split_first(line)
        handler = self._commands.get(cmd.lower())
        if handler is None:
            self.error("incorrect command")
            return True

        try:
            return handler(ctx, rest)
        except JsonDbError as e:
            logger.debug("Command failed", extra={"command": cmd, "code": e.code})
            self.error(e.message)
            return True

    def cmd_help(self, ctx: ShellContext, rest: str) -> bool:
        self._print(HELP_TEXT)
        return True

    def cmd_quit(self, ctx: ShellContext, rest: str) -> bool:
        self._write(f"\n{NAME}: bye\n\n")
        return False

    def cmd_info(self, ctx: ShellContext, rest: str) -> bool:
        self._print("Info:")
        if ctx.database is None:
            self._print("  No database loaded")
        else:
            self._print(f"  Database loaded: {ctx.database.base_dir}")
            names = ctx.database.list_collections()
            self._print(f"  Collections: {', '.join(names) if names else '(none)'}")
        self._print()
        return True

    def cmd_init(self, ctx: ShellContext, rest: str) -> bool:
        path = _single_arg(rest, "init command requires exactly one argument: the database path")
        try:
            database = Database.initialize(path, **ctx.settings.store_options())
        except JsonDbError as e:
            raise CommandError(f"init command failed: {e.message}") from e
        ctx.attach(database, path)
        return True

    def cmd_load(self, ctx: ShellContext, rest: str) -> bool:
        path = _single_arg(rest, "load command requires name of an existing database")
        ctx.attach(Database.load(path, **ctx.settings.store_options()), path)
        return True

    def cmd_create(self, ctx: ShellContext, rest: str) -> bool:
        database = ctx.require_database()
        name = _single_arg(rest, "create command requires exactly one argument: the collection name")
        database.create_collection(name)
        self._print(f"created collection {name!r}")
        return True

    def cmd_insert(self, ctx: ShellContext, rest: str) -> bool:
        database = ctx.require_database()
        name, raw = _split_first(rest)
        if not name or not raw:
            raise CommandError("insert command requires a collection name and a JSON document")
        document = _parse_document(raw)
        entry = database.insert_record(name, document)
        self._print(f"inserted {entry.id} into {name!r}")
        return True

    def cmd_drop(self, ctx: ShellContext, rest: str) -> bool:
        ctx.require_database()
        raise UnsupportedOperationError("drop is not supported yet", operation="drop")

    def _reserved(self, operation: Operation) -> Callable[[ShellContext, str], bool]:
        """Handler for an operation that exists in the log vocabulary only."""

        def handler(ctx: ShellContext, rest: str) -> bool:
            database = ctx.require_database()
            name = rest.split(maxsplit=1)[0] if rest else ""
            if not name:
                raise CommandError(f"{operation.value} command requires a collection name")
            database.execute(operation, name)
            return True

        return handler

    def error(self, message: str) -> None:
        self._print()
        self._print(f"{NAME}: {message}")
        self._print()

    def _print(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _write(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()


def _split_first(text: str) -> tuple[str, str]:
    parts = text.split(maxsplit=1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1].strip()


def _single_arg(rest: str, usage: str) -> str:
    args: List[str] = rest.split()
    if len(args) != 1:
        raise CommandError(usage)
    return args[0]


def _parse_document(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise CommandError(f"invalid JSON document: {e}") from e
