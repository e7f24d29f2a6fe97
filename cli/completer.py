"""Custom completer for SynFS CLI with local file autocompletion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS
from common.constants import URI_PREFIX

URI_COMMANDS = ("info", "get", "check")


class SynFSCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file completion for the first argument of 'put'
    - The syn:// prefix for URI arguments
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.

        For the first token, completes command names.
        For 'put', completes local files, then the URI prefix.
        For 'info', 'get' and 'check', completes the URI prefix.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        current_word = "" if is_typing_new_token else tokens[-1]
        arg_index = len(tokens) - 1 if is_typing_new_token else len(tokens) - 2

        if command == "put" and arg_index == 0:
            yield from self._complete_local_files(current_word)
        elif (command == "put" and arg_index == 1) or (command in URI_COMMANDS and arg_index == 0):
            yield from self._complete_uri_prefix(current_word)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_uri_prefix(self, partial: str) -> Iterable[Completion]:
        """Offer the syn:// prefix while it has not been typed yet."""
        if URI_PREFIX.startswith(partial) and partial != URI_PREFIX:
            yield Completion(URI_PREFIX, start_position=-len(partial))

    def _complete_local_files(self, partial: str) -> Iterable[Completion]:
        """
        Complete regular files relative to the current directory.

        Shows a message if the directory holds no matching files.
        """
        directory_part, _, name_part = partial.rpartition("/")
        base = Path.cwd() / directory_part if directory_part else Path.cwd()

        if not base.is_dir():
            return

        candidates = []
        for item in base.iterdir():
            if item.name.startswith(".") and not name_part.startswith("."):
                continue
            if not item.name.startswith(name_part):
                continue
            rel_path = f"{directory_part}/{item.name}" if directory_part else item.name
            if item.is_dir():
                rel_path += "/"
            candidates.append(rel_path)

        if not candidates:
            yield Completion(
                "",
                start_position=0,
                display="(no matching files)",
            )
            return

        for file_path in sorted(candidates):
            yield Completion(file_path, start_position=-len(partial))
