"""Interactive REPL for jswalk, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import Callable, Dict, Iterator, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.shortcuts import clear

from .lexer_rd import Lexer, LexError, tokenize
from .parser_rd import ParseError
from .repl_highlight import JsLexer
from .runtime import Frame, init_stdlib
from .runner import configure_logging, render_error, repl_eval
from .token_types import TT
from .types import JsRuntimeError
from .utils import debug_py_trace_enabled, format_value

_TRACE_ENV = "JSWALK_DEBUG_PY_TRACE"

# NBSP and zero-width characters pasted from browsers break the lexer.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")
_WORD_RE = re.compile(r"[A-Za-z_$][\w$]*$")

_BRACKET_DELTA = {
    TT.LPAR: 1, TT.LSQB: 1, TT.LBRACE: 1,
    TT.RPAR: -1, TT.RSQB: -1, TT.RBRACE: -1,
}

_ON_WORDS = ("on", "1", "true", "yes")
_OFF_WORDS = ("off", "0", "false", "no")

FrameBox = list  # single-slot list holding the live Frame; /reset swaps it


def needs_continuation(text: str) -> bool:
    """Return True while *text* has unclosed brackets or an unterminated template/comment."""
    try:
        tokens = tokenize(text)
    except LexError as exc:
        msg = str(exc)
        return "template" in msg or "comment" in msg

    return sum(_BRACKET_DELTA.get(tok.type, 0) for tok in tokens) > 0


def _cmd_clear(arg: str, frame_box: FrameBox) -> None:
    clear()


def _cmd_context(arg: str, frame_box: FrameBox) -> None:
    bindings = frame_box[0].vars
    if not bindings:
        print("(empty)")
        return
    for name, value in bindings.items():
        print(f"{name} = {format_value(value)}")


def _cmd_reset(arg: str, frame_box: FrameBox) -> None:
    frame_box[0] = Frame(source="")
    print("Environment reset.")


def _cmd_py_traceback(arg: str, frame_box: FrameBox) -> None:
    word = arg.lower()
    if word in _ON_WORDS:
        enable = True
    elif word in _OFF_WORDS:
        enable = False
    elif word == "":
        enable = not debug_py_trace_enabled()
    else:
        print("Usage: /py-traceback [on|off]", file=sys.stderr)
        return

    if enable:
        os.environ[_TRACE_ENV] = "1"
    else:
        os.environ.pop(_TRACE_ENV, None)
    print(f"Python traceback: {'on' if enable else 'off'}")


# name => (description, argument hint, handler)
_SLASH_CMDS: Dict[str, Tuple[str, str, Callable[[str, FrameBox], None]]] = {
    "/clear": ("Clear the terminal screen", "", _cmd_clear),
    "/context": ("Show the current bindings", "", _cmd_context),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]", _cmd_py_traceback),
    "/reset": ("Reset the REPL environment", "", _cmd_reset),
}


def _handle_slash(line: str, frame_box: FrameBox) -> bool:
    """Run a slash command. False when *line* is ordinary source."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    cmd, _, arg = stripped.partition(" ")
    entry = _SLASH_CMDS.get(cmd)
    if entry is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        return True

    entry[2](arg.strip(), frame_box)
    return True


class _ReplCompleter(Completer):
    """Slash commands at the start of input, bound names and keywords elsewhere."""

    def __init__(self, frame_box: FrameBox) -> None:
        self.frame_box = frame_box

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterator[Completion]:
        text = document.text_before_cursor
        if text.startswith("/"):
            for cmd, (desc, hint, _) in _SLASH_CMDS.items():
                if cmd.startswith(text):
                    yield Completion(cmd, start_position=-len(text), display_meta=desc)
            return

        m = _WORD_RE.search(text)
        if m is None:
            return
        word = m.group(0)

        names = sorted(set(self.frame_box[0].vars) | Lexer.KEYWORDS.keys())
        for name in names:
            if name.startswith(word) and name != word:
                yield Completion(name, start_position=-len(word))


def _normalize(text: str) -> str:
    return _INVISIBLE_RE.sub("", text)


def _report(exc: Exception, source: Optional[str]) -> None:
    print(render_error(exc, source), file=sys.stderr)
    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")


def _key_bindings() -> KeyBindings:
    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event: KeyPressEvent) -> None:
        buf = event.app.current_buffer
        if buf.text.startswith("/") or not needs_continuation(buf.text):
            buf.validate_and_handle()
        else:
            buf.insert_text("\n")

    return bindings


def repl() -> None:
    init_stdlib()
    frame_box: FrameBox = [Frame(source="")]

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=JsLexer(),
        completer=_ReplCompleter(frame_box),
        complete_while_typing=False,
        key_bindings=_key_bindings(),
        multiline=True,
        prompt_continuation="... ",
    )

    print("jswalk repl - Ctrl-D to exit, / for commands, Tab to complete")

    while True:
        try:
            text = _normalize(session.prompt("> "))
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        if not text.strip() or _handle_slash(text, frame_box):
            continue

        try:
            result, quiet = repl_eval(text, frame_box[0])
        except (ParseError, LexError, JsRuntimeError) as exc:
            _report(exc, frame_box[0].source)
            continue

        if not quiet:
            print(format_value(result))


def main() -> None:
    configure_logging()
    repl()


if __name__ == "__main__":
    main()
