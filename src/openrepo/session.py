# src/openrepo/session.py
"""
Application state for an interactive front end, kept out of the core.

State is an immutable AppState; every transition returns a new one.
Regenerator debounces prompt regeneration with a generation counter: each
trigger invalidates the pending one, and only the newest result is applied.
"""
import logging
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from openrepo.config import INSTRUCTION_TEMPLATES, REGENERATE_DELAY_SECONDS
from openrepo.core.prompt import assemble_prompt
from openrepo.core.scanner import scan_directory
from openrepo.core.tree import FileTree
from openrepo.models import FileEntry, PromptArtifact

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppState:
    directory: Optional[str] = None
    entries: Tuple[FileEntry, ...] = ()
    custom_patterns: Tuple[str, ...] = ()
    selection: Tuple[str, ...] = ()
    instruction: str = ""
    artifact: Optional[PromptArtifact] = None

    def tree(self) -> FileTree:
        return FileTree.from_entries(self.entries, self.directory or "")


def open_directory(state: AppState, directory: Optional[str], scan=scan_directory) -> AppState:
    """Switch to a new directory. None (a cancelled picker) keeps the state."""
    if not directory:
        return state
    directory = str(Path(directory).resolve())
    entries = scan(directory, list(state.custom_patterns))
    return replace(state, directory=directory, entries=tuple(entries), selection=(), artifact=None)


def save_ignore_patterns(state: AppState, text: str, scan=scan_directory) -> AppState:
    """Store the edited custom patterns and rebuild the filtered file list."""
    patterns = tuple(line for line in text.splitlines() if line.strip())
    if not state.directory:
        return replace(state, custom_patterns=patterns)
    entries = tuple(scan(state.directory, list(patterns)))
    remaining = {e.path for e in entries}
    selection = tuple(p for p in state.selection if p in remaining)
    return replace(state, custom_patterns=patterns, entries=entries, selection=selection)


def select(state: AppState, keys: Iterable[str]) -> AppState:
    """Add files or whole folders (expanded to their files) to the selection."""
    added = state.tree().expand_selection(keys)
    selection = tuple(dict.fromkeys(state.selection + tuple(added)))
    return replace(state, selection=selection)


def deselect(state: AppState, keys: Iterable[str]) -> AppState:
    removed = set(state.tree().expand_selection(keys))
    return replace(state, selection=tuple(p for p in state.selection if p not in removed))


def set_instruction(state: AppState, text: str) -> AppState:
    return replace(state, instruction=text)


def apply_template(state: AppState, name: str) -> AppState:
    try:
        return set_instruction(state, INSTRUCTION_TEMPLATES[name])
    except KeyError:
        raise ValueError(f"Unknown instruction template: {name!r}") from None


def generate(state: AppState, **assemble_kwargs) -> PromptArtifact:
    return assemble_prompt(list(state.selection), state.instruction, state.directory, **assemble_kwargs)


@dataclass
class Regenerator:
    """
    Single-flight debouncer driven by an explicit clock.

    trigger() starts a new generation and pushes the deadline out; due()
    hands out the token once the delay has passed without a newer trigger;
    complete() applies a result only if its token is still the newest.
    """
    delay: float = REGENERATE_DELAY_SECONDS
    clock: Callable[[], float] = time.monotonic
    generation: int = 0
    _deadline: Optional[float] = field(default=None, repr=False)

    def trigger(self, now: Optional[float] = None) -> int:
        now = self.clock() if now is None else now
        self.generation += 1
        self._deadline = now + self.delay
        return self.generation

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def due(self, now: Optional[float] = None) -> Optional[int]:
        now = self.clock() if now is None else now
        if self._deadline is None or now < self._deadline:
            return None
        self._deadline = None
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def complete(self, token: int, state: AppState, artifact: PromptArtifact) -> AppState:
        if not self.is_current(token):
            logger.debug("Discarding stale prompt from generation %d (now %d)", token, self.generation)
            return state
        return replace(state, artifact=artifact)


def regenerate_if_due(regenerator: Regenerator, state: AppState, now: Optional[float] = None, **assemble_kwargs) -> AppState:
    """Poll step for an event loop: regenerate once the debounce delay is over."""
    token = regenerator.due(now)
    if token is None:
        return state
    return regenerator.complete(token, state, generate(state, **assemble_kwargs))
