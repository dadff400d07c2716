# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Optional, Protocol

import typer

from .errors import PromptUnavailableError

AFFIRMATIVE = {"y", "yes"}


class Prompter(Protocol):
    def confirm(self, prompt: str) -> bool: ...

    def ask(self, prompt: str, default: Optional[str] = None) -> str: ...


class ConsolePrompter:
    """
    y/n prompts on the terminal. Anything other than y/yes is a decline,
    including a closed stdin.
    """

    def confirm(self, prompt: str) -> bool:
        try:
            answer = typer.prompt(f"{prompt} (y/n)", default="", show_default=False)
        except (typer.Abort, EOFError):
            return False
        return answer.strip().lower() in AFFIRMATIVE

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        try:
            return typer.prompt(prompt, default=default)
        except (typer.Abort, EOFError):
            raise PromptUnavailableError(f"No answer available for: {prompt}")


class AutoPrompter:
    """Non-interactive prompter used for --yes runs."""

    def __init__(self, answer: bool = True, answers: Optional[Dict[str, str]] = None):
        self.answer = answer
        self.answers = answers or {}

    def confirm(self, prompt: str) -> bool:
        return self.answer

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        if prompt in self.answers:
            return self.answers[prompt]
        if default is not None:
            return default
        raise PromptUnavailableError(f"No answer available for: {prompt}")


class ScriptedPrompter:
    """
    Replays queued answers in order and records every prompt it was shown.
    """

    def __init__(self, confirmations: Iterable[bool] = (), responses: Iterable[str] = ()):
        self._confirmations = deque(confirmations)
        self._responses = deque(responses)
        self.asked: List[str] = []

    def confirm(self, prompt: str) -> bool:
        self.asked.append(prompt)
        if not self._confirmations:
            raise PromptUnavailableError(f"Unexpected confirmation: {prompt}")
        return self._confirmations.popleft()

    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        self.asked.append(prompt)
        if self._responses:
            return self._responses.popleft()
        if default is not None:
            return default
        raise PromptUnavailableError(f"Unexpected question: {prompt}")
