"""
Prompt rotation: pick journal prompts without quick repeats.

The last k prompts handed out are excluded, k = min(10, len(pool) // 3).
The memory is a bounded deque held in process memory only.
"""
import random
from collections import deque
from pathlib import Path
from typing import Iterable, List, Optional

MAX_RECENT = 10


def parse_prompt_pool(text: str) -> List[str]:
    """One prompt per line; blank lines and '#' comments are skipped."""
    prompts = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            prompts.append(line)
    return prompts


def load_prompt_pool(path, fallback: Iterable[str] = ()) -> List[str]:
    """Read a prompt file, or return `fallback` when no path is configured."""
    if not path:
        return list(fallback)
    return parse_prompt_pool(Path(path).read_text(encoding="utf-8"))


class PromptRotation:
    def __init__(self, pool: Iterable[str], rng: Optional[random.Random] = None):
        self.pool = list(pool)
        if not self.pool:
            raise ValueError("Prompt pool must not be empty")
        self.recent_limit = min(MAX_RECENT, len(self.pool) // 3)
        self._recent = deque(maxlen=self.recent_limit)
        self._rng = rng or random.Random()

    @property
    def recent(self) -> List[str]:
        return list(self._recent)

    def next_prompt(self) -> str:
        candidates = [p for p in self.pool if p not in self._recent]
        if not candidates:
            candidates = self.pool

        prompt = self._rng.choice(candidates)
        self._recent.append(prompt)
        return prompt

    def reset(self) -> None:
        self._recent.clear()
