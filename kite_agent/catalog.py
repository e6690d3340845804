from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from rich.markup import escape

from .config import default_targets
from .console import console


@dataclass
class Target:
    url: str
    agent_id: str
    name: str
    questions: List[str] = field(default_factory=list)


class TargetCatalog:
    """Endpoint URL -> Target map shared by every session.

    The only mutation sessions perform is a wholesale swap of one target's
    question pool; readers always get a copy.
    """

    def __init__(self, targets: Sequence[Target] = ()):
        self._targets: Dict[str, Target] = {t.url: t for t in targets}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, key: str) -> bool:
        return key in self._targets

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._targets)

    def names(self) -> List[str]:
        with self._lock:
            return [t.name for t in self._targets.values()]

    def get(self, key: str) -> Optional[Target]:
        with self._lock:
            t = self._targets.get(key)
            if t is None:
                return None
            return Target(url=t.url, agent_id=t.agent_id, name=t.name, questions=list(t.questions))

    def replace_questions(self, key: str, questions: Sequence[str]) -> bool:
        with self._lock:
            t = self._targets.get(key)
            if t is None:
                return False
            t.questions = list(questions)
            return True

    def to_dict(self) -> Dict[str, Dict[str, object]]:
        with self._lock:
            return {
                url: {"agent_id": t.agent_id, "name": t.name, "questions": list(t.questions)}
                for url, t in self._targets.items()
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, object]]) -> "TargetCatalog":
        targets = []
        for url, entry in data.items():
            questions = entry.get("questions")
            if questions is None:
                questions = []
            if not isinstance(questions, list):
                raise ValueError(f"questions for {url} must be a list")
            targets.append(Target(
                url=url,
                agent_id=str(entry.get("agent_id", "")),
                name=str(entry.get("name", url)),
                questions=[str(q) for q in questions],
            ))
        return cls(targets)


def save_catalog(catalog: TargetCatalog, path: str) -> None:
    tmp = f"{path}.tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(catalog.to_dict(), f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)


def load_catalog(path: str) -> TargetCatalog:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("top-level value must be an object")
        catalog = TargetCatalog.from_dict(data)
        console.print(f"[ok]\\[OK] Endpoints loaded from {path}[/ok]")
        return catalog
    except (OSError, ValueError, AttributeError, TypeError) as e:
        console.print(f"[warn]\\[INFO] Could not read {path} ({type(e).__name__}); writing defaults.[/warn]")
    catalog = TargetCatalog.from_dict(default_targets())
    try:
        save_catalog(catalog, path)
        console.print(f"[ok]\\[OK] Endpoints saved to {path}[/ok]")
    except OSError as e:
        console.print(f"[err]\\[ERROR] Could not save {path}: {escape(str(e))}[/err]")
    return catalog
