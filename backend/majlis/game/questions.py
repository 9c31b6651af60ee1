"""Static question pool.

Loaded once at startup from a JSON file and shared read-only by room
creation. The admin routes edit the same pool and rewrite the file.
Entries may be arbitrarily shaped; anything unusable is coerced or skipped.
"""

from __future__ import annotations

import json
import logging
import os
import random
import tempfile
import uuid
from pathlib import Path
from threading import RLock
from typing import Any

from .models import Question


logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("category", "value", "question", "answer", "options")


def _as_int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _as_options(raw: Any) -> list[str]:
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, list):
        return []
    return [str(o).strip() for o in raw if o is not None and str(o).strip()]


def coerce_question(entry: Any, fallback_id: str) -> Question | None:
    if not isinstance(entry, dict):
        return None
    text = str(entry.get("question") or "").strip()
    if not text:
        return None
    return Question(
        id=str(entry.get("id") or fallback_id),
        category=str(entry.get("category") or "").strip(),
        value=_as_int(entry.get("value")),
        question=text,
        answer=str(entry.get("answer") or "").strip(),
        options=_as_options(entry.get("options")),
    )


def clean_entry(data: dict) -> dict:
    entry: dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in data:
            continue
        if key == "value":
            entry[key] = _as_int(data[key])
        elif key == "options":
            entry[key] = _as_options(data[key])
        else:
            entry[key] = str(data[key] or "").strip()
    return entry


class QuestionPool:
    def __init__(
        self,
        entries: list[dict] | None = None,
        path: str | Path | None = None,
        letter_category: str = "حروف",
        meaning_category: str = "معاني",
    ) -> None:
        self._lock = RLock()
        self._entries: list[dict] = list(entries or [])
        self.path = Path(path) if path else None
        self.letter_category = letter_category
        self.meaning_category = meaning_category

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "QuestionPool":
        p = Path(path)
        entries: list[dict] = []
        try:
            with p.open(encoding="utf-8") as fh:
                raw = json.load(fh)
        except FileNotFoundError:
            logger.warning("[pool-load] path=%s missing, starting empty", p)
            raw = []
        except (OSError, ValueError) as exc:
            logger.warning("[pool-load] path=%s unreadable: %s", p, exc)
            raw = []

        if isinstance(raw, dict):
            raw = raw.get("questions", [])
        if isinstance(raw, list):
            entries = [e for e in raw if isinstance(e, dict)]

        logger.info("[pool-load] path=%s entries=%d", p, len(entries))
        return cls(entries, path=p, **kwargs)

    def save(self) -> None:
        if self.path is None:
            return
        with self._lock:
            data = json.dumps(self._entries, ensure_ascii=False, indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(data)
                os.replace(tmp, self.path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise

    # --- admin CRUD ---

    def list_entries(self) -> list[dict]:
        with self._lock:
            return [dict(e) for e in self._entries]

    def get_entry(self, entry_id: str) -> dict | None:
        with self._lock:
            for e in self._entries:
                if str(e.get("id")) == entry_id:
                    return dict(e)
            return None

    def add_entry(self, data: dict) -> dict:
        with self._lock:
            entry = clean_entry(data)
            entry["id"] = uuid.uuid4().hex
            self._entries.append(entry)
            self.save()
            return dict(entry)

    def update_entry(self, entry_id: str, data: dict) -> dict | None:
        with self._lock:
            for e in self._entries:
                if str(e.get("id")) == entry_id:
                    e.update(clean_entry(data))
                    self.save()
                    return dict(e)
            return None

    def delete_entry(self, entry_id: str) -> bool:
        with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if str(e.get("id")) != entry_id]
            if len(self._entries) == before:
                return False
            self.save()
            return True

    # --- room setup ---

    def questions(self, category: str | None = None) -> list[Question]:
        with self._lock:
            entries = list(self._entries)
        out: list[Question] = []
        for idx, entry in enumerate(entries):
            q = coerce_question(entry, fallback_id=f"q{idx}")
            if q is None:
                continue
            if category is not None and q.category != category:
                continue
            out.append(q)
        return out

    def board_questions(self, per_category: int, rng: random.Random) -> list[Question]:
        """One question per (category, value) cell, lowest `per_category` values per category."""
        reserved = {self.letter_category, self.meaning_category}
        by_category: dict[str, dict[int, list[Question]]] = {}
        for q in self.questions():
            if q.category in reserved or not q.category:
                continue
            by_category.setdefault(q.category, {}).setdefault(q.value, []).append(q)

        selected: list[Question] = []
        for category, by_value in by_category.items():
            for value in sorted(by_value)[:per_category]:
                selected.append(rng.choice(by_value[value]))
        return selected

    def letter_questions(self) -> list[Question]:
        items = [q for q in self.questions(self.letter_category) if q.answer]
        if items:
            return items
        return [q for q in self.questions() if q.answer]

    def meaning_questions(self, count: int, rng: random.Random) -> list[Question]:
        items = [q for q in self.questions(self.meaning_category) if q.answer]
        rng.shuffle(items)
        picked = items[:count]
        all_answers = [q.answer for q in items]
        for q in picked:
            q.options = build_meaning_options(q, all_answers, rng)
        return picked


def build_meaning_options(q: Question, all_answers: list[str], rng: random.Random) -> list[str]:
    """Correct meaning plus up to three distractors, shuffled."""
    distractors = [o for o in q.options if o != q.answer]
    rng.shuffle(distractors)
    distractors = distractors[:3]
    if len(distractors) < 3:
        extra = [a for a in all_answers if a != q.answer and a not in distractors]
        rng.shuffle(extra)
        distractors.extend(extra[: 3 - len(distractors)])
    options = distractors + [q.answer]
    rng.shuffle(options)
    return options
