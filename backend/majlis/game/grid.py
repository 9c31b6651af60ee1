"""Letter-claim board: a 5x5 rectangular grid with 4-neighbour adjacency."""

from __future__ import annotations

import random
from collections import deque
from typing import Iterable, Literal

from .models import GridCell


GRID_SIZE = 5

# 28 letters plus hamza.
ALPHABET: tuple[str, ...] = (
    "ا", "ب", "ت", "ث", "ج", "ح", "خ", "د", "ذ", "ر", "ز", "س", "ش", "ص", "ض",
    "ط", "ظ", "ع", "غ", "ف", "ق", "ك", "ل", "م", "ن", "ه", "و", "ي", "ء",
)

Direction = Literal["top_bottom", "left_right"]

# red joins left to right, blue joins top to bottom
TEAM_DIRECTIONS: dict[str, Direction] = {
    "red": "left_right",
    "blue": "top_bottom",
}


def build_grid(rng: random.Random | None = None, size: int = GRID_SIZE) -> list[GridCell]:
    letters = list(ALPHABET)
    if rng is not None:
        rng.shuffle(letters)
    return [GridCell(id=i, letter=letters[i % len(letters)]) for i in range(size * size)]


def neighbors(cell_id: int, size: int = GRID_SIZE) -> Iterable[int]:
    row, col = divmod(cell_id, size)
    if row > 0:
        yield cell_id - size
    if row < size - 1:
        yield cell_id + size
    if col > 0:
        yield cell_id - 1
    if col < size - 1:
        yield cell_id + 1


def _edges(direction: Direction, size: int) -> tuple[set[int], set[int]]:
    if direction == "top_bottom":
        start = set(range(size))
        goal = {(size - 1) * size + c for c in range(size)}
    else:
        start = {r * size for r in range(size)}
        goal = {r * size + size - 1 for r in range(size)}
    return start, goal


def has_connected_path(
    grid: list[GridCell],
    team: str,
    direction: Direction,
    size: int = GRID_SIZE,
) -> bool:
    """Breadth-first search over cells owned by `team` from one edge to the opposite one."""
    owned = {c.id for c in grid if c.owner_team == team}
    if not owned:
        return False

    start, goal = _edges(direction, size)
    queue = deque(start & owned)
    seen = set(queue)
    while queue:
        cid = queue.popleft()
        if cid in goal:
            return True
        for nid in neighbors(cid, size):
            if nid in owned and nid not in seen:
                seen.add(nid)
                queue.append(nid)
    return False


def winning_team(grid: list[GridCell], size: int = GRID_SIZE) -> str | None:
    for team, direction in TEAM_DIRECTIONS.items():
        if has_connected_path(grid, team, direction, size):
            return team
    return None


def is_full(grid: list[GridCell]) -> bool:
    return all(c.owner_id is not None for c in grid)


def find_cell(grid: list[GridCell], cell_id=None, letter: str | None = None) -> GridCell | None:
    if cell_id is not None:
        for c in grid:
            if c.id == cell_id:
                return c
        return None
    if letter:
        for c in grid:
            if c.letter == letter and c.owner_id is None:
                return c
    return None
