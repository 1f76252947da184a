from __future__ import annotations

from typing import Iterable, List


def csv_to_list(v: str | Iterable[str] | None) -> List[str]:
    """Split "a, b,,c" (or flatten a list of such strings) into ["a", "b", "c"]."""
    if v is None:
        return []
    if isinstance(v, str):
        return [s.strip() for s in v.split(",") if s.strip()]
    out: List[str] = []
    for item in v:
        if item is None:
            continue
        out.extend(csv_to_list(str(item)))
    return out


def unique_strings(values: Iterable[str]) -> List[str]:
    """Stringify and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(str(value), None)
    return list(seen)
