# plan_admin/utils/fuzzy_search.py
import difflib
from typing import Sequence

from ..schemas.global_workout import GlobalWorkout


def search_workouts(
    query: str,
    workouts: Sequence[GlobalWorkout],
    limit: int = 10,
    cutoff: float = 0.6,
) -> list[GlobalWorkout]:
    """Autocomplete ranking for the global workout library.

    Name prefix matches come first, then other name substrings, then keyword
    substrings, then fuzzy close matches on the name (typos such as "bench
    pres").
    """
    term = query.strip().lower()
    if not term:
        return []

    ranked: list[tuple[int, str, GlobalWorkout]] = []
    leftovers: dict[str, GlobalWorkout] = {}
    for workout in workouts:
        name = workout.name.lower()
        if name.startswith(term):
            ranked.append((0, name, workout))
        elif term in name:
            ranked.append((1, name, workout))
        elif any(term in kw.lower() for kw in workout.search_keywords):
            ranked.append((2, name, workout))
        else:
            leftovers.setdefault(name, workout)

    ranked.sort(key=lambda item: (item[0], item[1]))
    results = [item[2] for item in ranked]
    if len(results) < limit and leftovers:
        close = difflib.get_close_matches(term, list(leftovers), n=limit - len(results), cutoff=cutoff)
        results.extend(leftovers[name] for name in close)
    return results[:limit]
