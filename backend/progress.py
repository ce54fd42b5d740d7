"""Per-exercise completion tracking."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SetProgress:
    completed: bool = False
    done_sets: int = 0

    def to_dict(self) -> dict:
        return {"completed": self.completed, "done_sets": self.done_sets}


class ProgressLedger:
    """Map ``(routine_id, exercise_id)`` to :class:`SetProgress`.

    Entries are created lazily by :meth:`ensure`; :meth:`get` returns a
    detached default for exercises that were never touched so rendering code
    can read without creating state.
    """

    def __init__(self, entries: dict[tuple[str, str], SetProgress] | None = None):
        self._entries: dict[tuple[str, str], SetProgress] = dict(entries or {})

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def keys(self) -> list[tuple[str, str]]:
        return list(self._entries)

    def discard(self, routine_id: str, exercise_id: str) -> None:
        self._entries.pop((routine_id, exercise_id), None)

    def get(self, routine_id: str, exercise_id: str) -> SetProgress:
        entry = self._entries.get((routine_id, exercise_id))
        if entry is None:
            return SetProgress()
        return SetProgress(entry.completed, entry.done_sets)

    def ensure(self, routine_id: str, exercise_id: str) -> SetProgress:
        return self._entries.setdefault((routine_id, exercise_id), SetProgress())

    def increment(self, routine_id: str, exercise_id: str, total_sets: int) -> SetProgress:
        entry = self.ensure(routine_id, exercise_id)
        entry.done_sets = min(entry.done_sets + 1, total_sets)
        if entry.done_sets >= total_sets:
            entry.completed = True
        return entry

    def decrement(self, routine_id: str, exercise_id: str) -> SetProgress:
        # decrementing always un-completes, even at zero
        entry = self.ensure(routine_id, exercise_id)
        entry.done_sets = max(entry.done_sets - 1, 0)
        entry.completed = False
        return entry

    def record_finished_set(
        self, routine_id: str, exercise_id: str, set_number: int, total_sets: int
    ) -> SetProgress:
        """Record that ``set_number`` of a timed exercise has finished."""

        entry = self.ensure(routine_id, exercise_id)
        entry.done_sets = max(entry.done_sets, min(set_number, total_sets))
        if entry.done_sets >= total_sets:
            entry.completed = True
        return entry

    def reset(self, routine_id: str, exercise_id: str) -> None:
        self._entries[(routine_id, exercise_id)] = SetProgress()

    def completed_count(self, routine_id: str, exercise_ids) -> int:
        return sum(
            1 for ex_id in exercise_ids if self.get(routine_id, ex_id).completed
        )

    def without_routine(self, routine_id: str) -> "ProgressLedger":
        """Return a copy with every entry of ``routine_id`` removed."""

        return ProgressLedger(
            {key: value for key, value in self._entries.items() if key[0] != routine_id}
        )

    def to_list(self) -> list[dict]:
        return [
            {"routine_id": r_id, "exercise_id": ex_id, **entry.to_dict()}
            for (r_id, ex_id), entry in self._entries.items()
        ]

    @classmethod
    def from_list(cls, items: list[dict]) -> "ProgressLedger":
        entries: dict[tuple[str, str], SetProgress] = {}
        for item in items:
            key = (item["routine_id"], item["exercise_id"])
            entries[key] = SetProgress(
                completed=bool(item.get("completed", False)),
                done_sets=max(0, int(item.get("done_sets", 0))),
            )
        return cls(entries)
