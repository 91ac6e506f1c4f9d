"""Persisted state table: per-mod enabled flag + user order.

Tables are immutable. Every edit returns a new table so readers holding the
previous reference never observe a half-applied change; the owner swaps the
reference in one assignment.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict


class StateEntry(BaseModel):
    id: str
    enabled: bool = True
    order: int = 0

    model_config = ConfigDict(frozen=True, extra="ignore")


class ModStateTable(BaseModel):
    """`mods` mirrors the last resolved set in order.

    `dormant` keeps entries of packages that disappeared so a returning
    package gets its old enabled flag back.
    """

    mods: Tuple[StateEntry, ...] = ()
    dormant: Tuple[StateEntry, ...] = ()

    model_config = ConfigDict(frozen=True, extra="ignore")

    # --- Queries -----------------------------------------------------------
    def get(self, mod_id: str) -> Optional[StateEntry]:
        for entry in self.mods:
            if entry.id == mod_id:
                return entry
        for entry in self.dormant:
            if entry.id == mod_id:
                return entry
        return None

    def is_enabled(self, mod_id: str) -> bool:
        entry = self.get(mod_id)
        return entry.enabled if entry else False

    def ordered_ids(self) -> List[str]:
        ranked = sorted(
            enumerate(self.mods), key=lambda pair: (pair[1].order, pair[0])
        )
        out: List[str] = []
        for _, entry in ranked:
            if entry.id not in out:
                out.append(entry.id)
        return out

    def seed_ids(self) -> List[str]:
        out = self.ordered_ids()
        for entry in self.dormant:
            if entry.id not in out:
                out.append(entry.id)
        return out

    def __len__(self) -> int:
        return len(self.mods)

    # --- Copy-on-write edits -----------------------------------------------
    def merged(self, ordered_ids: Sequence[str]) -> "ModStateTable":
        """Rebuild `mods` for a freshly resolved order."""
        prev: Dict[str, StateEntry] = {}
        for entry in self.dormant + self.mods:
            prev[entry.id] = entry
        active = set(ordered_ids)
        mods = tuple(
            StateEntry(
                id=mid,
                enabled=prev[mid].enabled if mid in prev else True,
                order=idx,
            )
            for idx, mid in enumerate(ordered_ids)
        )
        gone = [
            mid for mid in self.seed_ids() if mid not in active and mid in prev
        ]
        dormant = tuple(
            StateEntry(
                id=mid, enabled=prev[mid].enabled, order=len(mods) + j
            )
            for j, mid in enumerate(gone)
        )
        return ModStateTable(mods=mods, dormant=dormant)

    def with_enabled(
        self, mod_id: str, on: bool
    ) -> Optional["ModStateTable"]:
        if not any(e.id == mod_id for e in self.mods):
            return None
        mods = tuple(
            e.model_copy(update={"enabled": on}) if e.id == mod_id else e
            for e in self.mods
        )
        return ModStateTable(mods=mods, dormant=self.dormant)

    def moved(
        self, mod_id: str, new_index: int
    ) -> Optional["ModStateTable"]:
        ids = self.ordered_ids()
        if mod_id not in ids or not 0 <= new_index < len(ids):
            return None
        ids.remove(mod_id)
        ids.insert(new_index, mod_id)
        flags = {e.id: e.enabled for e in self.mods}
        mods = tuple(
            StateEntry(id=mid, enabled=flags[mid], order=idx)
            for idx, mid in enumerate(ids)
        )
        return ModStateTable(mods=mods, dormant=self.dormant)


__all__ = ["StateEntry", "ModStateTable"]
