from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Vessel:
    id: int | None = None
    name: str = ""
    imo_number: str = ""


@dataclass(slots=True)
class Compartment:
    """A tank compartment with its total net capacity in cubic metres."""
    id: int | None = None
    vessel_id: int | None = None
    name: str = ""
    capacity_m3: float = 0.0
