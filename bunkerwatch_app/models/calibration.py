from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True, slots=True)
class SoundingRow:
    """One row of a main sounding/trim table: volume (m³) per trim column plus hydrostatics."""
    ullage: float
    values: Dict[str, float] = field(default_factory=dict)
    sound: int | None = None
    lcg: float = 0.0
    tcg: float = 0.0
    vcg: float = 0.0
    iy: float = 0.0


@dataclass(frozen=True, slots=True)
class HeelCorrectionRow:
    """One row of a heel correction table: correction (m³) per heel column."""
    ullage: float
    values: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CalibrationTable:
    """
    Immutable sounding table snapshot for one compartment.

    Rows are kept in the order the provisioning layer supplied them; the
    interpolation code checks the ordering instead of re-sorting.
    """
    compartment_id: int | str
    rows: Tuple[SoundingRow, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))

    @property
    def ullages(self) -> Tuple[float, ...]:
        return tuple(r.ullage for r in self.rows)

    def rows_at(self, *ullages: float) -> List[SoundingRow]:
        """All rows whose ullage is one of `ullages`, in stored order."""
        wanted = set(ullages)
        return [r for r in self.rows if r.ullage in wanted]


@dataclass(frozen=True, slots=True)
class HeelCorrectionTable:
    """Immutable heel correction table snapshot; its ullage set is independent of the sounding table."""
    compartment_id: int | str
    rows: Tuple[HeelCorrectionRow, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))

    @property
    def ullages(self) -> Tuple[float, ...]:
        return tuple(r.ullage for r in self.rows)

    def rows_at(self, *ullages: float) -> List[HeelCorrectionRow]:
        wanted = set(ullages)
        return [r for r in self.rows if r.ullage in wanted]
