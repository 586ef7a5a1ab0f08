from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import List

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, Session, mapped_column

from .database import Base
from ..models import SoundingLogEntry, SoundingResult


def _as_utc(value: datetime) -> datetime:
    # SQLite returns naive datetimes; stored values are always UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SoundingLogORM(Base):
    __tablename__ = "sounding_logs"

    log_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    compartment_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    compartment_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ullage: Mapped[float] = mapped_column(Float, nullable=False)
    trim: Mapped[float] = mapped_column(Float, nullable=False)
    heel: Mapped[float | None] = mapped_column(Float, nullable=True)
    fuel_grade: Mapped[str | None] = mapped_column(String(64), nullable=True)
    density: Mapped[float | None] = mapped_column(Float, nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    base_volume: Mapped[float] = mapped_column(Float, nullable=False)
    heel_correction: Mapped[float] = mapped_column(Float, default=0.0)
    final_volume: Mapped[float] = mapped_column(Float, nullable=False)
    calculated_mt: Mapped[float | None] = mapped_column(Float, nullable=True)
    main_interpolation: Mapped[str] = mapped_column(String(32), nullable=False)
    heel_interpolation: Mapped[str] = mapped_column(String(32), nullable=False)
    # Full SoundingResult.to_dict(), bounds and heel-stage error included
    result_json: Mapped[str] = mapped_column(Text, nullable=False)


class SoundingLogRepository:
    """Repository for computed sounding results."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def create(self, entry: SoundingLogEntry) -> SoundingLogEntry:
        if entry.compartment_id is None:
            raise ValueError("SoundingLogEntry.compartment_id must be set for create")
        if entry.result is None:
            raise ValueError("SoundingLogEntry.result must be set for create")
        res = entry.result
        obj = SoundingLogORM(
            compartment_id=entry.compartment_id,
            compartment_name=entry.compartment_name or None,
            session_id=entry.session_id,
            recorded_at=entry.recorded_at,
            ullage=res.ullage,
            trim=res.trim,
            heel=res.heel,
            fuel_grade=entry.fuel_grade or None,
            density=entry.density_t_per_m3,
            temperature=entry.temperature_c,
            base_volume=res.base_volume,
            heel_correction=res.heel_correction,
            final_volume=res.final_volume,
            calculated_mt=entry.calculated_mt,
            main_interpolation=res.main_interpolation.type.value,
            heel_interpolation=res.heel_interpolation.type.value,
            result_json=json.dumps(res.to_dict()),
        )
        self._db.add(obj)
        self._db.commit()
        self._db.refresh(obj)
        entry.id = obj.log_id
        return entry

    def _to_entry(self, obj: SoundingLogORM) -> SoundingLogEntry:
        return SoundingLogEntry(
            id=obj.log_id,
            compartment_id=obj.compartment_id,
            compartment_name=obj.compartment_name or "",
            result=SoundingResult.from_dict(json.loads(obj.result_json)),
            fuel_grade=obj.fuel_grade or "",
            density_t_per_m3=obj.density,
            temperature_c=obj.temperature,
            calculated_mt=obj.calculated_mt,
            session_id=obj.session_id,
            recorded_at=_as_utc(obj.recorded_at),
        )

    def list_for_compartment(self, compartment_id: int) -> List[SoundingLogEntry]:
        return [
            self._to_entry(obj)
            for obj in (
                self._db.query(SoundingLogORM)
                .filter(SoundingLogORM.compartment_id == compartment_id)
                .order_by(SoundingLogORM.recorded_at, SoundingLogORM.log_id)
                .all()
            )
        ]

    def list_for_session(self, session_id: str) -> List[SoundingLogEntry]:
        return [
            self._to_entry(obj)
            for obj in (
                self._db.query(SoundingLogORM)
                .filter(SoundingLogORM.session_id == session_id)
                .order_by(SoundingLogORM.log_id)
                .all()
            )
        ]

    def delete(self, log_id: int) -> None:
        obj = self._db.get(SoundingLogORM, log_id)
        if obj is None:
            return
        self._db.delete(obj)
        self._db.commit()
