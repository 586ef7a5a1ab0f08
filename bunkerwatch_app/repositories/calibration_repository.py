from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import Column, Float, Integer, String, Table, delete, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from .database import Base
from ..config.axes import AUXILIARY_COLUMNS, HEEL_COLUMNS, TRIM_COLUMNS
from ..models import (
    CalibrationTable,
    Compartment,
    HeelCorrectionRow,
    HeelCorrectionTable,
    SoundingRow,
    Vessel,
)
from ..services.interpolation import round_half_up

logger = logging.getLogger(__name__)


class VesselORM(Base):
    __tablename__ = "vessels"

    vessel_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vessel_name: Mapped[str] = mapped_column(String(255), nullable=False)
    imo_number: Mapped[str] = mapped_column(String(32), default="")


class CompartmentORM(Base):
    __tablename__ = "compartments"

    compartment_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vessel_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    compartment_name: Mapped[str] = mapped_column(String(255), nullable=False)
    total_net_volume_m3: Mapped[float] = mapped_column(Float, default=0.0)


# One volume column per trim / heel level; generated from the fixed axes.
main_sounding_trim_data = Table(
    "main_sounding_trim_data",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("compartment_id", Integer, nullable=False, index=True),
    Column("ullage", Float, nullable=False),
    Column("sound", Float, nullable=True),
    *(Column(c, Float, nullable=False, default=0.0) for c in AUXILIARY_COLUMNS),
    *(Column(c, Float, nullable=False) for c in TRIM_COLUMNS),
)

heel_correction_data = Table(
    "heel_correction_data",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("compartment_id", Integer, nullable=False, index=True),
    Column("ullage", Float, nullable=False),
    *(Column(c, Float, nullable=False) for c in HEEL_COLUMNS),
)


class MainSoundingORM(Base):
    __table__ = main_sounding_trim_data


class HeelCorrectionORM(Base):
    __table__ = heel_correction_data


class CalibrationRepository:
    """
    Repository for vessels, compartments and their calibration tables.

    Also serves as a calibration source for SoundingService: tables are read
    whole, ordered by ullage, into immutable snapshots.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    # --- vessels / compartments ---

    def create_vessel(self, vessel: Vessel) -> Vessel:
        obj = VesselORM(vessel_name=vessel.name, imo_number=vessel.imo_number)
        if vessel.id is not None:
            obj.vessel_id = vessel.id
        self._db.add(obj)
        self._db.commit()
        self._db.refresh(obj)
        vessel.id = obj.vessel_id
        return vessel

    def list_vessels(self) -> List[Vessel]:
        return [
            Vessel(id=obj.vessel_id, name=obj.vessel_name, imo_number=obj.imo_number)
            for obj in self._db.query(VesselORM).order_by(VesselORM.vessel_name).all()
        ]

    def create_compartment(self, compartment: Compartment) -> Compartment:
        if compartment.vessel_id is None:
            raise ValueError("Compartment.vessel_id must be set for create")
        obj = CompartmentORM(
            vessel_id=compartment.vessel_id,
            compartment_name=compartment.name,
            total_net_volume_m3=compartment.capacity_m3,
        )
        if compartment.id is not None:
            obj.compartment_id = compartment.id
        self._db.add(obj)
        self._db.commit()
        self._db.refresh(obj)
        compartment.id = obj.compartment_id
        return compartment

    def get_compartment(self, compartment_id: int) -> Optional[Compartment]:
        obj = self._db.get(CompartmentORM, compartment_id)
        if obj is None:
            return None
        return Compartment(
            id=obj.compartment_id,
            vessel_id=obj.vessel_id,
            name=obj.compartment_name,
            capacity_m3=obj.total_net_volume_m3 or 0.0,
        )

    def list_compartments(self, vessel_id: int) -> List[Compartment]:
        compartments: List[Compartment] = []
        for obj in (
            self._db.query(CompartmentORM)
            .filter(CompartmentORM.vessel_id == vessel_id)
            .order_by(CompartmentORM.compartment_name)
            .all()
        ):
            compartments.append(
                Compartment(
                    id=obj.compartment_id,
                    vessel_id=obj.vessel_id,
                    name=obj.compartment_name,
                    capacity_m3=obj.total_net_volume_m3 or 0.0,
                )
            )
        return compartments

    # --- calibration tables ---

    def sounding_table(self, compartment_id: int) -> Optional[CalibrationTable]:
        """Sounding table for a compartment; None when it has no rows."""
        result = self._db.execute(
            select(main_sounding_trim_data)
            .where(main_sounding_trim_data.c.compartment_id == compartment_id)
            .order_by(main_sounding_trim_data.c.ullage)
        ).mappings().all()
        if not result:
            return None
        rows = [
            SoundingRow(
                ullage=float(r["ullage"]),
                values={c: float(r[c]) for c in TRIM_COLUMNS},
                sound=None if r["sound"] is None else round_half_up(float(r["sound"])),
                lcg=float(r["lcg"] or 0.0),
                tcg=float(r["tcg"] or 0.0),
                vcg=float(r["vcg"] or 0.0),
                iy=float(r["iy"] or 0.0),
            )
            for r in result
        ]
        return CalibrationTable(compartment_id=compartment_id, rows=rows)

    def heel_table(self, compartment_id: int) -> Optional[HeelCorrectionTable]:
        """Heel correction table for a compartment; None when it has no rows."""
        result = self._db.execute(
            select(heel_correction_data)
            .where(heel_correction_data.c.compartment_id == compartment_id)
            .order_by(heel_correction_data.c.ullage)
        ).mappings().all()
        if not result:
            return None
        rows = [
            HeelCorrectionRow(
                ullage=float(r["ullage"]),
                values={c: float(r[c]) for c in HEEL_COLUMNS},
            )
            for r in result
        ]
        return HeelCorrectionTable(compartment_id=compartment_id, rows=rows)

    def save_tables(
        self,
        compartment_id: int,
        sounding: CalibrationTable,
        heel: HeelCorrectionTable | None = None,
    ) -> None:
        """Replace a compartment's calibration rows with the given tables."""
        self._db.execute(delete(main_sounding_trim_data).where(main_sounding_trim_data.c.compartment_id == compartment_id))
        self._db.execute(delete(heel_correction_data).where(heel_correction_data.c.compartment_id == compartment_id))
        for row in sounding.rows:
            self._db.add(
                MainSoundingORM(
                    compartment_id=compartment_id,
                    ullage=row.ullage,
                    sound=row.sound,
                    lcg=row.lcg,
                    tcg=row.tcg,
                    vcg=row.vcg,
                    iy=row.iy,
                    **{c: row.values[c] for c in TRIM_COLUMNS},
                )
            )
        if heel is not None:
            for row in heel.rows:
                self._db.add(
                    HeelCorrectionORM(
                        compartment_id=compartment_id,
                        ullage=row.ullage,
                        **{c: row.values[c] for c in HEEL_COLUMNS},
                    )
                )
        self._db.commit()
        logger.info(
            "Saved calibration for compartment %s: %d sounding rows, %d heel rows",
            compartment_id, len(sounding.rows), len(heel.rows) if heel is not None else 0,
        )
