"""
Command-line entry point for the bunkerwatch sounding tools.

    bunkerwatch import-package vessel_package.json
    bunkerwatch import-table 12 tank12_sounding.csv --heel tank12_heel.csv
    bunkerwatch list
    bunkerwatch volume 12 --ullage 150 --trim 0.25 --heel -1.2 --density 0.95 --log --session R1
    bunkerwatch report R1 --xlsx round.xlsx --pdf round.pdf
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from bunkerwatch_app.config.settings import Settings, init_logging
from bunkerwatch_app.models import Compartment, SoundingQuery
from bunkerwatch_app.reports import (
    build_report_summary_text,
    build_sounding_summary_text,
    export_report_to_excel,
    export_report_to_pdf,
)
from bunkerwatch_app.repositories import (
    CalibrationRepository,
    SoundingLogRepository,
    init_database,
    session_scope,
)
from bunkerwatch_app.services.calibration_import import parse_data_package, read_calibration_file, table_row_counts
from bunkerwatch_app.services.interpolation import SoundingError
from bunkerwatch_app.services.quantity import build_sounding_report
from bunkerwatch_app.services.sounding_service import SoundingService

logger = logging.getLogger(__name__)

EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bunkerwatch")
    parser.add_argument("--db", type=Path, default=None, help="SQLite calibration database (default: data dir)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_pkg = sub.add_parser("import-package", help="Load an offline vessel data package (JSON)")
    p_pkg.add_argument("path", type=Path)

    p_tbl = sub.add_parser("import-table", help="Load a compartment's tables from CSV/Excel")
    p_tbl.add_argument("compartment_id", type=int)
    p_tbl.add_argument("path", type=Path)
    p_tbl.add_argument("--heel", type=Path, default=None, help="Heel correction table file")
    p_tbl.add_argument("--name", default=None, help="Create the compartment with this name if missing")
    p_tbl.add_argument("--vessel-id", type=int, default=None)
    p_tbl.add_argument("--capacity", type=float, default=0.0)

    sub.add_parser("list", help="List vessels and compartments")

    p_vol = sub.add_parser("volume", help="Volume for a compartment at ullage/trim/heel")
    p_vol.add_argument("compartment_id", type=int)
    p_vol.add_argument("--ullage", type=float, required=True)
    p_vol.add_argument("--trim", type=float, required=True)
    p_vol.add_argument("--heel", type=float, default=None)
    p_vol.add_argument("--density", type=float, default=None, help="t/m³ at observed temperature")
    p_vol.add_argument("--grade", default="", help="Fuel grade, e.g. HFO, MGO")
    p_vol.add_argument("--log", action="store_true", help="Store the result in the sounding log")
    p_vol.add_argument("--session", default=None, help="Sounding round identifier for the log")
    p_vol.add_argument("--json", action="store_true", help="Print the full result as JSON")

    p_rep = sub.add_parser("report", help="Summarize a logged sounding round")
    p_rep.add_argument("session")
    p_rep.add_argument("--vessel", default="")
    p_rep.add_argument("--xlsx", type=Path, default=None)
    p_rep.add_argument("--pdf", type=Path, default=None)

    return parser


def cmd_import_package(factory: sessionmaker, path: Path) -> None:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    # the server wraps packages as {"success": ..., "data": {...}}
    package = parse_data_package(raw.get("data", raw))
    with session_scope(factory) as db:
        repo = CalibrationRepository(db)
        if package.vessel.id is None or all(v.id != package.vessel.id for v in repo.list_vessels()):
            repo.create_vessel(package.vessel)
        for compartment in package.compartments:
            if compartment.vessel_id is None:
                compartment.vessel_id = package.vessel.id
            if repo.get_compartment(compartment.id) is None:
                repo.create_compartment(compartment)
        for compartment_id, table in package.sounding_tables.items():
            repo.save_tables(compartment_id, table, package.heel_tables.get(compartment_id))
    main_rows, heel_rows = table_row_counts(package)
    print(f"Imported {package.vessel.name}: {len(package.compartments)} compartments, "
          f"{main_rows} sounding rows, {heel_rows} heel rows")


def cmd_import_table(factory: sessionmaker, args: argparse.Namespace) -> None:
    sounding = read_calibration_file(args.path, args.compartment_id, kind="sounding")
    heel = read_calibration_file(args.heel, args.compartment_id, kind="heel") if args.heel else None
    with session_scope(factory) as db:
        repo = CalibrationRepository(db)
        if repo.get_compartment(args.compartment_id) is None:
            if not args.name or args.vessel_id is None:
                raise ValueError(
                    f"Compartment {args.compartment_id} not found; pass --name and --vessel-id to create it"
                )
            repo.create_compartment(
                Compartment(id=args.compartment_id, vessel_id=args.vessel_id, name=args.name, capacity_m3=args.capacity)
            )
        repo.save_tables(args.compartment_id, sounding, heel)
    print(f"Imported compartment {args.compartment_id}: {len(sounding.rows)} sounding rows, "
          f"{len(heel.rows) if heel else 0} heel rows")


def cmd_list(factory: sessionmaker) -> None:
    with session_scope(factory) as db:
        repo = CalibrationRepository(db)
        vessels = repo.list_vessels()
        if not vessels:
            print("No vessels.")
            return
        for vessel in vessels:
            print(f"{vessel.name} (ID: {vessel.id}, IMO: {vessel.imo_number})")
            for c in repo.list_compartments(vessel.id):
                print(f"  {c.id:>5}  {c.name}  {c.capacity_m3:.1f} m³")


def cmd_volume(factory: sessionmaker, settings: Settings, args: argparse.Namespace) -> None:
    query = SoundingQuery(args.compartment_id, args.ullage, args.trim, args.heel)
    with session_scope(factory) as db:
        repo = CalibrationRepository(db)
        service = SoundingService(repo, zero_sound_is_missing=settings.zero_sound_is_missing)
        compartment = repo.get_compartment(args.compartment_id)
        entry = service.log_entry(
            query,
            compartment_name=compartment.name if compartment else "",
            fuel_grade=args.grade,
            density_t_per_m3=args.density,
            session_id=args.session,
        )
        if args.log:
            SoundingLogRepository(db).create(entry)

    if args.json:
        print(json.dumps({**entry.result.to_dict(), "calculated_mt": entry.calculated_mt}, indent=2))
    else:
        print(build_sounding_summary_text(entry.result, compartment, args.density))


def cmd_report(factory: sessionmaker, args: argparse.Namespace) -> None:
    with session_scope(factory) as db:
        entries = SoundingLogRepository(db).list_for_session(args.session)
    if not entries:
        raise ValueError(f"No soundings logged for session {args.session}")
    first = entries[0].result
    report = build_sounding_report(args.vessel, entries, trim=first.trim, heel=first.heel)
    print(build_report_summary_text(report))
    if args.xlsx:
        export_report_to_excel(args.xlsx, report)
        print(f"Excel report written to {args.xlsx}")
    if args.pdf:
        export_report_to_pdf(args.pdf, report)
        print(f"PDF report written to {args.pdf}")


def main(argv: Optional[List[str]] = None) -> int:
    """Runs one CLI command; returns the process exit code."""
    args = _build_parser().parse_args(argv)

    settings = Settings.default()
    if args.db is not None:
        settings.db_path = args.db
    init_logging(settings, console=True)
    factory = init_database(settings.db_path)

    try:
        if args.cmd == "import-package":
            cmd_import_package(factory, args.path)
        elif args.cmd == "import-table":
            cmd_import_table(factory, args)
        elif args.cmd == "list":
            cmd_list(factory)
        elif args.cmd == "volume":
            cmd_volume(factory, settings, args)
        elif args.cmd == "report":
            cmd_report(factory, args)
    except SoundingError as exc:
        logger.error("%s failed: %s", args.cmd, exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_ERROR
    except (ValueError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR
    return 0


if __name__ == "__main__":
    sys.exit(main())
