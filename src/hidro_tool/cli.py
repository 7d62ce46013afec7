"""CLI para exportar a Excel el estado de hidratacion guardado."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path

from dateutil import tz

from hidro_tool.report import ReportLayout, write_hydration_xlsx
from hidro_tool.session import HydrationSession
from hidro_tool.storage import SQLiteStore

_LOCAL_TZ = tz.tzlocal()

DEFAULT_DB = Path.home() / ".hidro_tool" / "hidro_tool.sqlite3"


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Exporta objetivos, registro de hoy y recomendaciones a Excel."
    )
    parser.add_argument(
        "--db-path",
        default=str(DEFAULT_DB),
        help="Base SQLite de la app (default: ~/.hidro_tool/hidro_tool.sqlite3).",
    )
    parser.add_argument(
        "--out-dir",
        default="",
        help="Directorio de salida (default: export_dir guardado o ./salidas).",
    )
    return parser.parse_args()


def main() -> int:
    """Run the export CLI.

    Returns:
        Exit code (0 on success, 1 when the database is missing or nothing
        has been calculated yet).
    """
    logging.basicConfig(
        level=logging.INFO, format="%(levelname)s %(name)s: %(message)s"
    )
    ns = parse_args()
    db_path = Path(ns.db_path).expanduser()
    if not db_path.is_file():
        print(f"No existe la base de datos: {db_path}")
        return 1
    store = SQLiteStore(db_path)
    config = store.load_config()

    with HydrationSession(store) as session:
        snapshot = session.snapshot()
    if snapshot.goals is None:
        print("Sin objetivos calculados: no hay nada para exportar.")
        return 1

    out_dir = Path(ns.out_dir or config.export_dir or Path.cwd() / "salidas")
    ts = datetime.now(tz=_LOCAL_TZ).strftime("%Y-%m-%d_%H-%M-%S")
    out_path = out_dir.expanduser() / f"hidratacion_{ts}.xlsx"

    write_hydration_xlsx(snapshot, out_path, ReportLayout())

    print(f"OK: Water goal: {snapshot.goal_ml} ml")
    print(f"OK: Today's entries: {len(snapshot.entries)}")
    print(f"OK: Output: {out_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
