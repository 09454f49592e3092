"""Command-line tool for managing stored MindMapper maps.

Usage:
  mindmapper list
  mindmapper create --name "Networking"
  mindmapper rename MAP_ID "New name"
  mindmapper delete MAP_ID [--yes]
  mindmapper export --out maps.json
  mindmapper export --out map.md --format md --map MAP_ID
  mindmapper import --file maps.json [--overwrite]
  mindmapper verify

Point it at another database with --db PATH or MINDMAPPER_DATA_DIR.
"""

from __future__ import annotations

import argparse
import sqlite3
import sys
from pathlib import Path

from loguru import logger

from mindmapper.config import EditorSettings
from mindmapper.database import Database
from mindmapper.export import MindMapExporter
from mindmapper.models import Document
from mindmapper.store import DocumentStore, MapCatalog


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _open(args: argparse.Namespace) -> tuple[Database, DocumentStore, MapCatalog]:
    db_path = None
    if args.db:
        db_path = Path(args.db).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        db = Database(db_path)
    except sqlite3.DatabaseError as exc:
        raise SystemExit(f"Cannot open database {db_path or 'in the data directory'}: {exc}")
    settings = EditorSettings.load(db)
    store = DocumentStore(db, default_name=settings.default_map_name)
    catalog = MapCatalog(db, default_name=settings.default_map_name,
                         root_label=settings.root_label)
    return db, store, catalog


def _cmd_list(args: argparse.Namespace) -> int:
    db, _store, catalog = _open(args)
    try:
        maps = catalog.list()
    finally:
        db.close()

    if not maps:
        print("No maps yet. Create one with `mindmapper create`.")
        return 0
    for map_id, summary in maps.items():
        print(f"{map_id}  {summary.name}  ({summary.node_count} node(s))")
    return 0


def _cmd_create(args: argparse.Namespace) -> int:
    db, _store, catalog = _open(args)
    try:
        document = Document.default(args.name or catalog.default_name, catalog.root_label)
        map_id = catalog.create(document)
    finally:
        db.close()
    print(map_id)
    return 0


def _cmd_rename(args: argparse.Namespace) -> int:
    db, _store, catalog = _open(args)
    try:
        if catalog.get(args.map_id) is None:
            print(f"Map not found: {args.map_id}")
            return 1
        if not catalog.rename(args.map_id, args.name):
            print("Name unchanged")
            return 0
    finally:
        db.close()
    print(f"Renamed {args.map_id} to {args.name}")
    return 0


def _cmd_delete(args: argparse.Namespace) -> int:
    db, _store, catalog = _open(args)
    try:
        summary = catalog.get(args.map_id)
        if summary is None:
            print(f"Map not found: {args.map_id}")
            return 1
        if not args.yes:
            answer = input(f'Delete map "{summary.name}"? This cannot be undone. [y/N] ')
            if answer.strip().lower() not in ("y", "yes"):
                print("Cancelled")
                return 1
        catalog.delete(args.map_id)
    finally:
        db.close()
    print(f"Deleted {args.map_id}")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    out_path = Path(args.out).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)

    db, store, _catalog = _open(args)
    try:
        if args.format == "json":
            count = MindMapExporter(store).export_json(str(out_path))
            print(f"Wrote {count} map(s) to {out_path}")
            return 0

        if not args.map:
            raise SystemExit(f"--map is required for --format {args.format}")
        document = store.load(args.map)
        if document is None:
            print(f"Map not found or unreadable: {args.map}")
            return 1

        if args.format == "md":
            ok = MindMapExporter(store).export_markdown(document, str(out_path))
        else:
            from mindmapper.image import ImageExporter

            exporter = ImageExporter()
            if args.format == "png":
                ok = exporter.export_png(document, str(out_path))
            else:
                ok = exporter.export_pdf(document, str(out_path))
    finally:
        db.close()

    if not ok:
        print("Nothing to export: the map has no visible nodes")
        return 1
    print(f"Wrote {out_path}")
    return 0


def _cmd_import(args: argparse.Namespace) -> int:
    in_path = Path(args.file).expanduser().resolve()
    if not in_path.exists():
        raise SystemExit(f"File not found: {in_path}")

    db, store, _catalog = _open(args)
    try:
        imported, skipped = MindMapExporter(store).import_json(str(in_path), overwrite=args.overwrite)
    finally:
        db.close()
    print(f"Imported {imported} map(s), skipped {skipped}")
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    db, store, catalog = _open(args)
    try:
        ok = db.integrity_ok()
        counts = db.counts()
        maps = catalog.list()
        unreadable = [map_id for map_id in maps if store.load(map_id) is None]
    finally:
        db.close()

    print("MindMapper data verification")
    print(f"  DB: {db.db_path}")
    print(f"  SQLite integrity_check: {'OK' if ok else 'FAILED'}")
    print(f"  Counts: maps={counts.get('documents')} settings={counts.get('settings')}")
    print(f"  Unreadable maps: {len(unreadable)}")
    for map_id in unreadable:
        print(f"    {map_id}")

    return 0 if ok and not unreadable else 2


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="mindmapper")
    parser.add_argument("--db", help="Database file (default: ~/.local/share/mindmapper/mindmapper.db)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_list = sub.add_parser("list", help="List stored maps")
    p_list.set_defaults(func=_cmd_list)

    p_create = sub.add_parser("create", help="Create a map with a single root node")
    p_create.add_argument("--name", help="Map name")
    p_create.set_defaults(func=_cmd_create)

    p_ren = sub.add_parser("rename", help="Rename a map")
    p_ren.add_argument("map_id")
    p_ren.add_argument("name")
    p_ren.set_defaults(func=_cmd_rename)

    p_del = sub.add_parser("delete", help="Delete a map")
    p_del.add_argument("map_id")
    p_del.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    p_del.set_defaults(func=_cmd_delete)

    p_exp = sub.add_parser("export", help="Export maps")
    p_exp.add_argument("--out", required=True, help="Output path")
    p_exp.add_argument(
        "--format",
        choices=("json", "md", "png", "pdf"),
        default="json",
        help="json exports every map; md/png/pdf export the map given by --map",
    )
    p_exp.add_argument("--map", help="Map id for single-map formats")
    p_exp.set_defaults(func=_cmd_export)

    p_imp = sub.add_parser("import", help="Import maps from a JSON export")
    p_imp.add_argument("--file", required=True, help="Input .json path")
    p_imp.add_argument("--overwrite", action="store_true", help="Replace maps with the same id")
    p_imp.set_defaults(func=_cmd_import)

    p_ver = sub.add_parser("verify", help="Check the database and every stored map")
    p_ver.set_defaults(func=_cmd_verify)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
