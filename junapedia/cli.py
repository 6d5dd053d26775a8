"""
Command line entry point for the offline data-preparation stages.

    junapedia csv-to-json --dir ./csv
    junapedia unify --input raw-stores.json --merge-map merge-map.json
    junapedia dedupe --input unified-stores-merged.json
    junapedia seed-csv --dir ./csv --confirm
    junapedia describe --input unified-stores-deduped.json
    junapedia dump-groups | find-ungrouped | extract-comunas --input ...
    junapedia verify

Commands that write to the remote table only log what they would send unless
``--confirm`` is passed or ``CONFIRM=1`` is set.
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from junapedia.config import (
    COMUNAS_FILE,
    DEDUPED_STORES_FILE,
    DESCRIPTIONS_FILE,
    MERGED_STORES_FILE,
    RAW_STORES_FILE,
    Settings,
)
from junapedia.ingest.csv_loader import load_csv_directory
from junapedia.matching.franchise_matcher import FranchiseMatcher
from junapedia.models.reference import FranchiseTable, load_franchise_table
from junapedia.models.store import CanonicalStore, RawRecord
from junapedia.pipeline.dedupe import AddressDeduplicator
from junapedia.pipeline.descriptions import DescriptionGenerator
from junapedia.pipeline.keys import CanonicalKeyBuilder
from junapedia.pipeline.merger import RecordMerger
from junapedia.reports import dump_groups, extract_comunas, find_ungrouped
from junapedia.storage.store_repository import StoreRepository, StoreUpsertError
from junapedia.utils.logging_config import logger, set_level

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_NOT_CONFIGURED = 2

PREVIEW_SIZE = 5


class InputError(Exception):
    """A required input file or directory is missing or unreadable."""


def read_json(path: str) -> Any:
    file_path = Path(path)
    if not file_path.is_file():
        raise InputError(f"Input not found: {path}")
    try:
        return json.loads(file_path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {path}: {e}") from e


def write_json(path: str, payload: Any) -> None:
    Path(path).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding='utf-8')
    logger.info(f"Wrote {path}")


def read_records(path: str) -> List[RawRecord]:
    data = read_json(path)
    if not isinstance(data, list):
        raise InputError(f"Expected a JSON list in {path}, got {type(data).__name__}")
    return [RawRecord.model_validate(item) for item in data if isinstance(item, dict)]


def read_stores(path: str) -> List[CanonicalStore]:
    data = read_json(path)
    if not isinstance(data, list):
        raise InputError(f"Expected a JSON list in {path}, got {type(data).__name__}")
    return [CanonicalStore.from_row(item) for item in data if isinstance(item, dict)]


def build_matcher(franchises: Optional[str]) -> FranchiseMatcher:
    table = FranchiseTable.from_json(franchises) if franchises else load_franchise_table()
    return FranchiseMatcher(table)


def store_dump(store: CanonicalStore) -> Dict[str, Any]:
    return store.model_dump(exclude_none=True)


def remote_rows(stores: List[CanonicalStore]) -> List[Dict[str, Any]]:
    """Remote table rows for stores, all stamped with the same seeding time."""
    seeded_at = datetime.now(timezone.utc).isoformat()
    return [store.to_row(seeded_at) for store in stores]


def is_confirmed(args: argparse.Namespace, settings: Settings) -> bool:
    return bool(getattr(args, 'confirm', False)) or settings.confirm


def push_rows(rows: List[Dict[str, Any]], args: argparse.Namespace, settings: Settings) -> int:
    """Upserts rows when confirmed; otherwise logs a preview (dry run)."""
    if not is_confirmed(args, settings):
        logger.info(f"Dry run: {len(rows)} rows prepared, nothing written. Pass --confirm or set CONFIRM=1 to upsert.")
        for row in rows[:PREVIEW_SIZE]:
            logger.info(f"Sample row: {json.dumps(row, ensure_ascii=False)}")
        return EXIT_OK

    if args.table:
        settings = settings.model_copy(update={'table': args.table})
    repository = StoreRepository.from_settings(settings)
    if not repository.is_configured:
        logger.error("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY; cannot upsert")
        return EXIT_NOT_CONFIGURED
    try:
        written = repository.upsert(rows, batch_size=args.batch_size or settings.batch_size)
    except StoreUpsertError as e:
        logger.error(f"Upsert aborted: {e}")
        return EXIT_INPUT_ERROR
    logger.info(f"Upserted {written} rows into {repository.table}")
    return EXIT_OK


# --- Commands ---

def cmd_csv_to_json(args: argparse.Namespace, settings: Settings) -> int:
    records = load_csv_directory(args.dir)
    if not records:
        raise InputError(f"No CSV rows found in {args.dir}")
    write_json(args.out, [r.model_dump(exclude_none=True) for r in records])
    return EXIT_OK


def cmd_unify(args: argparse.Namespace, settings: Settings) -> int:
    records = read_records(args.input)
    merge_map = read_json(args.merge_map) if args.merge_map else None
    if merge_map is not None and not isinstance(merge_map, dict):
        raise InputError(f"Merge map {args.merge_map} must be a JSON object")

    key_builder = CanonicalKeyBuilder(build_matcher(args.franchises), merge_map)
    stores = RecordMerger(key_builder).merge_list(records)
    write_json(args.out, [store_dump(s) for s in stores])
    return EXIT_OK


def cmd_dedupe(args: argparse.Namespace, settings: Settings) -> int:
    records = read_records(args.input)
    stores = AddressDeduplicator().dedupe(records)
    write_json(args.out, [store_dump(s) for s in stores])
    return push_rows(remote_rows(stores), args, settings)


def cmd_seed_csv(args: argparse.Namespace, settings: Settings) -> int:
    records = load_csv_directory(args.dir)
    if not records:
        raise InputError(f"No CSV rows found in {args.dir}")

    key_builder = CanonicalKeyBuilder(build_matcher(args.franchises))
    stores = RecordMerger(key_builder, id_strategy='hash').merge_list(records)
    logger.info(f"Read {len(records)} rows from CSV files. Deduplicated to {len(stores)} records.")

    rows = remote_rows(stores)
    if args.out:
        write_json(args.out, rows)
    return push_rows(rows, args, settings)


def cmd_describe(args: argparse.Namespace, settings: Settings) -> int:
    stores = read_stores(args.input)

    openai_client = None
    if args.openai:
        if settings.openai_api_key:
            from openai import OpenAI
            openai_client = OpenAI(api_key=settings.openai_api_key)
        else:
            logger.warning("OPENAI_API_KEY not set; using heuristics only")

    generator = DescriptionGenerator(
        build_matcher(args.franchises),
        openai_client=openai_client,
        model=settings.openai_model,
        call_limit=args.limit if args.limit is not None else settings.openai_call_limit,
    )
    items = generator.generate_all(stores)
    write_json(args.out, {
        'generatedAt': datetime.now(timezone.utc).isoformat(),
        'count': len(items),
        'items': items,
    })
    return EXIT_OK


def cmd_dump_groups(args: argparse.Namespace, settings: Settings) -> int:
    report = dump_groups(read_records(args.input), build_matcher(args.franchises), limit=args.limit)
    emit_report(report, args.out)
    return EXIT_OK


def cmd_find_ungrouped(args: argparse.Namespace, settings: Settings) -> int:
    report = find_ungrouped(
        read_records(args.input),
        build_matcher(args.franchises),
        min_count=args.min_count,
        limit=args.limit,
    )
    emit_report(report, args.out)
    return EXIT_OK


def cmd_extract_comunas(args: argparse.Namespace, settings: Settings) -> int:
    report = extract_comunas(read_records(args.input))
    logger.info(f"Found {len(report['names'])} comunas")
    write_json(args.out, report)
    return EXIT_OK


def cmd_verify(args: argparse.Namespace, settings: Settings) -> int:
    if args.table:
        settings = settings.model_copy(update={'table': args.table})
    repository = StoreRepository.from_settings(settings)
    if not repository.is_configured:
        logger.error("Missing SUPABASE_URL or key; cannot verify")
        return EXIT_NOT_CONFIGURED
    try:
        total = repository.count()
        latest = repository.latest(limit=args.limit)
    except Exception as e:
        logger.error(f"Verification query failed: {e}")
        return EXIT_INPUT_ERROR
    print(f"Total rows in {repository.table}: {total}")
    print(json.dumps(latest, ensure_ascii=False, indent=2))
    return EXIT_OK


def emit_report(report: Any, out: Optional[str]) -> None:
    if out:
        write_json(out, report)
    else:
        print(json.dumps(report, ensure_ascii=False, indent=2))


# --- Parser ---

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='junapedia', description='Store directory data preparation')
    parser.add_argument('--log-level', default='INFO', help='DEBUG, INFO, WARNING or ERROR')
    sub = parser.add_subparsers(dest='command', required=True)

    def add_franchises(p):
        p.add_argument('--franchises', help='Franchise table JSON (defaults to the packaged table)')

    def add_push(p):
        p.add_argument('--confirm', action='store_true', help='Write to the remote table')
        p.add_argument('--table', help='Target table (defaults to SUPABASE_TABLE)')
        p.add_argument('--batch-size', type=int, help='Rows per upsert batch')

    p = sub.add_parser('csv-to-json', help='Convert CSV exports into raw records')
    p.add_argument('--dir', default='./csv')
    p.add_argument('--out', default=RAW_STORES_FILE)
    p.set_defaults(handler=cmd_csv_to_json)

    p = sub.add_parser('unify', help='Merge raw records into canonical stores')
    p.add_argument('--input', default=RAW_STORES_FILE)
    p.add_argument('--out', default=MERGED_STORES_FILE)
    p.add_argument('--merge-map', help='JSON object mapping name variants to a canonical name')
    add_franchises(p)
    p.set_defaults(handler=cmd_unify)

    p = sub.add_parser('dedupe', help='Collapse records sharing name and address prefix and upsert them')
    p.add_argument('--input', default=MERGED_STORES_FILE)
    p.add_argument('--out', default=DEDUPED_STORES_FILE)
    add_push(p)
    p.set_defaults(handler=cmd_dedupe)

    p = sub.add_parser('seed-csv', help='Merge CSV exports and upsert them')
    p.add_argument('--dir', default='./csv')
    p.add_argument('--out', help='Also write the prepared rows to this JSON file')
    add_franchises(p)
    add_push(p)
    p.set_defaults(handler=cmd_seed_csv)

    p = sub.add_parser('describe', help='Generate purchase-hint descriptions')
    p.add_argument('--input', default=DEDUPED_STORES_FILE)
    p.add_argument('--out', default=DESCRIPTIONS_FILE)
    p.add_argument('--openai', action='store_true', help='Reword descriptions with OpenAI when a key is set')
    p.add_argument('--limit', type=int, help='Maximum OpenAI calls')
    add_franchises(p)
    p.set_defaults(handler=cmd_describe)

    p = sub.add_parser('dump-groups', help='Group sizes per franchise/name key')
    p.add_argument('--input', default=MERGED_STORES_FILE)
    p.add_argument('--out')
    p.add_argument('--limit', type=int, default=200)
    add_franchises(p)
    p.set_defaults(handler=cmd_dump_groups)

    p = sub.add_parser('find-ungrouped', help='Frequent names with no franchise match')
    p.add_argument('--input', default=MERGED_STORES_FILE)
    p.add_argument('--out')
    p.add_argument('--min-count', type=int, default=2)
    p.add_argument('--limit', type=int, default=100)
    add_franchises(p)
    p.set_defaults(handler=cmd_find_ungrouped)

    p = sub.add_parser('extract-comunas', help='Count comunas found in addresses')
    p.add_argument('--input', default=DEDUPED_STORES_FILE)
    p.add_argument('--out', default=COMUNAS_FILE)
    p.set_defaults(handler=cmd_extract_comunas)

    p = sub.add_parser('verify', help='Row count and latest seeded rows')
    p.add_argument('--table')
    p.add_argument('--limit', type=int, default=10)
    p.set_defaults(handler=cmd_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_level(args.log_level)
    settings = Settings.from_env()

    try:
        return args.handler(args, settings)
    except (InputError, FileNotFoundError) as e:
        logger.error(str(e))
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
