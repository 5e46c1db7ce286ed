"""
Run a coverage analysis over fleet and product CSV files, without a database.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from app.config import get_coverage_settings
from app.services.coverage_orchestrator import AnalysisRequest, analyze
from app.services.export_service import export_coverage, export_policy
from app.services.snapshot_loader import SnapshotLoader
from app.validators.snapshot_validator import SnapshotShapeError
from policy.rules import AgeSegment


def main() -> int:
    parser = argparse.ArgumentParser(description="Cross-reference a fleet snapshot against a product catalog.")
    parser.add_argument("--fleet", required=True, type=Path, help="Fleet registry CSV.")
    parser.add_argument("--products", required=True, type=Path, help="Product catalog CSV.")
    parser.add_argument("--dimension1", default=None, help="Restrict products to one dimension1 value.")
    parser.add_argument("--exclude-suppliers", action="store_true", help="Drop the configured supplier codes.")
    parser.add_argument(
        "--segment",
        choices=[segment.value for segment in AgeSegment],
        default=None,
        help="Keep policy findings of one age segment.",
    )
    parser.add_argument("--out-dir", type=Path, default=None, help="Write coverage and policy CSVs here.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    loader = SnapshotLoader()
    try:
        fleet = loader.load_fleet_csv(args.fleet.read_bytes())
        products = loader.load_products_csv(args.products.read_bytes())
    except SnapshotShapeError as exc:
        print(json.dumps(exc.to_dict(), indent=2))
        return 2

    request = AnalysisRequest(
        dimension1=args.dimension1,
        exclude_suppliers=args.exclude_suppliers,
        policy_segment=AgeSegment(args.segment) if args.segment else None,
    )
    result = analyze(fleet.records, products.records, request, settings=get_coverage_settings())

    if args.out_dir is not None:
        args.out_dir.mkdir(parents=True, exist_ok=True)
        for export in (
            export_coverage(result.pivot, dimension1=args.dimension1),
            export_policy(result.findings, dimension1=args.dimension1),
        ):
            (args.out_dir / export.filename).write_bytes(export.to_csv_bytes())

    payload = {
        "stats": result.stats.to_dict(),
        "fleet_rows_failed": fleet.rows_failed,
        "product_rows_failed": products.rows_failed,
        "excluded_products": result.excluded_products,
        "findings_by_status": {
            status: sum(1 for f in result.findings if f.status.value == status)
            for status in ("CRITICAL", "WARNING", "OK")
        },
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
