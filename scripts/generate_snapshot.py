"""
Synthetic Snapshot Export
Writes a JSON snapshot export and prints a sales/inventory summary for it
"""

import argparse
import json
from pathlib import Path

from retail_insights.analytics import AnalyticsEngine, AnalyticsRequest
from retail_insights.config.logging import configure_logging
from retail_insights.data.generators import SnapshotGenerator
from retail_insights.ingestion import load_snapshot_file

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic store snapshot")
    parser.add_argument("--products", type=int, default=40)
    parser.add_argument("--orders", type=int, default=400)
    parser.add_argument("--restocks", type=int, default=120)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--output", type=Path, default=OUTPUT_DIR / "snapshot.json")
    args = parser.parse_args()

    configure_logging()

    print("=" * 60)
    print("Synthetic Snapshot Export")
    print("=" * 60 + "\n")

    payload = SnapshotGenerator(seed=args.seed).generate_payload(args.products, args.orders, args.restocks)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)

    print(f"Output: {args.output}")
    for key, records in payload.items():
        print(f"   {key}: {len(records):,} records")

    engine = AnalyticsEngine()
    snapshot = load_snapshot_file(args.output, tz=engine.tz)

    for time_range in ("7d", "30d", "year"):
        sales = engine.sales_analytics(snapshot, AnalyticsRequest(time_range=time_range))
        print(
            f"\n[{time_range}] sales={sales.total_sales:,.2f} "
            f"orders={sales.total_orders} "
            f"change={sales.kpi_metrics.sales.percent_change}%"
        )

    inventory = engine.inventory_analytics(snapshot, AnalyticsRequest(time_range="30d"))
    print(
        f"\nInventory: {inventory.overview.total_products} products, "
        f"{inventory.overview.low_stock_items} low stock, "
        f"{inventory.overview.out_of_stock_items} out of stock"
    )


if __name__ == "__main__":
    main()
