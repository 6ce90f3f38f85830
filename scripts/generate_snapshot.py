"""
Synthetic Inventory Snapshot Generator
Writes a reporting-API-shaped snapshot as JSON and Parquet
"""

import argparse
from pathlib import Path

from stock_insights.data import InventorySnapshotGenerator

OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic inventory snapshot")
    parser.add_argument("--items", type=int, default=500, help="Number of titles (default: 500)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--output", type=str, default=str(OUTPUT_DIR), help="Output directory")
    args = parser.parse_args()

    print("=" * 60)
    print("📚 Inventory Snapshot Generator")
    print("=" * 60 + "\n")

    generator = InventorySnapshotGenerator(seed=args.seed)
    records = generator.generate(args.items)
    paths = generator.save(records, args.output)

    for kind, path in paths.items():
        size = path.stat().st_size / 1024
        print(f"   📄 {kind}: {path} ({size:.1f} KB)")

    print(f"\n📊 Total: {len(records):,} titles")


if __name__ == "__main__":
    main()
