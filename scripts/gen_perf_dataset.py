#!/usr/bin/env python3
"""Dataset generation script for performance testing.

Generates a synthetic order sheet and the matching article catalog:
- order.xlsx: title row, blank row, header row (L1..L4, Description, Q.ty,
  Unit price, Discounted unit price, Total price), then data rows
- catalog.xlsx: header row (Articolo, Descrizione, Prezzo listino), then one
  row per article

Part of the order is left out of the catalog and some rows carry text
prices/quantities or an "included" price, so a run exercises every pricing
state and the not-found path.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

ORDER_HEADERS = [
    "L1", "L2", "L3", "L4", "Description", "Q.ty", "Unit price", "Discounted unit price", "Total price",
]
CATALOG_HEADERS = ["Articolo", "Descrizione", "Prezzo listino"]
FAMILIES = list("ABCDEFGHJKLMNPRSTUVWXZ")


def generate_articles(rows: int, seed: int = 42) -> pd.DataFrame:
    """Unique article segments, description and list price for `rows` articles.

    Roughly one article in four carries an L4 segment (8-character code).
    """
    rng = np.random.default_rng(seed)
    seen: set[str] = set()
    records: list[dict[str, object]] = []
    while len(records) < rows:
        l1 = str(rng.choice(FAMILIES))
        l2 = int(rng.integers(1, 1000))
        l3 = int(rng.integers(1, 100))
        l4 = int(rng.integers(1, 100)) if rng.random() < 0.25 else None
        code = f"{l1}{l2:03d}{l3:02d}" + (f"{l4:02d}" if l4 is not None else "")
        if code in seen:
            continue
        seen.add(code)
        records.append(
            {
                "code": code,
                "l1": l1,
                "l2": str(l2),
                "l3": str(l3),
                "l4": str(l4) if l4 is not None else "",
                "description": f"Article {code} type {len(records) % 37}",
                "price": round(float(rng.uniform(1, 2500)), 2),
            }
        )
    return pd.DataFrame.from_records(records)


def _order_frame(articles: pd.DataFrame, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed + 1)
    rows: list[list[object]] = []
    for article in articles.itertuples(index=False):
        roll = rng.random()
        quantity: object = int(rng.integers(1, 50))
        price: object = article.price
        discounted: object = None
        if roll < 0.05:
            price = "incluso"
        elif roll < 0.10:
            quantity = None
        elif roll < 0.20:
            price = f"{article.price:.2f}".replace(".", ",")
            quantity = f"{quantity} pz"
        elif roll < 0.35:
            discounted = round(article.price * 0.8, 2)
        description = article.description if rng.random() > 0.02 else f"{article.description} (rev)"
        rows.append([article.l1, article.l2, article.l3, article.l4, description, quantity, price, discounted, None])
    return pd.DataFrame(rows, columns=ORDER_HEADERS)


def create_dataset(
    output_dir: Path,
    rows: int,
    *,
    title: str = "Performance Test Offer",
    missing_ratio: float = 0.02,
    seed: int = 42,
) -> tuple[Path, Path]:
    """Write order.xlsx and catalog.xlsx into `output_dir`; returns both paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    articles = generate_articles(rows, seed)
    order = _order_frame(articles, seed)
    # the first `missing` articles are left out of the catalog
    missing = int(rows * missing_ratio)
    catalog = articles.iloc[missing:][["code", "description", "price"]].copy()
    catalog.columns = CATALOG_HEADERS

    order_path = output_dir / "order.xlsx"
    catalog_path = output_dir / "catalog.xlsx"

    sheet_data: list[list[object]] = [[title] + [None] * (len(ORDER_HEADERS) - 1), [None] * len(ORDER_HEADERS)]
    sheet_data.append(ORDER_HEADERS)
    sheet_data.extend(order.astype(object).where(order.notna(), None).values.tolist())
    with pd.ExcelWriter(order_path, engine="openpyxl") as writer:
        pd.DataFrame(sheet_data).to_excel(writer, sheet_name="Offer", header=False, index=False)
    with pd.ExcelWriter(catalog_path, engine="openpyxl") as writer:
        catalog.to_excel(writer, sheet_name="Database", index=False)

    print(f"Created order file: {order_path} ({len(order):,} rows)")
    print(f"Created catalog file: {catalog_path} ({len(catalog):,} articles)")
    print(f"  Order rows missing from catalog: {missing:,}")
    return order_path, catalog_path


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic order/catalog pair for performance testing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate 20k order rows into ./perf_data
  %(prog)s perf_data

  # Custom size, 5%% of the order missing from the catalog
  %(prog)s perf_data --rows 50000 --missing-ratio 0.05 --seed 123
        """,
    )
    parser.add_argument("output_dir", type=Path, help="Directory receiving order.xlsx and catalog.xlsx")
    parser.add_argument("--rows", type=int, default=20_000, help="Number of order rows (default: 20,000)")
    parser.add_argument("--title", default="Performance Test Offer", help="Title written above the header")
    parser.add_argument(
        "--missing-ratio",
        type=float,
        default=0.02,
        help="Share of order rows left out of the catalog (default: 0.02)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be generated without creating files")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.missing_ratio < 1:
        print("Error: --missing-ratio must be in [0, 1)", file=sys.stderr)
        return 1

    print("Dataset generation plan:")
    print(f"  Output directory: {args.output_dir}")
    print(f"  Order rows: {args.rows:,}")
    print(f"  Missing ratio: {args.missing_ratio:.2%}")
    print(f"  Random seed: {args.seed}")

    if args.dry_run:
        print("\n[DRY RUN] Would generate files but not creating them.")
        return 0

    try:
        print("\nGenerating dataset...")
        create_dataset(
            args.output_dir,
            args.rows,
            title=args.title,
            missing_ratio=args.missing_ratio,
            seed=args.seed,
        )
        print("\nDataset generation completed successfully!")
        return 0
    except (OSError, ValueError) as e:
        print(f"\nError generating dataset: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
