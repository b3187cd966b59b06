#!/usr/bin/env python3

import argparse
import io
import json
import logging
import sys
import time
from typing import Dict, List

from product.catalog import ImportOptions, ProductCatalog, WallpaperDimensionPolicy
from product.product_errors import CatalogError
from product.product_importer import (
    import_content_file,
    import_country_file,
    import_device_file,
)
from product.product_matcher import matching_clause
from product.product_search import QueryResult, execute_query_file

__version__ = "0.1.0"

# Stand-in access token until an authentication service exists
DEFAULT_ACCESS_TOKEN = "mas-local-admin"


def show_search_statistics(catalog: ProductCatalog, results: List[QueryResult]):
    """Display which search clause produced each query's matches."""
    sys.stderr.write("=== Search Statistics ===\n")
    sys.stderr.write(f"Countries: {len(catalog.get_countries())}\n")
    sys.stderr.write(f"Devices: {len(catalog.get_devices())}\n")
    sys.stderr.write(f"Content items: {catalog.get_number_content_items()}\n")

    for i, result in enumerate(results, start=1):
        clause_counts: Dict[str, int] = {}
        for item in result.matches:
            clause = matching_clause(item, result.criteria)
            clause_counts[clause] = clause_counts.get(clause, 0) + 1
        sys.stderr.write(
            f"\nQuery #{i} [{result.criteria.raw_query}]: {len(result.matches)} matches\n"
        )
        for clause, count in clause_counts.items():
            sys.stderr.write(f"  matched by {clause}: {count}\n")

    sys.stderr.write("=========================\n\n")


def main():
    parser = argparse.ArgumentParser(
        description="Load the Mobile Application Store catalog and run content searches."
    )
    parser.add_argument("countries_file", nargs="?", help="Path to countries CSV file")
    parser.add_argument("devices_file", nargs="?", help="Path to devices CSV file")
    parser.add_argument("content_file", nargs="?", help="Path to content CSV file")
    parser.add_argument("query_file", nargs="?", help="Path to search query CSV file")
    parser.add_argument(
        "--token",
        default=DEFAULT_ACCESS_TOKEN,
        help="Access token used for the restricted catalog imports",
    )
    parser.add_argument(
        "--wallpaper-dimensions",
        choices=[policy.value for policy in WallpaperDimensionPolicy],
        default=WallpaperDimensionPolicy.FIXED.value,
        help="Take wallpaper pixel sizes from the content file (parsed) or use 1920x1080 (fixed)",
    )
    parser.add_argument(
        "--pretty-print",
        action="store_true",
        help="Emit all results in a single pretty-printed JSON array",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress per-query summaries",
    )
    parser.add_argument(
        "--show-stats",
        action="store_true",
        help="Show which search clause matched each result",
    )
    parser.add_argument(
        "--show-timing",
        action="store_true",
        help="Show detailed timing information",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Write output to this file (UTF-8, LF line endings). If omitted, output goes to stdout.",
    )

    args = parser.parse_args()

    if args.version:
        print(f"mas: {__version__}")
        sys.exit(0)

    if not all(
        (args.countries_file, args.devices_file, args.content_file, args.query_file)
    ):
        parser.error(
            "the following arguments are required: "
            "countries_file, devices_file, content_file, query_file"
        )

    logging.basicConfig(
        level=getattr(logging, args.log_level), format="[%(levelname)s] %(message)s"
    )
    logger = logging.getLogger("mas")

    options = ImportOptions(wallpaper_dimensions=args.wallpaper_dimensions)
    catalog = ProductCatalog()

    try:
        load_start = time.time()
        logger.info("Loading catalog")
        import_country_file(catalog, args.token, args.countries_file, options)
        import_device_file(catalog, args.token, args.devices_file, options)
        import_content_file(catalog, args.token, args.content_file, options)
        load_time = time.time() - load_start

        if args.show_timing:
            sys.stderr.write(f"Catalog loading time: {load_time:.3f}s\n")

        search_start = time.time()
        results = execute_query_file(catalog, args.query_file, options)
        search_time = time.time() - search_start
    except CatalogError as e:
        logger.error("%s", e)
        sys.exit(1)

    if args.show_timing:
        sys.stderr.write(f"Search time: {search_time:.3f}s\n")

    if not args.quiet:
        for i, result in enumerate(results, start=1):
            sys.stderr.write(
                f"Query #{i} [{result.criteria.raw_query}]: "
                f"{len(result.matches)} content items match\n"
            )

    if args.show_stats:
        show_search_statistics(catalog, results)

    output = [result.to_dict() for result in results]

    # Output results
    if args.output:
        output_stream = open(args.output, "w", encoding="utf-8", newline="\n")
    else:
        # Ensure UTF-8 encoding for stdout
        output_stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")

    try:
        if args.pretty_print:
            json.dump(output, output_stream, indent=2)
            output_stream.write("\n")
        else:
            for item in output:
                output_stream.write(json.dumps(item))
                output_stream.write("\n")
    finally:
        if args.output:
            output_stream.close()
        else:
            output_stream.flush()
            output_stream.detach()


if __name__ == "__main__":
    main()
