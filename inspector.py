"""Chain Inspector command line.

Examples:
  chain-inspector load --db ./data --blocks 50
  chain-inspector scan-errors --db ./data
  chain-inspector scan-errors --db ./data --json
  chain-inspector compare --db1 ./nodes/node1/blockchain.db --db2 ./nodes/node2/blockchain.db
  chain-inspector view --db ./data 5
  chain-inspector stats --db ./data
"""

import argparse
import logging
import sys

import config
from blockchain_core import BlockStore, StoreError
from compare_nodes import compare_nodes
from initialize import load_sample_data
from report import output_comparison_result, output_scan_result
from setup_network import setup_environment
from verify_integrity import STATUS_HEALTHY, scan_errors
from view_blockchain import chain_stats, format_stats, view_block

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_ANOMALIES = 2


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def run_load(args):
    load_sample_data(args.db, args.blocks)
    return EXIT_OK


def run_scan(args):
    with BlockStore(args.db) as store:
        result = scan_errors(store, args.db, overscan=args.overscan)
    output_scan_result(result, args.json)
    return EXIT_OK if result.status == STATUS_HEALTHY else EXIT_ANOMALIES


def run_compare(args):
    with BlockStore(args.db1) as store1, BlockStore(args.db2) as store2:
        result = compare_nodes(store1, store2, args.db1, args.db2)
    output_comparison_result(result, args.json)
    return EXIT_OK if result.synchronized else EXIT_ANOMALIES


def run_view(args):
    with BlockStore(args.db) as store:
        print(view_block(store, args.height))
    return EXIT_OK


def run_stats(args):
    with BlockStore(args.db) as store:
        print(format_stats(chain_stats(store, args.overscan)))
    return EXIT_OK


def run_setup_network(args):
    setup_environment(args.nodes_dir, args.blocks)
    return EXIT_OK


def run_version(args):
    print(f"Chain Inspector v{config.VERSION}")
    return EXIT_OK


def build_parser():
    parser = argparse.ArgumentParser(
        prog="chain-inspector",
        description="Inspect and compare hash-chained block databases.",
        epilog=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    sub = parser.add_subparsers(dest="command")

    load = sub.add_parser("load", help="Load sample blockchain data")
    load.add_argument("--db", default=config.DB_PATH, help="Path to the chain database")
    load.add_argument("--blocks", type=int, default=config.SAMPLE_BLOCKS, help="Number of blocks to load")
    load.set_defaults(func=run_load)

    scan = sub.add_parser("scan-errors", help="Scan a chain for errors")
    scan.add_argument("--db", default=config.DB_PATH, help="Path to the chain database")
    scan.add_argument("--json", action="store_true", help="Output in JSON format")
    scan.add_argument("--overscan", type=int, default=config.SCAN_OVERSCAN,
                      help="Heights checked past the last good block")
    scan.set_defaults(func=run_scan)

    compare = sub.add_parser("compare", help="Compare two node databases")
    compare.add_argument("--db1", default=config.NODE1_PATH, help="Path to the first database")
    compare.add_argument("--db2", default=config.NODE2_PATH, help="Path to the second database")
    compare.add_argument("--json", action="store_true", help="Output in JSON format")
    compare.set_defaults(func=run_compare)

    view = sub.add_parser("view", help="View a single block")
    view.add_argument("--db", default=config.DB_PATH, help="Path to the chain database")
    view.add_argument("height", type=int)
    view.set_defaults(func=run_view)

    stats = sub.add_parser("stats", help="Chain statistics, gaps and duplicates")
    stats.add_argument("--db", default=config.DB_PATH, help="Path to the chain database")
    stats.add_argument("--overscan", type=int, default=config.SCAN_OVERSCAN)
    stats.set_defaults(func=run_stats)

    network = sub.add_parser("setup-network", help="Create demo node databases")
    network.add_argument("--nodes-dir", default=config.NODES_DIR)
    network.add_argument("--blocks", type=int, default=config.SAMPLE_BLOCKS)
    network.set_defaults(func=run_setup_network)

    version = sub.add_parser("version", help="Show version")
    version.set_defaults(func=run_version)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return EXIT_FAILURE

    try:
        return args.func(args)
    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
