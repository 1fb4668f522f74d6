#!/usr/bin/env python3
"""
Notion to Hugo Markdown Export Tool - Main CLI Entry Point

This script provides the command-line interface for exporting Notion pages,
either live through the Notion API or from JSON dumps, into Hugo content
files with downloaded media and Hugo shortcodes.
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict

from config_loader import ConfigLoader, SOURCE_MODES
from converters import ConversionError
from exporters import MarkdownExporter
from fetchers import FetcherError, FetcherFactory
from logger import log_config, log_section, setup_logging

# Version
__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = 'config.yaml'


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Export Notion pages to Hugo Markdown content files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export the pages listed in config.yaml
  python notion_export.py --config config.yaml

  # Export a single page through the API
  python notion_export.py --page-id 0123456789abcdef0123456789abcdef

  # Convert a JSON dump without downloading media
  python notion_export.py --input page.json --no-download

  # Render bookmarks and callouts as Hugo shortcodes
  python notion_export.py --extended-syntax hugo

  # Print the Markdown instead of writing files
  python notion_export.py --input page.json --dry-run

  # Verbose logging
  python notion_export.py -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help=f'Path to configuration YAML file (default: {DEFAULT_CONFIG_PATH} when present)'
    )

    parser.add_argument(
        '--mode',
        choices=list(SOURCE_MODES),
        default=None,
        help='Page source - Notion API or JSON dumps (default: from config, else api)'
    )

    parser.add_argument(
        '--page-id',
        action='append',
        help='Notion page ID to export (repeatable)'
    )

    parser.add_argument(
        '--input',
        action='append',
        help='JSON dump of a page to convert (repeatable, implies --mode json)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Directory the Markdown files are written to'
    )

    parser.add_argument(
        '--extended-syntax',
        metavar='TARGET',
        help='Enable extended syntax blocks (bookmark, callout) for TARGET, e.g. hugo'
    )

    parser.add_argument(
        '--no-download',
        action='store_true',
        help='Keep remote media URLs instead of downloading them'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Print the Markdown to stdout instead of writing files (media is not downloaded)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    return parser


def load_configuration(args: argparse.Namespace) -> Dict[str, Any]:
    """Load the config file (optional unless given explicitly) and apply CLI overrides."""
    config_path = args.config
    if config_path is None and os.path.exists(DEFAULT_CONFIG_PATH):
        config_path = DEFAULT_CONFIG_PATH

    config = ConfigLoader.load(config_path) if config_path else {}
    config = ConfigLoader.merge_with_args(config, args)
    ConfigLoader.validate(config)
    return config


def run_export(config: Dict[str, Any], logger: logging.Logger) -> int:
    """Execute the export pipeline."""
    fetcher = FetcherFactory.create_fetcher(config, logger)
    exporter = MarkdownExporter(config, logger=logger)

    if exporter.dry_run:
        for source in fetcher.list_sources():
            page = fetcher.fetch_page(source)
            _, document = exporter.export_page(page)
            print(f"<!-- {source} -->")
            print(document)
        return 0

    stats = exporter.export_pages(fetcher)
    if stats['pages_failed'] > 0:
        logger.warning(f"Export completed with {stats['pages_failed']} failed pages")
        return 1

    logger.info("Export completed successfully")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        logger = setup_logging(verbosity=args.verbose, log_file=args.log_file)

        log_section("Notion to Hugo Markdown Export")
        logger.info(f"Version: {__version__}")

        config = load_configuration(args)

        # Reconfigure logging with config file settings
        logging_config = config.get('logging', {})
        logger = setup_logging(
            verbosity=args.verbose,
            log_file=logging_config.get('file'),
            level=logging_config.get('level'),
        )
        log_config(config)

        return run_export(config, logger)

    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except (FetcherError, ConversionError) as e:
        print(f"ERROR: Export failed: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nExport interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"ERROR: Unexpected error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
