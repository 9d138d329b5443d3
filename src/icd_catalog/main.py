"""
Command line entry point: load an SCL/ICD/CID document, print a summary and
optionally export the resulting catalog.
"""
import argparse
import logging
import sys
from typing import List, Optional

from icd_catalog.core.config import ResolverConfig, load_config
from icd_catalog.core.exporters import export_attributes_csv, export_catalog_json
from icd_catalog.core.icd_catalog import IcdCatalog

log = logging.getLogger("icd_catalog")

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_LOAD_FAILED = 3
EXIT_EXPORT_FAILED = 4


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(prog="icd-catalog",
                        description="Resolve an IEC 61850 SCL document into a flat catalog")
    p.add_argument("path", help="SCL/ICD/CID file, or a .zip/.tar/.7z archive containing one")
    p.add_argument("--ied", help="IED to select (default: first named IED)")
    p.add_argument("--ap", help="AccessPoint to select inside the IED")
    p.add_argument("--config", help="JSON resolver config file")
    p.add_argument("--json", dest="json_out", help="Write the catalog as JSON to this file")
    p.add_argument("--csv", dest="csv_out", help="Write the flat attribute table as CSV to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = ResolverConfig()
    if args.config:
        try:
            config = load_config(args.config)
        except (OSError, ValueError) as e:
            log.error(f"Invalid config {args.config}: {e}")
            return EXIT_USAGE

    catalog = IcdCatalog(config)
    if args.ied:
        catalog.set_active_selection(args.ied, args.ap)
    elif args.ap:
        log.error("--ap requires --ied")
        return EXIT_USAGE

    if not catalog.load(args.path):
        log.error(f"Failed to load {args.path}")
        return EXIT_LOAD_FAILED

    s = catalog.summary()
    print(f"{s['device'] or '<none>'}/{s['endpoint'] or '<none>'}: "
          f"{s['objects']} objects, {s['attributes']} attributes, {s['node_instances']} LNs, "
          f"{s['datasets']} datasets, {s['reports']} reports, {s['diagnostics']} diagnostics")

    status = EXIT_OK
    for out_path, exporter in ((args.json_out, export_catalog_json), (args.csv_out, export_attributes_csv)):
        if not out_path:
            continue
        success, message = exporter(catalog, out_path)
        if success:
            log.info(message)
        else:
            log.error(f"Export to {out_path} failed: {message}")
            status = EXIT_EXPORT_FAILED
    return status


if __name__ == '__main__':
    sys.exit(main())
