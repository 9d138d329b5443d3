"""
Exporters for a loaded ICD catalog (JSON snapshot, flat attribute CSV)
"""
import csv
import json
import os
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, Tuple

from icd_catalog.core.icd_catalog import IcdCatalog

ATTRIBUTE_CSV_HEADERS = ["object_type_id", "path", "fc", "btype", "type_id", "trg_ops"]


def catalog_to_dict(catalog: IcdCatalog) -> Dict[str, Any]:
    """JSON-ready snapshot of everything the catalog holds."""
    datasets = []
    for ds in catalog.datasets():
        datasets.append({
            'ld_inst': ds.ld_inst,
            'ln_name': ds.ln_name,
            'name': ds.name,
            'members': [asdict(m) for m in ds.members],
        })

    return {
        'source': catalog.source,
        'exported_at': datetime.now().isoformat(timespec='seconds'),
        'selection': asdict(catalog.selection()),
        'summary': catalog.summary(),
        'objects': [asdict(o) for o in catalog.objects()],
        'attributes': [asdict(a) for a in catalog.attributes()],
        'node_instances': [asdict(n) for n in catalog.node_instances()],
        'datasets': datasets,
        'reports': [asdict(r) for r in catalog.reports()],
        'diagnostics': [
            {'level': d.level, 'source': d.source, 'message': d.message}
            for d in catalog.diagnostics()
        ],
    }


def export_catalog_json(catalog: IcdCatalog, filepath: str) -> Tuple[bool, str]:
    """
    Write the catalog snapshot as JSON.

    Returns:
        (success, error_message)
    """
    if not catalog.source:
        return False, "No SCL document loaded"

    try:
        data = catalog_to_dict(catalog)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        return True, f"Exported catalog of '{data['selection']['device_name']}' to {os.path.basename(filepath)}"
    except Exception as e:
        return False, str(e)


def export_attributes_csv(catalog: IcdCatalog, filepath: str) -> Tuple[bool, str]:
    """
    Export the flattened attribute table, one row per (DOType, path).

    Returns:
        (success, error_message)
    """
    if not catalog.source:
        return False, "No SCL document loaded"

    try:
        attributes = catalog.attributes()
        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(ATTRIBUTE_CSV_HEADERS)
            for attr in attributes:
                writer.writerow([
                    attr.object_type_id,
                    attr.path,
                    attr.fc,
                    attr.btype,
                    attr.type_id,
                    attr.trg_ops,
                ])
        return True, f"Exported {len(attributes)} attribute(s)"
    except Exception as e:
        return False, str(e)
