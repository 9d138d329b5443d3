import logging
import xml.etree.ElementTree as ET
from typing import Callable, Optional

from icd_catalog.core.dataset_extractor import DatasetExtractor
from icd_catalog.core.registry import CatalogIndex
from icd_catalog.core.report_extractor import ReportExtractor
from icd_catalog.core.scl_document import SclDocument, local_name
from icd_catalog.models.catalog_models import ROOT_NODE_NAME, NodeClassEntry, NodeInstance

logger = logging.getLogger(__name__)

Reporter = Callable[[str, str], None]


def compose_ln_name(ln: ET.Element) -> str:
    """Composed logical node name: LLN0 for the root node, else prefix+lnClass+inst."""
    if local_name(ln) == "LN0":
        return ROOT_NODE_NAME
    return f"{ln.get('prefix', '')}{ln.get('lnClass', '')}{ln.get('inst', '')}"


def node_instance_index() -> CatalogIndex:
    """Node instances keyed by (ldInst, composed name), grouped by their address parts."""
    return CatalogIndex(
        key=lambda n: (n.ld_inst, n.ln_name),
        unique=False,
        group=lambda n: (n.ld_inst, n.prefix, n.ln_class, n.ln_inst)
    )


def find_node_type_by_name(instances: CatalogIndex, ld_inst: str, ln_name: str) -> Optional[str]:
    """
    Node type id of the first instance named ln_name.
    An empty ld_inst matches any logical device.
    """
    if ld_inst:
        found = instances.get((ld_inst, ln_name))
        return found.ln_type if found is not None else None
    for node in instances:
        if node.ln_name == ln_name:
            return node.ln_type
    return None


def find_node_type_by_parts(instances: CatalogIndex, ld_inst: str, prefix: str,
                            ln_class: str, ln_inst: str) -> Optional[str]:
    """
    Node type id of the first instance with the given address parts.

    ld_inst: empty matches any logical device.
    prefix, ln_inst: always compared exactly, so an empty value only matches
    an instance where that part is empty too.
    ln_class: empty matches any class.
    """
    prefix = prefix or ""
    ln_inst = ln_inst or ""
    if ld_inst and ln_class:
        candidates = instances.in_group((ld_inst, prefix, ln_class, ln_inst))
        return candidates[0].ln_type if candidates else None

    for node in instances:
        if ld_inst and node.ld_inst != ld_inst:
            continue
        if node.prefix != prefix or node.ln_inst != ln_inst:
            continue
        if ln_class and node.ln_class != ln_class:
            continue
        return node.ln_type
    return None


class InstanceCatalogBuilder:
    """
    Walks AccessPoint -> Server -> LDevice -> LN0/LN of the selected access
    point and registers every logical node it finds, together with the
    DataSets and ReportControls each node hosts.
    Other access points of the IED are never visited.
    """

    def __init__(self, doc: SclDocument, instances: CatalogIndex, node_classes: CatalogIndex,
                 datasets: DatasetExtractor, reports: ReportExtractor, report: Reporter):
        self._doc = doc
        self._instances = instances
        self._node_classes = node_classes
        self._datasets = datasets
        self._reports = reports
        self._report = report

    def build(self, endpoint: Optional[ET.Element]) -> int:
        """Register the nodes under endpoint. Returns the number of node instances added."""
        if endpoint is None:
            return 0

        count = 0
        for server in self._doc.children(endpoint, "Server"):
            for ld in self._doc.children(server, "LDevice"):
                if self._doc.rejected(ld, self._report):
                    continue
                ld_inst = ld.get("inst", "")
                for ln in self._doc.children(ld, "LN0", "LN"):
                    if self._doc.rejected(ln, self._report):
                        continue
                    self._add_node(ln, ld_inst)
                    count += 1

        logger.debug(f"Registered {count} logical node instances")
        return count

    def _add_node(self, ln: ET.Element, ld_inst: str):
        is_ln0 = local_name(ln) == "LN0"
        ln_name = compose_ln_name(ln)
        ln_class = ln.get("lnClass", "")

        self._instances.add(NodeInstance(
            ld_inst=ld_inst,
            prefix=ln.get("prefix", ""),
            ln_class=ln_class,
            ln_inst=ln.get("inst", ""),
            ln_type=ln.get("lnType", ""),
            ln_name=ln_name,
            is_ln0=is_ln0
        ))
        # first wins, an empty class is recorded as it appears
        self._node_classes.add(NodeClassEntry(ln_name=ln_name, ln_class=ln_class))

        self._datasets.extract(ln, ld_inst, ln_name)
        self._reports.extract(ln, ld_inst, ln_name)
