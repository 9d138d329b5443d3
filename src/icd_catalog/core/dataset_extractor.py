import logging
import xml.etree.ElementTree as ET
from typing import Callable, List

from icd_catalog.core.registry import CatalogIndex
from icd_catalog.core.scl_document import SclDocument
from icd_catalog.models.catalog_models import DatasetDefinition, DatasetMember

logger = logging.getLogger(__name__)

Reporter = Callable[[str, str], None]


class DatasetExtractor:
    """
    Collects DataSet definitions hosted by a logical node.
    FCDA attributes are copied as they appear; an empty field stays empty
    (it is an implicit reference the consumer resolves).
    """

    def __init__(self, doc: SclDocument, datasets: CatalogIndex, report: Reporter):
        self._doc = doc
        self._datasets = datasets
        self._report = report

    def extract(self, ln: ET.Element, ld_inst: str, ln_name: str) -> int:
        """Register every named DataSet under ln. Returns the number added."""
        added = 0
        for ds in self._doc.children(ln, "DataSet"):
            ds_name = ds.get("name")
            if not ds_name:
                logger.debug(f"{ld_inst}/{ln_name}: DataSet without name skipped")
                continue
            if self._doc.rejected(ds, self._report):
                continue

            definition = DatasetDefinition(
                ld_inst=ld_inst,
                ln_name=ln_name,
                name=ds_name,
                members=tuple(self._members(ds))
            )
            if not self._datasets.add(definition):
                self._report("WARNING", f"Duplicate DataSet '{ds_name}' in {ld_inst}/{ln_name} ignored.")
                continue
            added += 1
        return added

    def _members(self, ds: ET.Element) -> List[DatasetMember]:
        members = []
        for fcda in self._doc.children(ds, "FCDA"):
            if self._doc.rejected(fcda, self._report):
                continue
            members.append(DatasetMember(
                ld_inst=fcda.get("ldInst", ""),
                prefix=fcda.get("prefix", ""),
                ln_class=fcda.get("lnClass", ""),
                ln_inst=fcda.get("lnInst", ""),
                do_name=fcda.get("doName", ""),
                da_name=fcda.get("daName", ""),
                fc=fcda.get("fc", "")
            ))
        return members
