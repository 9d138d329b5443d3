import logging
import xml.etree.ElementTree as ET
from typing import Callable, Optional, Tuple

from icd_catalog.core.registry import CatalogIndex
from icd_catalog.core.scl_document import SclDocument, attr_true, parse_uint
from icd_catalog.models.catalog_models import OptionalField, ReportDefinition, TriggerOption

logger = logging.getLogger(__name__)

Reporter = Callable[[str, str], None]

TRG_OPS_FLAGS: Tuple[Tuple[str, int], ...] = (
    ("dchg", TriggerOption.DATA_CHANGED),
    ("qchg", TriggerOption.QUALITY_CHANGED),
    ("dupd", TriggerOption.DATA_UPDATE),
    ("period", TriggerOption.INTEGRITY),
    ("gi", TriggerOption.GI),
)

OPT_FIELDS_FLAGS: Tuple[Tuple[str, int], ...] = (
    ("seqNum", OptionalField.SEQ_NUM),
    ("timeStamp", OptionalField.TIME_STAMP),
    ("reasonCode", OptionalField.REASON_FOR_INCLUSION),
    ("dataSet", OptionalField.DATA_SET),
    ("dataRef", OptionalField.DATA_REFERENCE),
    ("bufOvfl", OptionalField.BUFFER_OVERFLOW),
    ("entryID", OptionalField.ENTRY_ID),
    ("configRef", OptionalField.CONF_REV),
)


def flag_mask(elem: Optional[ET.Element], flags: Tuple[Tuple[str, int], ...]) -> int:
    if elem is None:
        return 0
    mask = 0
    for attr, bit in flags:
        if attr_true(elem.get(attr)):
            mask |= int(bit)
    return mask


class ReportExtractor:
    """Collects ReportControl blocks hosted by a logical node."""

    def __init__(self, doc: SclDocument, reports: CatalogIndex, report: Reporter):
        self._doc = doc
        self._reports = reports
        self._report = report

    def extract(self, ln: ET.Element, ld_inst: str, ln_name: str) -> int:
        added = 0
        for rc in self._doc.children(ln, "ReportControl"):
            definition = self.parse_report_control(rc, ld_inst, ln_name)
            if definition is None:
                continue
            self._reports.add(definition)
            added += 1
        return added

    def parse_report_control(self, rc: ET.Element, ld_inst: str, ln_name: str) -> Optional[ReportDefinition]:
        """
        Build a ReportDefinition from one ReportControl element.

        Numeric fields that are missing or not plain decimal numbers read as 0.
        bufTime is preferred; the legacy bufTm spelling is only consulted when
        bufTime is absent. Returns None when the name attribute is absent or a
        stored value is over-length; an empty name is kept.
        """
        name = rc.get("name")
        if name is None:
            logger.debug(f"{ld_inst}/{ln_name}: ReportControl without name skipped")
            return None
        if self._doc.rejected(rc, self._report):
            return None

        buf_time = rc.get("bufTime")
        if buf_time is None:
            buf_time = rc.get("bufTm")

        rpt_enabled = self._doc.child(rc, "RptEnabled")
        rpt_enabled_max = parse_uint(rpt_enabled.get("max")) if rpt_enabled is not None else 0

        return ReportDefinition(
            ld_inst=ld_inst,
            ln_name=ln_name,
            name=name,
            dataset=rc.get("datSet", ""),
            rpt_id=rc.get("rptID", ""),
            conf_rev=parse_uint(rc.get("confRev")),
            intg_pd=parse_uint(rc.get("intgPd")),
            buf_time=parse_uint(buf_time),
            rpt_enabled_max=rpt_enabled_max,
            trg_ops=flag_mask(self._doc.child(rc, "TrgOps"), TRG_OPS_FLAGS),
            opt_fields=flag_mask(self._doc.child(rc, "OptFields"), OPT_FIELDS_FLAGS),
            buffered=attr_true(rc.get("buffered"))
        )
