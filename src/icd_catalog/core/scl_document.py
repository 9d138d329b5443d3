import xml.etree.ElementTree as ET
from typing import Callable, Iterator, Optional
import os
import logging
import tempfile

from icd_catalog.utils.archive_utils import ArchiveExtractor

logger = logging.getLogger(__name__)


def local_name(elem: ET.Element) -> str:
    """Tag without the '{namespace}' part."""
    return elem.tag.split('}')[-1] if isinstance(elem.tag, str) else ""


def attr_true(value: Optional[str]) -> bool:
    """SCL boolean attribute: only 'true' (any case) or '1' count as set."""
    if value is None:
        return False
    return value.lower() == "true" or value == "1"


def parse_uint(value: Optional[str], default: int = 0) -> int:
    """Plain non-negative decimal integer, default when absent or malformed."""
    if value is None or not (value.isascii() and value.isdigit()):
        return default
    return int(value, 10)


# Attribute values copied into the catalog, per element. Only these are
# subject to the length limit; desc and vendor attributes are never read.
STORED_ATTRIBUTES = {
    "LNodeType": ("id",),
    "DOType": ("id", "cdc"),
    "DAType": ("id",),
    "EnumType": ("id",),
    "DO": ("name", "type"),
    "SDO": ("name", "type"),
    "DA": ("name", "bType", "type", "fc"),
    "BDA": ("name", "bType", "type", "fc"),
    "LDevice": ("inst",),
    "LN0": ("prefix", "lnClass", "inst", "lnType"),
    "LN": ("prefix", "lnClass", "inst", "lnType"),
    "DataSet": ("name",),
    "FCDA": ("ldInst", "prefix", "lnClass", "lnInst", "doName", "daName", "fc"),
    "ReportControl": ("name", "datSet", "rptID"),
}


class SclDocument:
    """
    Parsed SCL/ICD/CID element tree.
    Element lookups compare local names so files with and without the
    SCL namespace are handled the same way.
    """

    def __init__(self, root: ET.Element, source: str = "", max_text_length: Optional[int] = None):
        self.root = root
        self.source = source
        self.max_text_length = max_text_length

    def children(self, elem: ET.Element, *tags: str) -> Iterator[ET.Element]:
        """Direct child elements in document order, optionally filtered by local name."""
        for child in elem:
            if not isinstance(child.tag, str):
                continue
            if not tags or local_name(child) in tags:
                yield child

    def child(self, elem: ET.Element, tag: str) -> Optional[ET.Element]:
        for found in self.children(elem, tag):
            return found
        return None

    def templates(self) -> Optional[ET.Element]:
        """The DataTypeTemplates section, or None when the document has none."""
        return self.child(self.root, "DataTypeTemplates")

    def overlong_attribute(self, elem: ET.Element) -> Optional[str]:
        """Name of the first stored attribute whose value exceeds max_text_length, if any."""
        if self.max_text_length is None:
            return None
        for name in STORED_ATTRIBUTES.get(local_name(elem), ()):
            value = elem.get(name)
            if value is not None and len(value) > self.max_text_length:
                return name
        return None

    def rejected(self, elem: ET.Element, report: Callable[[str, str], None]) -> bool:
        """
        Over-length values are rejected, never truncated: reports a warning
        and returns True when elem (and its subtree) must be skipped.
        """
        attr = self.overlong_attribute(elem)
        if attr is None:
            return False
        report("WARNING", f"{self.describe(elem)}: attribute '{attr}' exceeds "
                          f"{self.max_text_length} characters, element skipped.")
        return True

    def describe(self, elem: ET.Element) -> str:
        name = elem.get("name") or elem.get("id") or elem.get("inst") or ""
        return f"{local_name(elem)}[{name}]" if name else local_name(elem)


def _parse_file(path: str) -> Optional[ET.Element]:
    try:
        return ET.parse(path).getroot()
    except ET.ParseError as e:
        logger.error(f"Failed to parse SCL file {path}: {e}")
    except OSError as e:
        logger.error(f"Failed to read SCL file {path}: {e}")
    return None


def _parse_archive(path: str) -> Optional[ET.Element]:
    try:
        member = ArchiveExtractor.pick_scl_member(ArchiveExtractor.list_files(path))
        if member is None:
            logger.error(f"No SCL document found in archive {path}")
            return None
        with tempfile.TemporaryDirectory(prefix="icd_catalog_") as tmp_dir:
            extracted = ArchiveExtractor.extract_file(path, member, tmp_dir)
            logger.info(f"Reading {member} from archive {os.path.basename(path)}")
            return _parse_file(extracted)
    except Exception as e:
        logger.error(f"Failed to open archive {path}: {e}")
        return None


def read_document(path: str, max_text_length: Optional[int] = None) -> Optional[SclDocument]:
    """
    Read an SCL document from a file or a supported archive.
    Returns None when nothing decodable could be read.
    """
    if not os.path.exists(path):
        logger.error(f"SCL file not found: {path}")
        return None

    if ArchiveExtractor.is_archive(path):
        root = _parse_archive(path)
    else:
        root = _parse_file(path)

    if root is None:
        return None

    if local_name(root) != "SCL":
        logger.warning(f"Root element of {path} is <{local_name(root)}>, expected <SCL>")

    return SclDocument(root, source=path, max_text_length=max_text_length)
