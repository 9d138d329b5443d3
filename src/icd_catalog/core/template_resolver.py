import logging
import xml.etree.ElementTree as ET
from typing import Callable, Dict, FrozenSet, Optional, Set, Tuple

from icd_catalog.core.registry import CatalogIndex
from icd_catalog.core.scl_document import SclDocument, attr_true
from icd_catalog.models.catalog_models import AttributeEntry, ObjectEntry, TriggerOption

logger = logging.getLogger(__name__)

Reporter = Callable[[str, str], None]
# (template kind, type id) pairs on the current expansion chain
Chain = FrozenSet[Tuple[str, str]]

_CHANGE_FLAGS = (
    ("dchg", TriggerOption.DATA_CHANGED),
    ("qchg", TriggerOption.QUALITY_CHANGED),
    ("dupd", TriggerOption.DATA_UPDATE),
)


def trigger_mask(elem: ET.Element) -> int:
    """Bitmask from the dchg/qchg/dupd flags of a DA or BDA."""
    mask = 0
    for attr, bit in _CHANGE_FLAGS:
        if attr_true(elem.get(attr)):
            mask |= bit
    return int(mask)


def has_change_flags(elem: ET.Element) -> bool:
    return any(elem.get(attr) is not None for attr, _ in _CHANGE_FLAGS)


def join_path(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


class TypeTemplateResolver:
    """
    Expands DataTypeTemplates into flat object and attribute catalogs.

    LNodeType -> DO gives ObjectEntry rows (not deduplicated). DOType -> DA/SDO
    and DAType -> BDA are expanded recursively into AttributeEntry rows keyed
    by (owning DOType id, dotted path); the first registration of a key wins
    and a repeated key is neither re-registered nor re-expanded.

    Functional constraints are inherited from the enclosing DA when a BDA has
    none. Trigger options are inherited unless the BDA carries any of
    dchg/qchg/dupd, in which case only its own flags count.

    The set of (kind, type id) pairs on the current expansion chain is passed
    down both recursions; re-entering one of them is reported and skipped, so
    self-referencing templates terminate.
    """

    def __init__(self, doc: SclDocument, attributes: CatalogIndex, objects: CatalogIndex,
                 report: Reporter):
        self._doc = doc
        self._attributes = attributes
        self._objects = objects
        self._report = report
        self.lnode_types: Dict[str, ET.Element] = {}
        self.do_types: Dict[str, ET.Element] = {}
        self.da_types: Dict[str, ET.Element] = {}
        self.enum_types: Dict[str, Dict[int, str]] = {}
        # DOTypes already expanded as owners / whose SDO placements were listed
        self._expanded: Set[str] = set()
        self._sdo_listed: Set[str] = set()

    def resolve(self) -> bool:
        """Run the whole expansion. Returns False when the document has no templates."""
        templates_root = self._doc.templates()
        if templates_root is None:
            self._report("WARNING", "No DataTypeTemplates section in SCL file.")
            return False

        self._index_templates(templates_root)

        for lnt_id, lnt in self.lnode_types.items():
            self._expand_node_type(lnt_id, lnt)

        logger.debug(f"Resolved {len(self._objects)} objects and {len(self._attributes)} attributes "
                     f"from {len(self.lnode_types)} LNodeTypes")
        return True

    def _index_templates(self, templates_root: ET.Element):
        tables = {
            "LNodeType": self.lnode_types,
            "DOType": self.do_types,
            "DAType": self.da_types,
        }
        for elem in self._doc.children(templates_root, "LNodeType", "DOType", "DAType", "EnumType"):
            type_id = elem.get("id")
            if not type_id:
                logger.debug(f"Skipping {self._doc.describe(elem)} without id")
                continue
            if self._doc.rejected(elem, self._report):
                continue

            kind = elem.tag.split('}')[-1]
            if kind == "EnumType":
                if type_id not in self.enum_types:
                    self.enum_types[type_id] = self._enum_values(elem)
                continue

            table = tables[kind]
            if type_id in table:
                self._report("WARNING", f"Duplicate {kind} id '{type_id}' ignored.")
                continue
            table[type_id] = elem

    def _enum_values(self, enum_type: ET.Element) -> Dict[int, str]:
        values = {}
        for enum_val in self._doc.children(enum_type, "EnumVal"):
            ord_val = enum_val.get("ord")
            try:
                values[int(ord_val)] = (enum_val.text or "").strip()
            except (TypeError, ValueError):
                logger.debug(f"Skipping EnumVal with bad ord '{ord_val}'")
        return values

    def _expand_node_type(self, lnt_id: str, lnt: ET.Element):
        for do in self._doc.children(lnt, "DO"):
            do_name = do.get("name")
            do_type_id = do.get("type")
            if not do_name or self._doc.rejected(do, self._report):
                continue

            do_type = self.do_types.get(do_type_id) if do_type_id else None
            if do_type is None:
                self._report("WARNING", f"LNodeType '{lnt_id}' DO '{do_name}': "
                                        f"DOType '{do_type_id}' not found.")
                continue

            self._objects.add(ObjectEntry(
                node_type_id=lnt_id,
                object_name=do_name,
                object_type_id=do_type_id,
                cdc=do_type.get("cdc", "")
            ))
            if do_type_id not in self._expanded:
                self._expanded.add(do_type_id)
                self._expand_object_type(do_type_id, do_type_id, "", frozenset())

    def _expand_object_type(self, owner: str, do_type_id: str, prefix: str, chain: Chain):
        key = ("DOType", do_type_id)
        if key in chain:
            self._report("WARNING", f"DOType '{do_type_id}' references itself via '{prefix}', "
                                    f"expansion stopped.")
            return
        do_type = self.do_types.get(do_type_id)
        if do_type is None:
            logger.debug(f"DOType '{do_type_id}' not found (owner {owner}, path '{prefix}')")
            return
        chain = chain | {key}

        for child in self._doc.children(do_type, "DA", "SDO"):
            if self._doc.rejected(child, self._report):
                continue
            name = child.get("name")
            tag = child.tag.split('}')[-1]

            if tag == "DA":
                btype = child.get("bType")
                if not name or not btype:
                    logger.debug(f"DOType '{do_type_id}': DA without name/bType skipped")
                    continue
                path = join_path(prefix, name)
                fc = child.get("fc", "")
                trg_ops = trigger_mask(child)
                type_id = child.get("type", "")
                if not self._register(owner, path, fc, btype, type_id, trg_ops):
                    continue
                if type_id:
                    self._expand_attribute_type(owner, type_id, fc, trg_ops, path, chain)

            else:
                sdo_type_id = child.get("type")
                if not name or not sdo_type_id:
                    logger.debug(f"DOType '{do_type_id}': SDO without name/type skipped")
                    continue
                if do_type_id not in self._sdo_listed:
                    sdo_type = self.do_types.get(sdo_type_id)
                    self._objects.add(ObjectEntry(
                        node_type_id=do_type_id,
                        object_name=name,
                        object_type_id=sdo_type_id,
                        cdc=sdo_type.get("cdc", "") if sdo_type is not None else ""
                    ))
                self._expand_object_type(owner, sdo_type_id, join_path(prefix, name), chain)

        self._sdo_listed.add(do_type_id)

    def _expand_attribute_type(self, owner: str, da_type_id: str, inherited_fc: str,
                               inherited_trg_ops: int, prefix: str, chain: Chain):
        key = ("DAType", da_type_id)
        if key in chain:
            self._report("WARNING", f"DAType '{da_type_id}' references itself via '{prefix}', "
                                    f"expansion stopped.")
            return
        da_type = self.da_types.get(da_type_id)
        if da_type is None:
            # EnumType references land here as well
            return
        chain = chain | {key}

        for child in self._doc.children(da_type, "BDA", "DA"):
            name = child.get("name")
            if not name or self._doc.rejected(child, self._report):
                continue

            path = join_path(prefix, name)
            fc = child.get("fc") or inherited_fc
            trg_ops = trigger_mask(child) if has_change_flags(child) else inherited_trg_ops
            type_id = child.get("type", "")
            if not self._register(owner, path, fc, child.get("bType", ""), type_id, trg_ops):
                continue
            if type_id:
                self._expand_attribute_type(owner, type_id, fc, trg_ops, path, chain)

    def _register(self, owner: str, path: str, fc: Optional[str], btype: str,
                  type_id: str, trg_ops: int) -> bool:
        return self._attributes.add(AttributeEntry(
            object_type_id=owner,
            path=path,
            fc=fc or "",
            btype=btype or "",
            type_id=type_id or "",
            trg_ops=trg_ops
        ))
