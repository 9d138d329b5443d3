import logging
from typing import Any, Dict, List, Optional

from icd_catalog.core.config import ResolverConfig
from icd_catalog.core.dataset_extractor import DatasetExtractor
from icd_catalog.core.events import EventEmitter
from icd_catalog.core.instance_builder import (
    InstanceCatalogBuilder,
    find_node_type_by_name,
    find_node_type_by_parts,
    node_instance_index,
)
from icd_catalog.core.registry import CatalogIndex
from icd_catalog.core.report_extractor import ReportExtractor
from icd_catalog.core.scl_document import read_document
from icd_catalog.core.selector import DocumentSelector
from icd_catalog.core.template_resolver import TypeTemplateResolver
from icd_catalog.models.catalog_models import (
    AttributeEntry,
    AttributeInfo,
    DatasetDefinition,
    DatasetMember,
    Diagnostic,
    NodeInstance,
    ObjectEntry,
    ObjectInfo,
    ReportDefinition,
    SelectionState,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class _CatalogState:
    """Everything one load produces. A new instance is built per load and swapped in when complete."""

    def __init__(self):
        self.source = ""
        self.selection = SelectionState()
        self.objects: CatalogIndex = CatalogIndex(
            key=lambda e: (e.node_type_id, e.object_name),
            unique=False,
            group=lambda e: e.node_type_id
        )
        self.attributes: CatalogIndex = CatalogIndex(
            key=lambda e: (e.object_type_id, e.path),
            unique=True,
            group=lambda e: e.object_type_id
        )
        self.instances: CatalogIndex = node_instance_index()
        self.node_classes: CatalogIndex = CatalogIndex(key=lambda e: e.ln_name, unique=True)
        self.datasets: CatalogIndex = CatalogIndex(key=lambda d: d.key, unique=True)
        self.reports: CatalogIndex = CatalogIndex(key=lambda r: (r.ld_inst, r.ln_name, r.name), unique=False)
        self.enum_types: Dict[str, Dict[int, str]] = {}
        self.diagnostics: List[Diagnostic] = []
        self.suppressed_diagnostics = 0


class IcdCatalog(EventEmitter):
    """
    Flat, queryable catalog of one IED taken from an SCL/ICD/CID document.

    Holds type templates flattened into object and attribute entries, the
    logical node instances of the selected access point, their DataSets
    and ReportControls. Every query returns new lists of immutable values,
    so callers may keep them across later loads.

    Several catalogs may coexist. A single catalog is not safe for
    concurrent use: at most one load() may run at a time, no queries may run
    while it does, and event listeners must not call load()/unload().

    Events:
        diagnostic(Diagnostic): a soft failure was recorded during a load
        loaded(path): a document was loaded
        unloaded(): the catalog was cleared
    """

    def __init__(self, config: Optional[ResolverConfig] = None):
        super().__init__()
        self.config = config or ResolverConfig()
        self._preferred: Optional[SelectionState] = None
        self._state = _CatalogState()

    # --- Selection ---

    def set_active_selection(self, device_name: str, endpoint_name: Optional[str] = None) -> bool:
        """
        Set the IED (and optionally the AccessPoint) the next load() should use.
        Takes precedence over the names in the config. Returns False and
        changes nothing when device_name is empty.
        """
        if not device_name:
            logger.warning("Ignoring empty IED name for active selection")
            return False
        self._preferred = SelectionState(device_name=device_name, endpoint_name=endpoint_name or "")
        logger.debug(f"Active selection set to IED '{device_name}' AccessPoint '{endpoint_name or ''}'")
        return True

    def selected_device_name(self) -> str:
        return self._state.selection.device_name

    def selection(self) -> SelectionState:
        return self._state.selection.copy()

    def _preferred_names(self):
        if self._preferred is not None:
            return self._preferred.device_name, self._preferred.endpoint_name or None
        return self.config.device_name, self.config.endpoint_name

    # --- Lifecycle ---

    def load(self, path: str) -> bool:
        """
        Load the document at path, replacing whatever was loaded before.

        Returns False only when the document cannot be read or decoded; the
        catalog is then empty. A missing IED, AccessPoint or
        DataTypeTemplates section is recorded as a diagnostic and the load
        still returns True with the affected catalogs left empty.
        """
        self.unload()
        state = _CatalogState()
        try:
            loaded = self._build(state, path)
        except Exception:
            logger.exception(f"Unexpected error while loading {path}")
            self._state = _CatalogState()
            raise

        self._state = state
        if loaded:
            logger.info(f"Loaded {path}: {self._summary_text()}")
            self.emit("loaded", path)
        return loaded

    def _build(self, state: _CatalogState, path: str) -> bool:
        doc = read_document(path, max_text_length=self.config.max_text_length)
        if doc is None:
            self._record(state, "ERROR", "document", f"Unable to read SCL document '{path}'.")
            return False
        state.source = path

        device_name, endpoint_name = self._preferred_names()
        selector = DocumentSelector(doc, self._reporter(state, "selector"))
        result = selector.select(device_name, endpoint_name)
        state.selection = result.state

        resolver = TypeTemplateResolver(doc, state.attributes, state.objects,
                                        self._reporter(state, "templates"))
        resolver.resolve()
        state.enum_types = resolver.enum_types

        builder = InstanceCatalogBuilder(
            doc,
            state.instances,
            state.node_classes,
            DatasetExtractor(doc, state.datasets, self._reporter(state, "datasets")),
            ReportExtractor(doc, state.reports, self._reporter(state, "reports")),
            self._reporter(state, "instances")
        )
        builder.build(result.endpoint)
        return True

    def unload(self):
        """Clear everything loaded. Safe to call repeatedly."""
        was_loaded = bool(self._state.source)
        self._state = _CatalogState()
        if was_loaded:
            logger.debug("Catalog unloaded")
            self.emit("unloaded")

    def _reporter(self, state: _CatalogState, source: str):
        def report(level: str, message: str):
            self._record(state, level, source, message)
        return report

    def _record(self, state: _CatalogState, level: str, source: str, message: str):
        logger.log(_LOG_LEVELS.get(level, logging.WARNING), f"[{source}] {message}")
        if len(state.diagnostics) >= self.config.max_diagnostics:
            state.suppressed_diagnostics += 1
            return
        diagnostic = Diagnostic(level=level, source=source, message=message)
        state.diagnostics.append(diagnostic)
        self.emit("diagnostic", diagnostic)

    # --- Type queries ---

    def find_object_info(self, node_type_id: str, object_name: str) -> Optional[ObjectInfo]:
        entry = self._state.objects.get((node_type_id, object_name))
        return entry.info if entry is not None else None

    def find_attribute_info(self, object_type_id: str, path: str) -> Optional[AttributeInfo]:
        entry = self._state.attributes.get((object_type_id, path))
        return entry.info if entry is not None else None

    def attribute_exists(self, object_type_id: str, path: str) -> bool:
        return (object_type_id, path) in self._state.attributes

    def attributes(self, object_type_id: Optional[str] = None) -> List[AttributeEntry]:
        """Attribute entries of one DOType, or all of them when no id is given."""
        if object_type_id is None:
            return list(self._state.attributes)
        return self._state.attributes.in_group(object_type_id)

    def objects(self, node_type_id: Optional[str] = None) -> List[ObjectEntry]:
        if node_type_id is None:
            return list(self._state.objects)
        return self._state.objects.in_group(node_type_id)

    def enum_values(self, enum_type_id: str) -> Dict[int, str]:
        return dict(self._state.enum_types.get(enum_type_id, {}))

    # --- Instance queries ---

    def node_instances(self) -> List[NodeInstance]:
        return list(self._state.instances)

    def lookup_ln_class(self, ln_name: str) -> Optional[str]:
        entry = self._state.node_classes.get(ln_name)
        return entry.ln_class if entry is not None else None

    def find_node_type_by_name(self, ld_inst: str, ln_name: str) -> Optional[str]:
        return find_node_type_by_name(self._state.instances, ld_inst, ln_name)

    def find_node_type_by_parts(self, ld_inst: str, prefix: str, ln_class: str,
                                ln_inst: str) -> Optional[str]:
        return find_node_type_by_parts(self._state.instances, ld_inst, prefix, ln_class, ln_inst)

    def datasets(self) -> List[DatasetDefinition]:
        return list(self._state.datasets)

    def first_dataset(self) -> Optional[DatasetDefinition]:
        for ds in self._state.datasets:
            return ds
        return None

    def dataset_members(self, ld_inst: str = "", ln_name: str = "",
                        dataset_name: str = "") -> List[DatasetMember]:
        """Members of every DataSet matching the filters; an empty filter matches anything."""
        members = []
        for ds in self._state.datasets:
            if ld_inst and ds.ld_inst != ld_inst:
                continue
            if ln_name and ds.ln_name != ln_name:
                continue
            if dataset_name and ds.name != dataset_name:
                continue
            members.extend(ds.members)
        return members

    def reports(self) -> List[ReportDefinition]:
        return list(self._state.reports)

    # --- Diagnostics ---

    def diagnostics(self) -> List[Diagnostic]:
        return list(self._state.diagnostics)

    @property
    def source(self) -> str:
        return self._state.source

    def summary(self) -> Dict[str, Any]:
        state = self._state
        return {
            'source': state.source,
            'device': state.selection.device_name,
            'endpoint': state.selection.endpoint_name,
            'objects': len(state.objects),
            'attributes': len(state.attributes),
            'node_instances': len(state.instances),
            'datasets': len(state.datasets),
            'reports': len(state.reports),
            'enum_types': len(state.enum_types),
            'diagnostics': len(state.diagnostics) + state.suppressed_diagnostics,
        }

    def _summary_text(self) -> str:
        s = self.summary()
        return (f"IED '{s['device']}' AP '{s['endpoint']}', {s['objects']} objects, "
                f"{s['attributes']} attributes, {s['node_instances']} LNs, "
                f"{s['datasets']} datasets, {s['reports']} reports")


def load_catalog(path: str, config: Optional[ResolverConfig] = None) -> Optional[IcdCatalog]:
    """Load path into a new catalog. Returns None when the document cannot be decoded."""
    catalog = IcdCatalog(config)
    if not catalog.load(path):
        return None
    return catalog
