import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Callable, Optional

from icd_catalog.core.scl_document import SclDocument
from icd_catalog.models.catalog_models import SelectionState

logger = logging.getLogger(__name__)

Reporter = Callable[[str, str], None]


@dataclass
class SelectionResult:
    state: SelectionState
    device: Optional[ET.Element] = None
    endpoint: Optional[ET.Element] = None


class DocumentSelector:
    """
    Picks the active IED and its AccessPoint.

    Both levels use the same rule: an exact match on the preferred name
    wins; otherwise the first element with a non-empty name is used and,
    if a preference was given, a fallback warning is reported.
    """

    def __init__(self, doc: SclDocument, report: Reporter):
        self._doc = doc
        self._report = report

    def select(self, preferred_device: Optional[str] = None,
               preferred_endpoint: Optional[str] = None) -> SelectionResult:
        state = SelectionState()
        device = self.select_device(preferred_device)
        if device is None:
            return SelectionResult(state=state)

        state.device_name = device.get("name", "")
        endpoint = self.select_endpoint(device, preferred_endpoint)
        if endpoint is not None:
            state.endpoint_name = endpoint.get("name", "")

        logger.info(f"Selected IED '{state.device_name}' AccessPoint '{state.endpoint_name}'")
        return SelectionResult(state=state, device=device, endpoint=endpoint)

    def select_device(self, preferred: Optional[str] = None) -> Optional[ET.Element]:
        first_named = None
        for ied in self._doc.children(self._doc.root, "IED"):
            name = ied.get("name", "")
            if not name:
                continue
            if preferred and name == preferred:
                return ied
            if first_named is None:
                first_named = ied
                if not preferred:
                    return ied

        if first_named is None:
            if preferred:
                self._report("ERROR", f"Requested IED '{preferred}' not found in SCL file.")
            else:
                self._report("ERROR", "No IED definition found in SCL file.")
            return None

        self._report("WARNING", f"Requested IED '{preferred}' not found. Using '{first_named.get('name')}'.")
        return first_named

    def select_endpoint(self, device: ET.Element, preferred: Optional[str] = None) -> Optional[ET.Element]:
        first_named = None
        first_any = None
        for ap in self._doc.children(device, "AccessPoint"):
            if first_any is None:
                first_any = ap
            name = ap.get("name", "")
            if not name:
                continue
            if preferred and name == preferred:
                return ap
            if first_named is None:
                first_named = ap
                if not preferred:
                    return ap

        # Unnamed access points are still usable as a last resort
        fallback = first_named if first_named is not None else first_any
        device_name = device.get("name", "")
        if fallback is None:
            if preferred:
                self._report("WARNING", f"Requested AccessPoint '{preferred}' not found in IED '{device_name}'.")
            else:
                self._report("WARNING", f"IED '{device_name}' has no AccessPoint.")
            return None

        if preferred:
            label = fallback.get("name") or "<unnamed>"
            self._report("WARNING", f"Requested AccessPoint '{preferred}' not found. Using '{label}'.")
        return fallback
