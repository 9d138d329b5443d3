from dataclasses import dataclass
from enum import IntFlag
from typing import Tuple


class TriggerOption(IntFlag):
    """Report trigger conditions (bit values used by the MMS server library)."""
    NONE = 0
    DATA_CHANGED = 1
    QUALITY_CHANGED = 2
    DATA_UPDATE = 4
    INTEGRITY = 8
    GI = 16


class OptionalField(IntFlag):
    """Optional fields carried in a report."""
    NONE = 0
    SEQ_NUM = 1
    TIME_STAMP = 2
    REASON_FOR_INCLUSION = 4
    DATA_SET = 8
    DATA_REFERENCE = 16
    BUFFER_OVERFLOW = 32
    ENTRY_ID = 64
    CONF_REV = 128


# Reserved name of the root logical node of every LDevice
ROOT_NODE_NAME = "LLN0"


@dataclass(frozen=True)
class ObjectInfo:
    """Data object reference resolved from a node-type template."""
    object_type_id: str
    cdc: str = ""


@dataclass(frozen=True)
class ObjectEntry:
    """One DO (or SDO) placement inside a type template."""
    node_type_id: str
    object_name: str
    object_type_id: str
    cdc: str = ""

    @property
    def info(self) -> ObjectInfo:
        return ObjectInfo(object_type_id=self.object_type_id, cdc=self.cdc)


@dataclass(frozen=True)
class AttributeInfo:
    fc: str = ""
    btype: str = ""
    type_id: str = ""
    trg_ops: int = 0


@dataclass(frozen=True)
class AttributeEntry:
    """
    A flattened data attribute of an object type.
    path is the dot-joined chain of member names, e.g. 'Oper.ctlVal' or 'mag.f'.
    """
    object_type_id: str
    path: str
    fc: str = ""
    btype: str = ""
    type_id: str = ""
    trg_ops: int = 0

    @property
    def info(self) -> AttributeInfo:
        return AttributeInfo(fc=self.fc, btype=self.btype, type_id=self.type_id, trg_ops=self.trg_ops)


@dataclass(frozen=True)
class NodeClassEntry:
    ln_name: str
    ln_class: str


@dataclass(frozen=True)
class NodeInstance:
    """Concrete logical node found under the selected access point."""
    ld_inst: str
    prefix: str
    ln_class: str
    ln_inst: str
    ln_type: str
    ln_name: str
    is_ln0: bool = False


@dataclass(frozen=True)
class DatasetMember:
    """FCDA entry. Empty fields are implicit references resolved by the consumer."""
    ld_inst: str = ""
    prefix: str = ""
    ln_class: str = ""
    ln_inst: str = ""
    do_name: str = ""
    da_name: str = ""
    fc: str = ""


@dataclass(frozen=True)
class DatasetDefinition:
    ld_inst: str
    ln_name: str
    name: str
    members: Tuple[DatasetMember, ...] = ()

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.ld_inst, self.ln_name, self.name)


@dataclass(frozen=True)
class ReportDefinition:
    """ReportControl block hosted by a logical node."""
    ld_inst: str
    ln_name: str
    name: str
    dataset: str = ""
    rpt_id: str = ""
    conf_rev: int = 0
    intg_pd: int = 0
    buf_time: int = 0
    rpt_enabled_max: int = 0
    trg_ops: int = 0
    opt_fields: int = 0
    buffered: bool = False


@dataclass
class SelectionState:
    """Active IED and AccessPoint names. Empty strings mean nothing selected."""
    device_name: str = ""
    endpoint_name: str = ""

    def copy(self) -> 'SelectionState':
        return SelectionState(device_name=self.device_name, endpoint_name=self.endpoint_name)


@dataclass(frozen=True)
class Diagnostic:
    level: str
    source: str
    message: str
