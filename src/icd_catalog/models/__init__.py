from .catalog_models import (
    ROOT_NODE_NAME,
    AttributeEntry,
    AttributeInfo,
    DatasetDefinition,
    DatasetMember,
    Diagnostic,
    NodeClassEntry,
    NodeInstance,
    ObjectEntry,
    ObjectInfo,
    OptionalField,
    ReportDefinition,
    SelectionState,
    TriggerOption,
)

__all__ = [
    'ROOT_NODE_NAME',
    'AttributeEntry',
    'AttributeInfo',
    'DatasetDefinition',
    'DatasetMember',
    'Diagnostic',
    'NodeClassEntry',
    'NodeInstance',
    'ObjectEntry',
    'ObjectInfo',
    'OptionalField',
    'ReportDefinition',
    'SelectionState',
    'TriggerOption',
]
