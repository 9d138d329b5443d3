"""
icd_catalog - flat, queryable catalog of IEC 61850 SCL/ICD/CID documents
"""
from icd_catalog.core.config import ResolverConfig
from icd_catalog.core.icd_catalog import IcdCatalog, load_catalog

__version__ = '1.0.0'

__all__ = ['IcdCatalog', 'ResolverConfig', 'load_catalog', '__version__']
