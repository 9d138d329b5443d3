import xml.etree.ElementTree as ET

from icd_catalog.core.icd_catalog import IcdCatalog
from icd_catalog.core.registry import CatalogIndex
from icd_catalog.core.report_extractor import ReportExtractor
from icd_catalog.core.scl_document import SclDocument
from icd_catalog.models import DatasetMember, OptionalField, TriggerOption


def _loaded(path):
    catalog = IcdCatalog()
    assert catalog.load(path)
    return catalog


def test_dataset_members_kept_verbatim(sample_scl):
    catalog = _loaded(sample_scl)
    datasets = catalog.datasets()
    assert [(d.ld_inst, d.ln_name, d.name) for d in datasets] == [("LD0", "LLN0", "DS1")]

    members = catalog.dataset_members("LD0", "LLN0", "DS1")
    assert members == [
        DatasetMember(ld_inst="LD0", prefix="", ln_class="MMXU", ln_inst="1",
                      do_name="TotW", da_name="mag.f", fc="MX"),
        DatasetMember(ld_inst="", prefix="", ln_class="MMXU", ln_inst="",
                      do_name="TotW", da_name="", fc="MX"),
    ]


def test_dataset_member_filters(sample_scl):
    catalog = _loaded(sample_scl)
    assert len(catalog.dataset_members()) == 2
    assert len(catalog.dataset_members(dataset_name="DS1")) == 2
    assert catalog.dataset_members("LD0", "MMXU1", "") == []
    assert catalog.first_dataset().name == "DS1"


def test_duplicate_and_nameless_datasets(write_scl):
    path = write_scl("""<SCL><IED name="I"><AccessPoint name="A"><Server><LDevice inst="L">
        <LN0 lnClass="LLN0" lnType="T">
          <DataSet><FCDA doName="x"/></DataSet>
          <DataSet name="D"><FCDA doName="first"/></DataSet>
          <DataSet name="D"><FCDA doName="second"/></DataSet>
        </LN0>
    </LDevice></Server></AccessPoint></IED></SCL>""")
    catalog = _loaded(path)
    assert [d.name for d in catalog.datasets()] == ["D"]
    assert [m.do_name for m in catalog.dataset_members()] == ["first"]
    assert any("Duplicate DataSet 'D'" in d.message for d in catalog.diagnostics())


def test_report_controls(sample_scl):
    catalog = _loaded(sample_scl)
    reports = catalog.reports()
    # the ReportControl without a name is dropped
    assert [r.name for r in reports] == ["RC1", "RC2"]

    rc1 = reports[0]
    assert (rc1.ld_inst, rc1.ln_name) == ("LD0", "LLN0")
    assert rc1.rpt_id == "rpt1"
    assert rc1.dataset == "DS1"
    assert rc1.conf_rev == 3
    assert rc1.intg_pd == 1000
    assert rc1.buf_time == 50
    assert rc1.rpt_enabled_max == 5
    assert rc1.buffered is True
    assert rc1.trg_ops == TriggerOption.DATA_CHANGED | TriggerOption.QUALITY_CHANGED | TriggerOption.INTEGRITY
    assert rc1.opt_fields == (OptionalField.SEQ_NUM | OptionalField.TIME_STAMP
                              | OptionalField.DATA_SET | OptionalField.CONF_REV)

    rc2 = reports[1]
    assert rc2.buf_time == 200
    assert rc2.conf_rev == 0
    assert rc2.trg_ops == 0
    assert rc2.opt_fields == 0
    assert rc2.buffered is False


def _parse_report(xml):
    doc = SclDocument(ET.fromstring(f"<LN0>{xml}</LN0>"))
    extractor = ReportExtractor(doc, CatalogIndex(key=lambda r: r.name, unique=False), lambda *a: None)
    return extractor.parse_report_control(doc.child(doc.root, "ReportControl"), "LD", "LLN0")


def test_buf_time_preferred_over_legacy_spelling():
    assert _parse_report('<ReportControl name="r" bufTime="10" bufTm="99"/>').buf_time == 10
    # legacy spelling only used when bufTime is absent, not when it is malformed
    assert _parse_report('<ReportControl name="r" bufTime="x" bufTm="99"/>').buf_time == 0
    assert _parse_report('<ReportControl name="r"/>').buf_time == 0


def test_numeric_fields_default_to_zero():
    rc = _parse_report('<ReportControl name="r" confRev="-1" intgPd="1.5"><RptEnabled max=""/></ReportControl>')
    assert (rc.conf_rev, rc.intg_pd, rc.rpt_enabled_max) == (0, 0, 0)


def test_flag_truthiness():
    rc = _parse_report('<ReportControl name="r" buffered="True">'
                       '<TrgOps dchg="yes" qchg="TRUE" dupd="1" gi="0"/></ReportControl>')
    assert rc.buffered is True
    assert rc.trg_ops == TriggerOption.QUALITY_CHANGED | TriggerOption.DATA_UPDATE


def test_nameless_report_returns_none():
    assert _parse_report('<ReportControl rptID="x"/>') is None


def test_empty_report_name_is_kept():
    rc = _parse_report('<ReportControl name="" rptID="x"/>')
    assert rc is not None
    assert rc.name == ""
    assert rc.rpt_id == "x"
