import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

SAMPLE_SCL = """<?xml version="1.0" encoding="UTF-8"?>
<SCL xmlns="http://www.iec.ch/61850/2003/SCL" version="2007" revision="B">
  <Header id="sample"/>
  <IED name="IED1" manufacturer="Test">
    <AccessPoint name="AP1">
      <Server>
        <LDevice inst="LD0">
          <LN0 lnClass="LLN0" inst="" lnType="LLN0_T">
            <DataSet name="DS1">
              <FCDA ldInst="LD0" prefix="" lnClass="MMXU" lnInst="1" doName="TotW" daName="mag.f" fc="MX"/>
              <FCDA lnClass="MMXU" doName="TotW" fc="MX"/>
            </DataSet>
            <ReportControl name="RC1" rptID="rpt1" datSet="DS1" confRev="3" intgPd="1000" bufTime="50" buffered="true">
              <TrgOps dchg="true" qchg="1" period="TRUE" gi="false"/>
              <OptFields seqNum="true" timeStamp="true" dataSet="true" configRef="1"/>
              <RptEnabled max="5"/>
            </ReportControl>
            <ReportControl rptID="nameless" datSet="DS1"/>
            <ReportControl name="RC2" bufTm="200" confRev="abc"/>
          </LN0>
          <LN prefix="" lnClass="MMXU" inst="1" lnType="MMXU_T"/>
          <LN prefix="Q0" lnClass="XCBR" inst="1" lnType="XCBR_T"/>
        </LDevice>
      </Server>
    </AccessPoint>
    <AccessPoint name="AP2">
      <Server>
        <LDevice inst="OTHER">
          <LN lnClass="GGIO" inst="9" lnType="GGIO_T"/>
        </LDevice>
      </Server>
    </AccessPoint>
  </IED>
  <IED name="IED2">
    <AccessPoint name="S1">
      <Server>
        <LDevice inst="X">
          <LN0 lnClass="LLN0" inst="" lnType="LLN0_T"/>
        </LDevice>
      </Server>
    </AccessPoint>
  </IED>
  <DataTypeTemplates>
    <LNodeType id="LLN0_T" lnClass="LLN0">
      <DO name="Mod" type="ENC_Mod"/>
    </LNodeType>
    <LNodeType id="MMXU_T" lnClass="MMXU">
      <DO name="TotW" type="AnalogDO"/>
      <DO name="Hz" type="AnalogDO"/>
      <DO name="PhV" type="WYE_T"/>
    </LNodeType>
    <LNodeType id="XCBR_T" lnClass="XCBR">
      <DO name="Pos" type="DPC_T"/>
      <DO name="Missing" type="NoSuchType"/>
    </LNodeType>
    <LNodeType id="GGIO_T" lnClass="GGIO">
      <DO name="Mod" type="ENC_Mod"/>
    </LNodeType>
    <DOType id="ENC_Mod" cdc="ENC">
      <DA name="stVal" bType="Enum" type="Beh" fc="ST" dchg="true"/>
    </DOType>
    <DOType id="AnalogDO" cdc="MV">
      <DA name="mag" bType="Struct" type="AnalogValue" fc="MX" dchg="true" dupd="true"/>
      <DA name="q" bType="Quality" fc="MX" qchg="true"/>
    </DOType>
    <DOType id="WYE_T" cdc="WYE">
      <SDO name="phsA" type="CMV_T"/>
    </DOType>
    <DOType id="CMV_T" cdc="CMV">
      <DA name="cVal" bType="Struct" type="Vector" fc="MX" dchg="true"/>
    </DOType>
    <DOType id="DPC_T" cdc="DPC">
      <DA name="stVal" bType="Dbpos" fc="ST" dchg="true"/>
      <DA name="Oper" bType="Struct" type="OperT" fc="CO"/>
    </DOType>
    <DAType id="AnalogValue">
      <BDA name="f" bType="FLOAT32"/>
    </DAType>
    <DAType id="Vector">
      <BDA name="mag" bType="Struct" type="AnalogValue"/>
    </DAType>
    <DAType id="OperT">
      <BDA name="ctlVal" bType="Dbpos"/>
    </DAType>
    <EnumType id="Beh">
      <EnumVal ord="1">on</EnumVal>
      <EnumVal ord="5">off</EnumVal>
    </EnumType>
  </DataTypeTemplates>
</SCL>
"""


@pytest.fixture
def write_scl(tmp_path):
    """Factory writing SCL text to a file under tmp_path, returns the path."""
    def _write(text, name="model.icd"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def sample_scl(write_scl):
    return write_scl(SAMPLE_SCL)


@pytest.fixture
def sample_scl_text():
    return SAMPLE_SCL
