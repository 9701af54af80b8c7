from datetime import datetime

import pytest

from sage_log_builder.entries import Direction, LogEntry, RequiredTest

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<log>
  <entry>
    <type>Sent</type>
    <zczc>ZCZC-EAS-RMT-016001+0100-0751400-KBOI/FM -</zczc>
    <details>Transmitted   Required Monthly Test</details>
    <date>3/15/2024 14:00:00</date>
  </entry>
  <entry>
    <type>Received</type>
    <zczc>ZCZC-EAS-RMT-016001+0100-0751320-KBOI/AM -</zczc>
    <details>Received on Monitor 1 Required Monthly Test</details>
    <date>3/15/2024 13:20:00</date>
  </entry>
  <entry>
    <type>Received</type>
    <zczc>ZCZC-WXR-RWT-016001+0015-0640800-WXK68 -</zczc>
    <details>Received on Monitor 3</details>
    <date>3/5/24 08:00:00</date>
  </entry>
  <entry>
    <type>Received</type>
    <zczc></zczc>
    <details>Received from CAP IPAWS Required Weekly Test</details>
    <date>4/2/2024 10:30:00</date>
  </entry>
  <entry>
    <type>Sent</type>
    <details>Operator login</details>
    <date>3/15/2024 15:00:00</date>
  </entry>
  <entry>
    <type>Status</type>
    <details>Required Weekly Test</details>
    <date>3/15/2024 15:00:00</date>
  </entry>
</log>
"""


def make_entry(direction, kind, ts, source="Station Log", code="Station"):
    return LogEntry(direction=direction, kind=kind, timestamp=ts, source=source,
                    source_code=code, details="")


@pytest.fixture
def sent_rmt():
    return lambda ts: make_entry(Direction.SENT, RequiredTest.RMT, ts)


@pytest.fixture
def received_rmt():
    return lambda ts, source="KBOI 670AM LP2+PEP Monitor 1": make_entry(
        Direction.RECEIVED, RequiredTest.RMT, ts, source, "Monitor 1")


@pytest.fixture
def received_rwt():
    return lambda ts, source="WXK68 162.55 NWS Monitor 3": make_entry(
        Direction.RECEIVED, RequiredTest.RWT, ts, source, "Monitor 3")


@pytest.fixture
def sent_rwt():
    return lambda ts: make_entry(Direction.SENT, RequiredTest.RWT, ts)


@pytest.fixture
def sample_xml_file(tmp_path):
    p = tmp_path / "sage_log.xml"
    p.write_text(SAMPLE_XML, encoding="utf-8")
    return p


@pytest.fixture
def march():
    return lambda day, hh=0, mm=0, ss=0: datetime(2024, 3, day, hh, mm, ss)


@pytest.fixture
def sample_xml():
    return SAMPLE_XML
