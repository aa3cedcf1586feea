import textwrap
from xml.etree import ElementTree as et

import pytest

from pyappconfig import ConfigurationManager, FileHandler
from pyappconfig.parser import parse


SAMPLE = textwrap.dedent("""
<configuration>
  <configSections>
    <section name="names" type="System.Configuration.NameValueSectionHandler, System" />
    <section name="limits" type="System.Configuration.DictionarySectionHandler" />
    <section name="window" type="System.Configuration.SingleTagSectionHandler" />
    <section name="legacy" type="Legacy.Handler, Legacy" />
    <sectionGroup name="plugins">
      <section name="search" type="System.Configuration.NameValueSectionHandler" />
    </sectionGroup>
  </configSections>
  <appSettings>
    <add key="theme" value="dark" />
    <add key="langs" value="en,zh" />
  </appSettings>
  <connectionStrings>
    <add name="main" connectionString="Data Source=:memory:" providerName="System.Data.SQLite" />
  </connectionStrings>
  <names>
    <add key="a" value="1" />
  </names>
  <limits>
    <add key="retry" value="3" type="System.Int32" />
    <add key="ratio" value="0.5" type="System.Double" />
    <add key="salt" value="010AFF" type="System.Byte[]" />
  </limits>
  <window width="800" height="600" />
  <legacy><item id="1" /></legacy>
  <plugins>
    <search>
      <add key="engine" value="bing" />
    </search>
  </plugins>
</configuration>
""").strip()


class MemoryHandler(FileHandler[et.Element]):
    """Keeps the document as text, and counts the writes."""

    def __init__(self, text: str = '') -> None:
        super().__init__('<memory>')
        self.text = text
        self.writes = 0

    def read(self) -> et.Element:
        return parse(self.text)

    def write(self, instance: et.Element) -> None:
        self.writes += 1
        self.text = et.tostring(instance, encoding='unicode')


@pytest.fixture
def sample_text() -> str:
    return SAMPLE


@pytest.fixture
def handler() -> MemoryHandler:
    return MemoryHandler(SAMPLE)


@pytest.fixture
def blank_handler() -> MemoryHandler:
    return MemoryHandler()


@pytest.fixture
def manager(handler):
    with ConfigurationManager(handler, auto_save=True) as cfg:
        yield cfg


@pytest.fixture
def blank(blank_handler):
    with ConfigurationManager(blank_handler, auto_save=True) as cfg:
        yield cfg


@pytest.fixture
def config_file(tmp_path, sample_text):
    path = tmp_path / 'app.exe.config'
    path.write_text(sample_text, encoding='utf-8')
    return path
