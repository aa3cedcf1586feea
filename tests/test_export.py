import textwrap

import pytest
import yaml

from pyappconfig import (
    ConfigYamlHandler,
    ConfigurationManager,
    CustomSection,
    DictionarySection,
    SingleTagSection
)
from pyappconfig.codec import ValueKind
from pyappconfig.errors import MalformedInput


def test_dump_layout(manager, tmp_path):
    path = tmp_path / 'app.yaml'
    ConfigYamlHandler(path).write(manager)
    data = yaml.safe_load(path.read_text(encoding='utf-8'))
    assert data['appSettings'] == {'theme': 'dark', 'langs': 'en,zh'}
    assert data['connectionStrings'] == {'main': {
        'connectionString': 'Data Source=:memory:',
        'providerName': 'System.Data.SQLite',
    }}
    sections = data['configSections']['sections']
    assert sections['limits']['properties']['retry'] == {
        'value': '3', 'type': 'System.Int32'}
    assert sections['limits']['properties']['salt'] == {
        'value': '010AFF', 'type': 'System.Byte[]'}
    assert sections['legacy'] == {
        'type': 'Legacy.Handler, Legacy',
        'xml': '<legacy><item id="1" /></legacy>'}
    assert data['configSections']['groups']['plugins']['sections']['search'] == {
        'type': 'System.Configuration.NameValueSectionHandler',
        'properties': {'engine': 'bing'},
    }


def test_round_trip(manager, tmp_path):
    path = tmp_path / 'app.yaml'
    handler = ConfigYamlHandler(path)
    handler.write(manager)
    loaded = handler.read()
    assert isinstance(loaded, ConfigurationManager)
    assert dict(loaded.app_settings.properties) == {'theme': 'dark', 'langs': 'en,zh'}
    assert loaded.connection_strings.properties['main'] == \
        manager.connection_strings.properties['main']

    sections = loaded.config_sections.sections
    assert list(sections) == ['names', 'limits', 'window', 'legacy']
    limits = sections['limits']
    assert isinstance(limits, DictionarySection)
    assert dict(limits.properties.items()) == \
        dict(manager.config_sections.sections['limits'].properties.items())
    assert limits.properties.get_typed('ratio').kind is ValueKind.FLOAT64
    assert isinstance(sections['window'], SingleTagSection)
    assert sections['window'].properties['height'] == '600'
    assert isinstance(sections['legacy'], CustomSection)
    assert sections['legacy'].inner_xml == '<item id="1" />'
    search = loaded.config_sections.groups['plugins'].sections['search']
    assert search.properties['engine'] == 'bing'


def test_hand_written_yaml(tmp_path):
    path = tmp_path / 'hand.yaml'
    path.write_text(textwrap.dedent("""
        appSettings:
          port: 8080
          hosts: [a, b]
        configSections:
          sections:
            limits:
              type: System.Configuration.DictionarySectionHandler
              properties:
                retry: {value: '3', type: System.Int32}
                label: plain
    """), encoding='utf-8')
    cfg = ConfigYamlHandler(path).read()
    assert cfg.app_settings.properties['port'] == '8080'
    assert cfg.app_settings.properties['hosts'] == 'a,b'
    limits = cfg.config_sections.sections['limits']
    assert limits.properties['retry'] == 3
    assert limits.properties['label'] == 'plain'


def test_empty_yaml(tmp_path):
    path = tmp_path / 'empty.yaml'
    path.write_text('', encoding='utf-8')
    cfg = ConfigYamlHandler(path).read()
    assert len(cfg.root) == 0


def test_custom_section_attributes_round_trip(blank, tmp_path):
    sections = blank.config_sections.sections
    sections.add_custom_section('c', 'My.Handler, My', '<x/>')
    blank.root.find('c').attrib.update({'enabled': 'true', 'level': '3'})

    path = tmp_path / 'app.yaml'
    handler = ConfigYamlHandler(path)
    handler.write(blank)
    loaded = handler.read().config_sections.sections['c']
    assert isinstance(loaded, CustomSection)
    assert loaded.type_name == 'My.Handler, My'
    assert loaded.xml_string == '<c enabled="true" level="3"><x /></c>'


def test_hand_written_custom_sections(tmp_path):
    path = tmp_path / 'hand.yaml'
    path.write_text(textwrap.dedent("""
        configSections:
          sections:
            old:
              type: Old.Handler
              content: <item id="1" />
            renamed:
              type: New.Handler
              xml: <whatever on="1"><item /></whatever>
    """), encoding='utf-8')
    sections = ConfigYamlHandler(path).read().config_sections.sections
    assert sections['old'].xml_string == '<old><item id="1" /></old>'
    assert sections['renamed'].xml_string == '<renamed on="1"><item /></renamed>'


def test_broken_custom_xml(tmp_path):
    path = tmp_path / 'broken.yaml'
    path.write_text(textwrap.dedent("""
        configSections:
          sections:
            bad:
              type: Bad.Handler
              xml: <bad><open></bad>
    """), encoding='utf-8')
    with pytest.raises(MalformedInput):
        ConfigYamlHandler(path).read()
