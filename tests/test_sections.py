from io import StringIO

import pytest

from pyappconfig import (
    ConfigSection,
    ConfigurationManager,
    CustomSection,
    DictionarySection,
    NameValueSection,
    SectionKind,
    SingleTagSection
)
from pyappconfig.errors import (
    ArgumentRequired,
    DuplicateKey,
    InvalidKey,
    InvalidType,
    UnsupportedType
)


def _declared(manager, name):
    decls = manager.root.find('configSections')
    return [i for i in decls.findall('section') if i.get('name') == name]


def _contents(manager, name):
    return [i for i in manager.root if i.tag == name]


def test_section_kind_of():
    assert SectionKind.of(
        'System.Configuration.NameValueSectionHandler, System'
    ) is SectionKind.NAME_VALUE
    assert SectionKind.of('Some.Handler') is None
    assert SectionKind.of(None) is None


def test_load_dispatch(manager):
    sections = manager.config_sections.sections
    assert list(sections) == ['names', 'limits', 'window', 'legacy']
    assert isinstance(sections['names'], NameValueSection)
    assert isinstance(sections['limits'], DictionarySection)
    assert isinstance(sections['window'], SingleTagSection)
    assert isinstance(sections['legacy'], CustomSection)

    assert sections['names'].properties['a'] == '1'
    assert sections['limits'].properties['retry'] == 3
    assert sections['limits'].properties['ratio'] == 0.5
    assert sections['limits'].properties['salt'] == b'\x01\x0a\xff'
    assert sections['window'].properties['width'] == '800'
    assert sections['legacy'].type_name == 'Legacy.Handler, Legacy'
    assert sections['legacy'].inner_xml == '<item id="1" />'


def test_get_or_add_pairs(manager, handler):
    sections = manager.config_sections.sections
    added = sections.get_or_add('fresh', SectionKind.DICTIONARY)
    assert isinstance(added, DictionarySection)
    assert sections.get_or_add('fresh', DictionarySection) is added
    assert len(_declared(manager, 'fresh')) == 1
    assert _declared(manager, 'fresh')[0].get('type') == SectionKind.DICTIONARY.value
    assert len(_contents(manager, 'fresh')) == 1
    assert handler.writes == 1


def test_get_or_add_kind_mismatch(manager):
    with pytest.raises(InvalidType):
        manager.config_sections.sections.get_or_add(
            'names', SectionKind.DICTIONARY)


def test_get_or_add_bad_names(manager, handler):
    sections = manager.config_sections.sections
    with pytest.raises(InvalidKey):
        sections.get_or_add('bad name', SectionKind.NAME_VALUE)
    with pytest.raises(ArgumentRequired):
        sections.get_or_add('', SectionKind.NAME_VALUE)
    with pytest.raises(DuplicateKey):
        sections.get_or_add('appSettings', SectionKind.NAME_VALUE)
    # taken by a group.
    with pytest.raises(DuplicateKey):
        sections.get_or_add('plugins', SectionKind.NAME_VALUE)
    assert handler.writes == 0


def test_get_typed(manager):
    sections = manager.config_sections.sections
    assert sections.get_typed('names', NameValueSection) is sections['names']
    assert sections.get_typed('names', DictionarySection) is None
    assert sections.get_typed('missing', NameValueSection) is None


def test_custom_section(manager):
    sections = manager.config_sections.sections
    section = sections.add_custom_section('raw', 'My.Handler', '<x>1</x>')
    assert section.inner_xml == '<x>1</x>'
    assert section.xml_string == '<raw><x>1</x></raw>'
    assert sections['raw'] is section
    with pytest.raises(DuplicateKey):
        sections.add_custom_section('raw', 'My.Handler', '<x>2</x>')
    with pytest.raises(ArgumentRequired):
        sections.add_custom_section('other', ' ', '')


def test_custom_section_plain_text(manager):
    section = manager.config_sections.sections.add_custom_section(
        'note', 'My.Handler', 'a < b')
    assert section.inner_xml == 'a < b'
    assert str(section) == '<note>a &lt; b</note>'


def test_add_or_update_copies(manager):
    sections = manager.config_sections.sections
    sections.add_or_update('copy', sections['names'])
    copied = sections['copy']
    assert isinstance(copied, NameValueSection)
    assert copied.properties['a'] == '1'
    copied.properties['a'] = '2'
    assert sections['names'].properties['a'] == '1'


def test_add_or_update_mapping(manager):
    sections = manager.config_sections.sections
    sections['typed'] = {'n': 1, 'f': True}
    sections['plain'] = {'s': 'x', 'l': ['a', 'b']}
    sections.add_or_update('tag', {'w': '1'}, SectionKind.SINGLE_TAG)
    assert isinstance(sections['typed'], DictionarySection)
    assert sections['typed'].properties['n'] == 1
    assert isinstance(sections['plain'], NameValueSection)
    assert sections['plain'].properties['l'] == 'a,b'
    assert isinstance(sections['tag'], SingleTagSection)


def test_add_or_update_replaces(manager, handler):
    sections = manager.config_sections.sections
    sections.add_or_update('names', {'n': 2})
    assert isinstance(sections['names'], DictionarySection)
    assert sections['names'].properties['n'] == 2
    assert _declared(manager, 'names')[0].get('type') == SectionKind.DICTIONARY.value
    assert len(_contents(manager, 'names')) == 1
    assert handler.writes == 1


def test_add_or_update_custom_copy(manager):
    sections = manager.config_sections.sections
    sections['legacy2'] = sections['legacy']
    assert isinstance(sections['legacy2'], CustomSection)
    assert sections['legacy2'].type_name == 'Legacy.Handler, Legacy'
    assert sections['legacy2'].inner_xml == '<item id="1" />'


def test_add_or_update_failure_is_atomic(manager, handler):
    sections = manager.config_sections.sections
    before = manager.to_xml()
    with pytest.raises(UnsupportedType):
        sections.add_or_update('names', {'k': object()})
    with pytest.raises(UnsupportedType):
        sections.add_or_update('names', 5)
    with pytest.raises(InvalidType):
        sections.add_or_update('names', {'k': 'v'}, 'My.Handler')
    assert manager.to_xml() == before
    assert handler.writes == 0


def test_none_removes_pair(manager, handler):
    sections = manager.config_sections.sections
    sections.add_or_update('names', None)
    assert 'names' not in sections
    assert _declared(manager, 'names') == []
    assert _contents(manager, 'names') == []
    assert handler.writes == 1
    with pytest.raises(KeyError):
        del sections['names']


def test_rename(manager, handler):
    sections = manager.config_sections.sections
    assert sections.rename('names', 'renamed')
    assert list(sections) == ['renamed', 'limits', 'window', 'legacy']
    assert sections['renamed'].name == 'renamed'
    assert len(_declared(manager, 'renamed')) == 1
    assert _contents(manager, 'names') == []
    assert handler.writes == 1

    assert not sections.rename('missing', 'x')
    assert not sections.rename('renamed', 'limits')
    assert not sections.rename('renamed', 'appSettings')
    with pytest.raises(InvalidKey):
        sections.rename('renamed', 'bad name')


def test_clear_keeps_siblings(manager, handler):
    manager.config_sections.sections.clear()
    assert len(manager.config_sections.sections) == 0
    assert handler.writes == 1
    tags = [i.tag for i in manager.root]
    assert tags == ['configSections', 'appSettings', 'connectionStrings',
                    'plugins']
    assert 'plugins' in manager.config_sections.groups
    assert manager.app_settings.properties['theme'] == 'dark'


def test_property_change_saves(manager, handler):
    sections = manager.config_sections.sections
    sections['limits'].properties['retry'] = 5
    sections['window'].properties['height'] = '720'
    assert handler.writes == 2
    reloaded = ConfigurationManager(handler)
    assert reloaded.config_sections.sections['limits'].properties['retry'] == 5


def test_section_equality(manager):
    sections = manager.config_sections.sections
    assert sections['names'] == sections['names']
    assert sections['names'] != sections['limits']
    assert hash(sections['names']) == hash(sections['names'])


def test_create_detached():
    section = ConfigSection.create({'a': 'b'})
    assert isinstance(section, NameValueSection)
    assert isinstance(ConfigSection.create({'a': 1}), DictionarySection)
    single = ConfigSection.create(
        {'a': 'b'}, 'System.Configuration.SingleTagSectionHandler, System')
    assert isinstance(single, SingleTagSection)
    with pytest.raises(InvalidType):
        ConfigSection.create({'a': 'b'}, 'My.Handler')


def test_declared_without_content_warns():
    text = ('<configuration><configSections>'
            '<section name="lost" type="System.Configuration.NameValueSectionHandler" />'
            '</configSections></configuration>')

    manager = ConfigurationManager(StringIO(text))
    with pytest.warns(UserWarning):
        sections = manager.config_sections.sections
    assert isinstance(sections['lost'], NameValueSection)
    assert len(_contents(manager, 'lost')) == 1


BAD_NAMES = ['1abc', 'a/b', 'a<b', 'x:y', '.hidden']


@pytest.mark.parametrize('name', BAD_NAMES)
def test_names_must_be_xml_names(manager, handler, name):
    sections = manager.config_sections.sections
    with pytest.raises(InvalidKey):
        sections.get_or_add(name, SectionKind.NAME_VALUE)
    with pytest.raises(InvalidKey):
        sections.add_custom_section(name, 'My.Handler', '<x />')
    with pytest.raises(InvalidKey):
        sections.add_or_update(name, {'k': 'v'})
    with pytest.raises(InvalidKey):
        sections.rename('names', name)
    assert name not in sections
    assert 'names' in sections
    assert _declared(manager, name) == []
    assert handler.writes == 0


def test_dotted_names_are_fine(manager):
    sections = manager.config_sections.sections
    section = sections.get_or_add('system.web', SectionKind.SINGLE_TAG)
    assert section.name == 'system.web'
    assert len(_declared(manager, 'system.web')) == 1
    assert sections.rename('system.web', 'system.web-2')
    assert len(_contents(manager, 'system.web-2')) == 1


def test_custom_section_rejects_characters_xml_cannot_hold(manager, handler):
    sections = manager.config_sections.sections
    with pytest.raises(UnsupportedType):
        sections.add_custom_section('raw', 'My.Handler', 'a\x01b')
    with pytest.raises(UnsupportedType):
        sections.add_custom_section('raw', 'My\x02Handler', '<x />')
    assert 'raw' not in sections
    assert _contents(manager, 'raw') == []
    assert handler.writes == 0


def test_add_or_update_custom_keeps_attributes(manager):
    sections = manager.config_sections.sections
    sections.add_custom_section('raw', 'My.Handler', '<x />')
    source = manager.root.find('raw')
    source.set('enabled', 'true')
    sections['copied'] = sections['raw']
    copied = sections['copied']
    assert isinstance(copied, CustomSection)
    assert copied.xml_string == '<copied enabled="true"><x /></copied>'
    assert copied.type_name == 'My.Handler'


def test_loaded_custom_section_has_no_tail(manager):
    legacy = manager.config_sections.sections['legacy']
    assert legacy.xml_string == '<legacy><item id="1" /></legacy>'
    assert str(legacy) == legacy.xml_string
