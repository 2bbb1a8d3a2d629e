import pytest

from romtracker.errors import CatalogParseError, EmptyCatalogError
from romtracker.models import Category
from romtracker.parser import (
    CatalogParser, load_catalogs, parse_catalog, parse_owned_list,
    platform_name_from_filename,
)

NOINTRO_DAT = "\ufeff" + """<?xml version="1.0"?>
<!DOCTYPE datafile PUBLIC "-//Logiqx//DTD ROM Management Datafile//EN" "http://www.logiqx.com/Dats/datafile.dtd">
<datafile>
    <header>
        <name>Nintendo - Super Nintendo Entertainment System</name>
        <description>Nintendo - Super Nintendo Entertainment System</description>
    </header>
    <game name="Super Mario World (USA)">
        <description>Super Mario World (USA)</description>
        <rom name="Super Mario World (USA).sfc" size="524288" crc="B19ED489" md5="CDD3C8C37322978CA8669B34BC89C804" sha1="6B47BB75D16514B6A476AA0C73A683A2A4C18765"/>
    </game>
    <game name="Super Mario World (Japan, Rev A)">
        <description>Super Mario World (Japan, Rev A)</description>
        <rom name="Super Mario World (Japan, Rev A).sfc" size="524288" crc="00000001"/>
    </game>
    <game name="Star Fox 2 (Japan) (Proto)">
        <rom name="Star Fox 2 (Japan) (Proto).sfc" size="not-a-number"/>
    </game>
    <game>
        <description>Nameless</description>
    </game>
</datafile>
"""

MAME_DAT = """<?xml version="1.0"?>
<mame build="0.250">
    <machine name="sf2">
        <description>Street Fighter II: The World Warrior (World 910522)</description>
    </machine>
    <machine name="sf2ua" cloneof="sf2">
        <description>Street Fighter II: The World Warrior (USA 910206)</description>
        <comment>bootleg board</comment>
    </machine>
</mame>
"""


def test_parse_nointro_catalog():
    catalog = CatalogParser.parse(NOINTRO_DAT, "snes.dat")

    assert catalog.platform_name == "Nintendo - Super Nintendo Entertainment System"
    assert catalog.file_name == "snes.dat"
    assert [e.reference_name for e in catalog.entries] == [
        "Super Mario World (USA)",
        "Super Mario World (Japan, Rev A)",
        "Star Fox 2 (Japan) (Proto)",
    ]

    smw = catalog.entries[0]
    assert smw.media_file_name == "Super Mario World (USA).sfc"
    assert smw.region == "USA"
    assert smw.size == 524288
    assert smw.crc32 == "b19ed489"
    assert smw.category == Category.COMMERCIAL
    assert smw.is_parent

    assert catalog.entries[1].region == "Japan, Rev A"


def test_missing_description_falls_back_to_reference_name():
    catalog = CatalogParser.parse(NOINTRO_DAT, "snes.dat")
    star_fox = catalog.entries[2]
    assert star_fox.description == "Star Fox 2 (Japan) (Proto)"
    assert star_fox.size == 0
    assert star_fox.category == Category.PROTOTYPE


def test_parse_mame_machines_without_header():
    catalog = CatalogParser.parse(MAME_DAT, "mame.xml")

    assert catalog.platform_name == "mame"
    assert len(catalog.entries) == 2
    parent, clone = catalog.entries
    assert parent.media_file_name == "sf2"
    assert parent.region == "World 910522"
    assert clone.parent_reference == "sf2"
    assert not clone.is_parent
    assert clone.category == Category.PIRATE_HACK


def test_malformed_document_raises():
    with pytest.raises(CatalogParseError) as excinfo:
        CatalogParser.parse("<datafile><game name='x'>", "broken.dat")
    assert excinfo.value.file_name == "broken.dat"


def test_document_without_named_entries_is_rejected():
    with pytest.raises(EmptyCatalogError):
        CatalogParser.parse("<datafile><header><name>X</name></header></datafile>", "empty.dat")


def test_parse_catalog_reports_instead_of_raising():
    result = parse_catalog("not xml at all", "notes.dat")
    assert not result.ok
    assert result.catalog is None
    assert "notes.dat" in str(result.error)


def test_load_catalogs_skips_failures_and_duplicates():
    documents = [
        ("snes.dat", NOINTRO_DAT),
        ("broken.dat", "<datafile>"),
        ("snes.dat", NOINTRO_DAT),
        ("mame.xml", MAME_DAT),
    ]
    catalogs, failures = load_catalogs(documents)

    assert [c.file_name for c in catalogs] == ["snes.dat", "mame.xml"]
    assert [f.file_name for f in failures] == ["broken.dat"]

    again, failures = load_catalogs([("mame.xml", MAME_DAT)], existing=catalogs)
    assert again == []
    assert failures == []


def test_platform_name_from_filename():
    assert platform_name_from_filename("/dats/Sega - Mega Drive.dat") == "Sega - Mega Drive"
    assert platform_name_from_filename("arcade.XML") == "arcade"


def test_parse_owned_list_ignores_blank_lines():
    owned = parse_owned_list("a.zip\n\n  b.zip  \r\n\n", "TestSys", "testsys.txt")
    assert [i.name for i in owned.items] == ["a.zip", "b.zip"]
    assert owned.fingerprint() == ("TestSys", 2)


def test_empty_owned_list_is_valid():
    owned = parse_owned_list("", "TestSys")
    assert owned.items == []
