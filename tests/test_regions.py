from romtracker.models import CatalogEntry, OwnedItem
from romtracker.regions import OwnedIndex, RegionIndex, find_alternate_regions, sanitize_region


def _entry(name, region):
    return CatalogEntry(reference_name=f"{name}.zip", description=name, region=region)


def test_siblings_found_in_both_directions():
    usa = _entry("Foo (USA)", "USA")
    eur = _entry("Foo (Europe)", "Europe")
    index = RegionIndex([usa, eur])
    owned = OwnedIndex([])

    assert [a.region for a in find_alternate_regions(usa, index, owned)] == ["Europe"]
    assert [a.region for a in find_alternate_regions(eur, index, owned)] == ["USA"]


def test_alternates_are_deduplicated_and_exclude_own_region():
    entries = [
        _entry("Foo (USA)", "USA"),
        _entry("Foo (USA) (Rev 1)", "USA"),
        _entry("Foo (Europe)", "Europe"),
        _entry("Foo (Europe) (Rev 1)", "Europe"),
        _entry("Foo", None),
    ]
    index = RegionIndex(entries)
    owned = OwnedIndex([OwnedItem("Bar (Europe).zip")])

    alternates = find_alternate_regions(entries[0], index, owned)
    assert [(a.region, a.owned) for a in alternates] == [("Europe", False)]


def test_region_tags_do_not_count_for_sibling_ownership():
    usa = _entry("Foo (USA)", "USA")
    eur = _entry("Foo (Europe)", "Europe")
    owned = OwnedIndex([OwnedItem("Foo (USA).zip")])

    alternates = find_alternate_regions(usa, RegionIndex([usa, eur]), owned)
    assert [(a.region, a.owned) for a in alternates] == [("Europe", True)]


def test_alternate_owned_by_normalized_name():
    usa = _entry("Foo (USA)", "USA")
    jpn = _entry("Foo (Japan)", "Japan")
    owned = OwnedIndex([OwnedItem("foo (japan).ZIP")])

    alternates = find_alternate_regions(usa, RegionIndex([usa, jpn]), owned)
    assert alternates[0].region == "Japan"
    assert alternates[0].owned


def test_entries_without_region_have_no_alternates_from_regionless_titles():
    a = _entry("Bar", None)
    b = _entry("Bar [b]", None)
    assert find_alternate_regions(a, RegionIndex([a, b]), OwnedIndex([])) == []


def test_owned_index_first_item_wins():
    items = [OwnedItem("a.zip"), OwnedItem("a.zip")]
    index = OwnedIndex(items)
    assert len(index) == 2
    assert index.by_name["a.zip"] is items[0]


def test_sanitize_region():
    assert sanitize_region("USA") == "USA"
    assert sanitize_region("Japan, Rev A") == "Japan"
    assert sanitize_region("World 910522") == "World"
    assert sanitize_region("United States, 2 players") == "USA"
    assert sanitize_region("Capcom 91/05/22") is None
    assert sanitize_region("") is None
    assert sanitize_region(None) is None
