from romtracker.normalizer import compact, grouping_title, normalize, strip_extension


def test_normalize_strips_region_and_revision_tags():
    assert normalize("Super Mario Bros. (USA) (Rev 1)") == normalize("super mario bros")
    assert normalize("Super Mario Bros. (USA) (Rev 1)") == "super mario bros"


def test_normalize_drops_known_extensions_only():
    assert normalize("Sonic the Hedgehog (Europe).md") == "sonic the hedgehog"
    assert normalize("Game.zip") == "game"
    assert strip_extension("readme.txt") == "readme.txt"


def test_normalize_spells_out_connectors():
    assert normalize("Tom & Jerry") == "tom and jerry"
    assert normalize("Bust-A-Move") == "bust a move"
    assert normalize("Alien vs. Predator") == "alien vs predator"
    assert normalize("Pac-Man + Galaga") == "pac man plus galaga"


def test_normalize_removes_any_bracketed_content():
    assert normalize("Contra (Japan) (En,Fr) [!] [T+Eng]") == "contra"
    assert normalize("Castlevania (Beta 2)") == "castlevania"


def test_normalize_is_total_and_idempotent():
    samples = [
        "", "   ", "(USA)", "Street Fighter II - The World Warrior (World 910522)",
        "Mega Man X3 (Japan) [h1C]", "F-Zero & More!!", "Zoop  -  The Game.sfc",
    ]
    for sample in samples:
        once = normalize(sample)
        assert normalize(once) == once
    assert normalize("") == ""
    assert normalize(None) == ""


def test_compact_removes_spaces():
    assert compact("dino city") == "dinocity"


def test_grouping_title_ignores_region_decoration():
    assert grouping_title("Alpha (USA)") == grouping_title("Alpha (Europe)") == "alpha"
    assert grouping_title("Alpha (USA) [b]") == "alpha"
    assert grouping_title("Alpha 2 (USA)") != grouping_title("Alpha (USA)")
