from romtracker.classifier import categorize, has_revision_tag, is_official_release
from romtracker.models import CatalogEntry, Category


def test_bootleg_wins_over_demo():
    assert categorize("Fighter (Demo) bootleg", "fighter") == Category.PIRATE_HACK


def test_bootleg_in_comment():
    assert categorize("Pac-Man", "pacmanbl", comment="bootleg") == Category.PIRATE_HACK


def test_categories_from_markers():
    assert categorize("Star Fox 2 (Japan) (Proto)", "sf2") == Category.PROTOTYPE
    assert categorize("Zelda (USA) (Beta)", "zelda") == Category.BETA
    assert categorize("Kirby (USA) (Demo)", "kirby") == Category.DEMO
    assert categorize("Sonic (Japan) (Sample)", "sonic") == Category.SAMPLE
    assert categorize("Mario (Unl)", "mario") == Category.PIRATE_HACK
    assert categorize("Tetris (World) (Homebrew)", "tetris") == Category.HOMEBREW
    assert categorize("Tetris (World)", "tetris") == Category.COMMERCIAL


def test_official_release():
    assert is_official_release("Super Metroid (Japan, USA) (En,Ja)")
    assert not is_official_release("Super Metroid (Japan) (Proto)")
    assert not is_official_release("Mario [b]")
    assert not is_official_release("Tetris (Aftermarket) (Unl)")


def test_revision_tags():
    assert has_revision_tag("Super Mario World (USA) (Rev 1)")
    assert has_revision_tag("Doom (USA) (v1.1)")
    assert has_revision_tag("Street Fighter II (World 91/05/22)")
    assert has_revision_tag("Final Fight revision B")
    assert not has_revision_tag("Super Mario World (USA)")


def test_clone_counts_as_revision():
    clone = CatalogEntry(reference_name="sf2ua", description="Street Fighter II (USA)",
                         parent_reference="sf2")
    assert has_revision_tag(clone.description, clone)
    assert not has_revision_tag("Street Fighter II (USA)")
