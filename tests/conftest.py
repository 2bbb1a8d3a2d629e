import pytest

from romtracker.models import (
    AlternateRegion, CatalogEntry, Category, MatchKind, MatchResult, OwnedItem,
)


def make_result(description, platform="SNES", owned=False, region=None,
                category=Category.COMMERCIAL, alternates=None, reference_name=None,
                parent_reference=None):
    entry = CatalogEntry(
        reference_name=reference_name or description,
        description=description,
        region=region,
        category=category,
        media_file_name=f"{reference_name or description}.sfc",
        parent_reference=parent_reference,
    )
    return MatchResult(
        entry=entry,
        platform_name=platform,
        owned=owned,
        matched_item=OwnedItem(entry.media_file_name) if owned else None,
        match_kind=MatchKind.EXACT if owned else None,
        alternate_regions=alternates,
    )


@pytest.fixture
def sample_results():
    return [
        make_result("Super Mario World (USA)", owned=True, region="USA",
                    alternates=[AlternateRegion("Japan", False)]),
        make_result("Super Mario World (Japan)", region="Japan",
                    alternates=[AlternateRegion("USA", True)]),
        make_result("Star Fox 2 (Japan) (Proto)", region="Japan", category=Category.PROTOTYPE),
        make_result("Zelda (USA) (Rev 1)", region="USA"),
        make_result("Sonic the Hedgehog (Europe)", platform="Mega Drive", owned=True,
                    region="Europe"),
        make_result("Tetris (World)", platform="Mega Drive", region="World"),
    ]
