from romtracker.crossplatform import base_title, cross_platform_summary, group_cross_platform

from conftest import make_result


def test_base_title():
    assert base_title("The Legend of Zelda (USA) (Rev 1)") == "Legend of Zelda"
    assert base_title("Doom v1.9 [!]") == "Doom"
    assert base_title("Tetris Rev 2") == "Tetris"


def test_groups_titles_across_platforms():
    results = [
        make_result("Sonic the Hedgehog (USA)", platform="Mega Drive"),
        make_result("Sonic the Hedgehog (Europe)", platform="Mega Drive", owned=True),
        make_result("Sonic the Hedgehog (World)", platform="Master System"),
        make_result("Sonic the Hedgehog (Japan)", platform="Game Gear"),
        make_result("Tetris (World)", platform="Game Boy", owned=True),
        make_result("Tetris (USA)", platform="NES"),
        make_result("Zelda (USA)", platform="NES"),
    ]
    grouped = group_cross_platform(results)

    assert [g.title for g in grouped] == ["Sonic the Hedgehog", "Tetris"]
    sonic = grouped[0]
    assert sonic.total_platforms == 3
    assert sonic.owned_platforms == 1
    mega_drive = [p for p in sonic.platforms if p.platform_name == "Mega Drive"][0]
    assert mega_drive.owned
    assert mega_drive.full_name == "Sonic the Hedgehog (Europe)"

    assert cross_platform_summary(grouped) == {
        'titles': 2, 'fully_owned': 0, 'partially_owned': 2,
    }


def test_min_platforms():
    results = [make_result("Zelda (USA)", platform="NES")]
    assert group_cross_platform(results) == []
    assert [g.title for g in group_cross_platform(results, min_platforms=1)] == ["Zelda"]
