from romtracker.platforms import find_matching_platform, normalize_platform_name

PLATFORMS = [
    "Nintendo - Nintendo Entertainment System",
    "Nintendo - Super Nintendo Entertainment System",
    "Sega - Mega Drive - Genesis",
    "Sony - PlayStation",
]


def test_normalize_platform_name():
    assert normalize_platform_name("Sega - Mega Drive") == "segamegadrive"
    assert normalize_platform_name("") == ""


def test_direct_match():
    assert find_matching_platform("Sega - Mega Drive - Genesis.txt", PLATFORMS) == PLATFORMS[2]
    assert find_matching_platform("/lists/genesis.txt", PLATFORMS) == PLATFORMS[2]


def test_alias_match():
    assert find_matching_platform("snes.txt", PLATFORMS) == PLATFORMS[1]
    assert find_matching_platform("nes.txt", PLATFORMS) == PLATFORMS[0]
    assert find_matching_platform("psx.txt", PLATFORMS) == PLATFORMS[3]


def test_no_match():
    assert find_matching_platform("wonderswan.txt", PLATFORMS) is None
    assert find_matching_platform(".txt", PLATFORMS) is None
    assert find_matching_platform("snes.txt", []) is None
