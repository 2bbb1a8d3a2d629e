"""
Owned-list to platform resolution.

Owned lists usually arrive as files named after their platform
("snes.txt", "Sega Genesis.txt"); this guesses which loaded catalog
platform such a file belongs to.
"""

import os
import re
from typing import Dict, Iterable, List, Optional

# canonical short name -> common spellings
PLATFORM_ALIASES: Dict[str, List[str]] = {
    '3do': ['3do interactive multiplayer', 'panasonic 3do'],
    '3ds': ['nintendo 3ds', 'n3ds'],
    'amiga': ['commodore amiga', 'amiga 500', 'amiga ocs', 'amiga ecs'],
    'amigacd32': ['amiga cd32', 'cd32'],
    'amstradcpc': ['amstrad cpc', 'cpc'],
    'apple2': ['apple ii', 'apple 2'],
    'atari2600': ['atari 2600', 'atari vcs'],
    'atari5200': ['atari 5200'],
    'atari7800': ['atari 7800', 'atari 7800 prosystem'],
    'atarijaguar': ['jaguar', 'atari jaguar'],
    'atarilynx': ['lynx', 'atari lynx'],
    'atarist': ['atari st', 'atari ste'],
    'c64': ['commodore 64', 'c-64'],
    'cdi': ['cd-i', 'philips cd-i'],
    'colecovision': ['coleco vision'],
    'cps1': ['cps-1', 'capcom play system'],
    'cps2': ['cps-2', 'capcom play system 2'],
    'cps3': ['cps-3', 'capcom play system 3'],
    'dos': ['ibm pc', 'msdos', 'ms-dos'],
    'dreamcast': ['dc', 'sega dreamcast'],
    'fds': ['famicom disk system', 'famicom disk'],
    'gamecube': ['gc', 'ngc', 'nintendo gamecube'],
    'gamegear': ['game gear', 'gg', 'sega game gear'],
    'gb': ['game boy', 'gameboy', 'nintendo game boy'],
    'gbc': ['game boy color', 'gameboy color', 'game boy colour'],
    'gba': ['game boy advance', 'gameboy advance'],
    'intellivision': ['mattel intellivision'],
    'mame': ['arcade', 'multiple arcade machine emulator'],
    'mastersystem': ['master system', 'sms', 'sega master system', 'mark iii'],
    'megacd': ['mega cd', 'sega cd', 'sega mega cd', 'segacd'],
    'megadrive': ['mega drive', 'genesis', 'sega genesis', 'sega mega drive', 'md'],
    'msx': ['msx1'],
    'msx2': ['msx 2'],
    'n64': ['nintendo 64', 'nintendo64'],
    'naomi': ['sega naomi'],
    'nds': ['nintendo ds', 'ds'],
    'neogeo': ['neo geo', 'neo-geo', 'neo geo aes', 'neo geo mvs', 'snk neo geo'],
    'neogeocd': ['neo geo cd', 'neo-geo cd', 'neocd'],
    'neogeopocket': ['ngp', 'neo geo pocket'],
    'neogeopocketcolor': ['ngpc', 'neo geo pocket color'],
    'nes': ['nintendo entertainment system', 'famicom', 'fc', 'nintendo famicom'],
    'o2em': ['odyssey 2', 'odyssey2', 'videopac', 'magnavox odyssey 2'],
    'pcengine': ['pc engine', 'tg16', 'turbografx', 'turbografx-16', 'tg-16'],
    'pcenginecd': ['pc engine cd', 'tg-cd', 'turbografx cd', 'turbo cd'],
    'pcfx': ['pc-fx', 'nec pc-fx'],
    'pokemini': ['pokemon mini', 'pokemon-mini'],
    'psx': ['playstation', 'ps1', 'playstation 1', 'sony playstation'],
    'ps2': ['playstation 2', 'sony playstation 2'],
    'ps3': ['playstation 3', 'sony playstation 3'],
    'psp': ['playstation portable', 'sony psp'],
    'psvita': ['ps vita', 'vita', 'playstation vita'],
    'saturn': ['sega saturn', 'ss'],
    'sega32x': ['32x', 'sega 32x', 'genesis 32x', 'mega drive 32x'],
    'sg1000': ['sg-1000', 'sega sg-1000'],
    'snes': ['super nintendo', 'super famicom', 'sfc', 'super nes',
             'super nintendo entertainment system'],
    'switch': ['nintendo switch', 'nswitch'],
    'vectrex': ['gce vectrex'],
    'virtualboy': ['virtual boy', 'vb', 'nintendo virtual boy'],
    'wii': ['nintendo wii'],
    'wiiu': ['wii u', 'nintendo wii u'],
    'wswan': ['wonderswan', 'ws', 'bandai wonderswan'],
    'wswanc': ['wonderswan color', 'wsc'],
    'x68000': ['sharp x68000'],
    'xbox': ['microsoft xbox'],
    'xbox360': ['xbox 360', 'x360', 'microsoft xbox 360'],
    'zxspectrum': ['zx spectrum', 'spectrum', 'sinclair zx spectrum'],
}

# Aliases shorter than this only match exactly ('ds' must not match 'nds')
MIN_ALIAS_SUBSTRING = 4


def normalize_platform_name(name: str) -> str:
    """'Sega - Mega Drive' -> 'segamegadrive'"""
    return re.sub(r'[^a-z0-9]', '', (name or '').lower())


def _contains_either(a: str, b: str) -> bool:
    return bool(a) and bool(b) and (a in b or b in a)


def _alias_hit(name: str, alias: str) -> bool:
    if not name or not alias:
        return False
    if len(alias) < MIN_ALIAS_SUBSTRING or len(name) < MIN_ALIAS_SUBSTRING:
        return name == alias
    return _contains_either(name, alias)


def _spellings(canonical: str) -> List[str]:
    return [normalize_platform_name(s) for s in [canonical] + PLATFORM_ALIASES[canonical]]


def find_matching_platform(file_name: str, platform_names: Iterable[str]) -> Optional[str]:
    """
    Guess which of ``platform_names`` an owned-list file belongs to.

    Tries a case-insensitive containment check first, then the same on
    normalized names, then the alias table. Returns None when nothing fits.
    """
    stem = os.path.splitext(os.path.basename(file_name or ''))[0]
    stem_lower = stem.lower().strip()
    stem_norm = normalize_platform_name(stem)
    if not stem_norm:
        return None

    for platform in platform_names:
        platform_lower = platform.lower().strip()
        platform_norm = normalize_platform_name(platform)

        if _contains_either(stem_lower, platform_lower):
            return platform
        if _contains_either(stem_norm, platform_norm):
            return platform

        for canonical in PLATFORM_ALIASES:
            spellings = _spellings(canonical)
            if not any(_alias_hit(platform_norm, s) for s in spellings):
                continue
            if any(_alias_hit(stem_norm, s) for s in spellings):
                return platform

    return None
