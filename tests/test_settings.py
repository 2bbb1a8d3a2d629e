import json
import os
import tempfile

from romtracker.settings import DEFAULT_SETTINGS, load_settings, matching_options, save_settings


def test_missing_file_gives_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        settings = load_settings(os.path.join(tmp, 'settings.json'))
    assert settings == DEFAULT_SETTINGS
    assert settings is not DEFAULT_SETTINGS


def test_partial_file_is_merged_over_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, 'cfg', 'settings.json')
        save_settings({'matching': {'max_workers': 4}}, path)
        settings = load_settings(path)

    assert settings['matching'] == {'chunk_size': 250, 'max_workers': 4}
    assert settings['logging'] == DEFAULT_SETTINGS['logging']


def test_unreadable_file_gives_defaults():
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, 'settings.json')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('{broken')
        assert load_settings(path) == DEFAULT_SETTINGS


def test_matching_options_are_clamped():
    assert matching_options({'matching': {'chunk_size': 0, 'max_workers': -2}}) == {
        'chunk_size': 1, 'max_workers': 1,
    }
    assert matching_options({}) == {'chunk_size': 250, 'max_workers': 1}
