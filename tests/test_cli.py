import json
import os
import tempfile

from romtracker.cli import create_parser, run_cli

TESTSYS_DAT = """<?xml version="1.0"?>
<datafile>
    <header><name>TestSys</name></header>
    <game name="a.zip"><description>Alpha (USA)</description></game>
    <game name="a_eu.zip"><description>Alpha (Europe)</description></game>
</datafile>
"""


def _write(path, content):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    return path


def test_parser_defaults():
    args = create_parser().parse_args([])
    assert args.dat == []
    assert args.owned == []
    assert args.status == 'all'
    assert not args.full_rematch


def test_requires_a_catalog(capsys):
    assert run_cli([]) == 1
    assert "--dat is required" in capsys.readouterr().out


def test_missing_catalog_file_fails():
    assert run_cli(['--dat', '/nonexistent/catalog.dat', '--quiet']) == 1


def test_match_and_print_summary(capsys):
    with tempfile.TemporaryDirectory() as tmp:
        dat = _write(os.path.join(tmp, 'testsys.dat'), TESTSYS_DAT)
        owned = _write(os.path.join(tmp, 'testsys.txt'), "a.zip\n")

        assert run_cli(['--dat', dat, '--owned', owned]) == 0

    out = capsys.readouterr().out
    assert "TestSys: 1/2 (50.0%)" in out


def test_unresolvable_owned_list_fails():
    with tempfile.TemporaryDirectory() as tmp:
        dat = _write(os.path.join(tmp, 'testsys.dat'), TESTSYS_DAT)
        owned = _write(os.path.join(tmp, 'mystery.txt'), "a.zip\n")

        assert run_cli(['--dat', dat, '--owned', owned, '--quiet']) == 1
        assert run_cli(['--dat', dat, '--owned', f'TestSys={owned}', '--quiet']) == 0


def test_broken_catalog_is_skipped_when_others_load():
    with tempfile.TemporaryDirectory() as tmp:
        dat = _write(os.path.join(tmp, 'testsys.dat'), TESTSYS_DAT)
        broken = _write(os.path.join(tmp, 'broken.dat'), "<datafile>")
        owned = _write(os.path.join(tmp, 'testsys.txt'), "a.zip\n")

        assert run_cli(['--dat', broken, '--dat', dat, '--owned', owned, '--quiet']) == 0
        assert run_cli(['--dat', broken, '--quiet']) == 1


def test_state_file_makes_runs_incremental():
    with tempfile.TemporaryDirectory() as tmp:
        dat = _write(os.path.join(tmp, 'testsys.dat'), TESTSYS_DAT)
        owned = _write(os.path.join(tmp, 'testsys.txt'), "a.zip\n")
        state_path = os.path.join(tmp, 'state.json')

        assert run_cli(['--dat', dat, '--owned', owned, '--state', state_path, '--quiet']) == 0
        with open(state_path, encoding='utf-8') as f:
            first = json.load(f)
        assert first['state']['catalog_fingerprints'] == {'TestSys': ['testsys.dat', 'TestSys', 2]}
        assert len(first['results']) == 2

        # Catalogs and owned lists come back from the state file
        assert run_cli(['--state', state_path, '--quiet']) == 0

        _write(owned, "a.zip\na_eu.zip\n")
        assert run_cli(['--owned', owned, '--state', state_path, '--quiet']) == 0
        with open(state_path, encoding='utf-8') as f:
            second = json.load(f)
        assert all(r['owned'] for r in second['results'])
        assert second['state']['owned_fingerprints'] == {'TestSys': ['TestSys', 2]}


def test_missing_report_export():
    with tempfile.TemporaryDirectory() as tmp:
        dat = _write(os.path.join(tmp, 'testsys.dat'), TESTSYS_DAT)
        owned = _write(os.path.join(tmp, 'testsys.txt'), "a.zip\n")
        report_path = os.path.join(tmp, 'missing.json')

        code = run_cli(['--dat', dat, '--owned', owned, '--report', 'missing',
                        '--status', 'missing', '--report-output', report_path, '--quiet'])
        assert code == 0
        with open(report_path, encoding='utf-8') as f:
            report = json.load(f)

    assert report['missing_count'] == 1
    assert report['by_platform']['TestSys']['missing'][0]['reference_name'] == 'a_eu.zip'
    assert report['by_platform']['TestSys']['missing'][0]['owned_in_other_region'] is True
