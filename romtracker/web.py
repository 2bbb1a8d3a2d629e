"""
JSON web API for romtracker using Flask.

Catalogs and owned lists are uploaded as text (or read from a server-side
path), matching runs in a background thread, and results are served with
the same filters the CLI report uses.
"""

import logging
import os
import threading
from pathlib import Path

from flask import Flask, jsonify, request

from . import __version__
from .crossplatform import cross_platform_summary, group_cross_platform
from .errors import MatchCancelledError, RomTrackerError
from .filters import ResultFilter, collection_stats, facets, filter_results, missing_names
from .monitor import monitor_action, start_monitored_thread
from .orchestrator import MatchOrchestrator
from .parser import parse_catalog, parse_owned_list
from .platforms import find_matching_platform
from .reporter import MissingReporter
from .session_state import build_snapshot, load_snapshot, restore_orchestrator, save_snapshot
from .settings import load_settings, matching_options

logger = logging.getLogger(__name__)

# Flask app
app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 200 * 1024 * 1024  # MAME catalogs are large

# Global state
state = {
    'orchestrator': MatchOrchestrator(**matching_options(load_settings())),
    'reporter': MissingReporter(),
    'matching': False,
    'progress': {'current': 0, 'total': 0, 'platform': ''},
    'last_error': None,
    'last_outcome': None,
}

_state_lock = threading.Lock()


def _json_body():
    return request.get_json(silent=True) or {}


def _busy():
    return jsonify({'error': 'A match pass is running'}), 400


def _document_from(data, kind):
    """(file_name, content) from either inline content or a server-side path"""
    content = data.get('content')
    file_name = data.get('file_name') or ''
    if content is None:
        path = data.get('path')
        if not path or not os.path.isfile(path):
            raise ValueError(f'{kind} file not found')
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            content = f.read()
        file_name = file_name or os.path.basename(path)
    if not file_name:
        raise ValueError('file_name required')
    return file_name, content


def _criteria_from_args():
    args = request.args
    return ResultFilter.from_dict({
        'platform': args.get('platform'),
        'search': args.get('search'),
        'regions': [r for r in args.getlist('region') if r],
        'status': args.get('status'),
        'category': args.get('category'),
        'release_type': args.get('release_type'),
        'revision': args.get('revision'),
    })


# ── Status ─────────────────────────────────────────────────────

@app.route('/api/status')
def get_status():
    orch = state['orchestrator']
    return jsonify({
        'version': __version__,
        'catalogs': [
            {'platform_name': c.platform_name, 'file_name': c.file_name,
             'entries': len(c.entries)}
            for c in orch.catalogs.values()
        ],
        'owned_lists': [
            {'platform_name': o.platform_name, 'file_name': o.file_name,
             'items': len(o.items)}
            for o in orch.owned_lists.values()
        ],
        'platforms': orch.platforms,
        'pending': list(orch.state.pending),
        'result_count': len(orch.results),
        'matching': state['matching'],
        'progress': state['progress'],
        'last_error': state['last_error'],
    })


# ── Catalogs ───────────────────────────────────────────────────

@app.route('/api/catalogs', methods=['POST'])
def add_catalog():
    try:
        file_name, content = _document_from(_json_body(), 'Catalog')
    except (OSError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    result = parse_catalog(content, file_name)
    if not result.ok:
        return jsonify({'error': str(result.error)}), 400

    with _state_lock:
        if state['matching']:
            return _busy()
        changes = state['orchestrator'].add_catalog(result.catalog)
    monitor_action(f"catalog added: {result.catalog.platform_name}")
    return jsonify({
        'success': True,
        'platform_name': result.catalog.platform_name,
        'entries': len(result.catalog.entries),
        'queued': changes.queued,
        'needs_match': changes.needs_match,
    })


@app.route('/api/catalogs/remove', methods=['POST'])
def remove_catalog():
    platform = _json_body().get('platform')
    if not platform:
        return jsonify({'error': 'platform required'}), 400
    with _state_lock:
        if state['matching']:
            return _busy()
        changes = state['orchestrator'].remove_catalog(platform)
    return jsonify({'success': True, 'deleted': changes.deleted})


# ── Owned lists ────────────────────────────────────────────────

@app.route('/api/owned', methods=['POST'])
def set_owned_list():
    data = _json_body()
    try:
        file_name, content = _document_from(data, 'Owned list')
    except (OSError, ValueError) as e:
        return jsonify({'error': str(e)}), 400

    with _state_lock:
        if state['matching']:
            return _busy()
        orch = state['orchestrator']
        platform = data.get('platform') or find_matching_platform(file_name, list(orch.catalogs))
        if not platform:
            return jsonify({'error': f'Cannot tell which platform {file_name} belongs to'}), 400
        owned = parse_owned_list(content, platform, file_name)
        changes = orch.set_owned_list(owned)
    return jsonify({
        'success': True,
        'platform_name': platform,
        'items': len(owned.items),
        'queued': changes.queued,
        'needs_match': changes.needs_match,
    })


@app.route('/api/owned/remove', methods=['POST'])
def remove_owned_list():
    platform = _json_body().get('platform')
    if not platform:
        return jsonify({'error': 'platform required'}), 400
    with _state_lock:
        if state['matching']:
            return _busy()
        changes = state['orchestrator'].remove_owned_list(platform)
    return jsonify({'success': True, 'deleted': changes.deleted})


# ── Matching ───────────────────────────────────────────────────

def _on_progress(event):
    state['progress'] = {
        'current': event.current_index,
        'total': event.total_count,
        'platform': event.platform_name,
    }


def _match_thread():
    try:
        outcome = state['orchestrator'].match(progress_callback=_on_progress)
        state['last_outcome'] = {
            'processed': outcome.processed,
            'skipped': outcome.skipped,
            'result_count': len(outcome.results),
        }
    except MatchCancelledError:
        state['last_error'] = 'cancelled'
    except RomTrackerError as e:
        logger.warning("Match pass failed: %s", e)
        state['last_error'] = str(e)
    finally:
        with _state_lock:
            state['matching'] = False


@app.route('/api/match', methods=['POST'])
def start_match():
    wait = bool(_json_body().get('wait', False))
    with _state_lock:
        if state['matching']:
            return _busy()
        state['matching'] = True
        state['last_error'] = None
        state['progress'] = {'current': 0, 'total': 0, 'platform': ''}

    if wait:
        _match_thread()
        if state['last_error']:
            return jsonify({'error': state['last_error']}), 400
        return jsonify({'success': True, 'outcome': state['last_outcome']})

    start_monitored_thread(_match_thread, name='match-pass')
    return jsonify({'success': True, 'message': 'Match started'})


@app.route('/api/match/progress')
def match_progress():
    return jsonify({
        'matching': state['matching'],
        'progress': state['progress'],
        'last_error': state['last_error'],
        'outcome': state['last_outcome'],
    })


@app.route('/api/match/cancel', methods=['POST'])
def cancel_match():
    cancelled = state['orchestrator'].cancel()
    return jsonify({'success': True, 'cancelled': cancelled})


@app.route('/api/rematch', methods=['POST'])
def rematch():
    platform = _json_body().get('platform')
    with _state_lock:
        if state['matching']:
            return _busy()
        orch = state['orchestrator']
        if platform:
            orch.rematch_platform(platform)
        else:
            orch.full_rematch()
        pending = list(orch.state.pending)
    return jsonify({'success': True, 'pending': pending})


# ── Results ────────────────────────────────────────────────────

@app.route('/api/results')
def get_results():
    try:
        criteria = _criteria_from_args()
        offset = max(0, int(request.args.get('offset', 0)))
        limit = request.args.get('limit')
        limit = int(limit) if limit is not None else None
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    results = filter_results(state['orchestrator'].results, criteria)
    page = results[offset:offset + limit] if limit is not None else results[offset:]
    return jsonify({
        'total': len(results),
        'stats': collection_stats(results),
        'results': [r.to_dict() for r in page],
    })


@app.route('/api/facets')
def get_facets():
    return jsonify(facets(state['orchestrator'].results))


@app.route('/api/stats')
def get_stats():
    try:
        criteria = _criteria_from_args()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    orch = state['orchestrator']
    filtered = filter_results(orch.results, criteria)
    return jsonify({
        'overall': collection_stats(filtered),
        'by_platform': {
            p: collection_stats(r for r in filtered if r.platform_name == p)
            for p in orch.platforms
        },
    })


@app.route('/api/cross-platform')
def get_cross_platform():
    try:
        min_platforms = max(1, int(request.args.get('min_platforms', 2)))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    grouped = group_cross_platform(state['orchestrator'].results, min_platforms)
    search = (request.args.get('search') or '').lower()
    if search:
        grouped = [g for g in grouped if search in g.title.lower()]
    return jsonify({
        'summary': cross_platform_summary(grouped),
        'titles': [g.to_dict() for g in grouped],
    })


@app.route('/api/missing')
def get_missing():
    try:
        criteria = _criteria_from_args()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    orch = state['orchestrator']
    filtered = filter_results(orch.results, criteria)
    report = state['reporter'].generate_multi_report(filtered, orch.platforms)
    report['names'] = missing_names(filtered)
    return jsonify(report)


# ── Persistence ────────────────────────────────────────────────

def _state_path(data):
    return Path(data.get('path') or load_settings()['state_path'])


@app.route('/api/state/save', methods=['POST'])
def save_state():
    path = _state_path(_json_body())
    with _state_lock:
        if state['matching']:
            return _busy()
        snapshot = build_snapshot(state['orchestrator'])
    try:
        save_snapshot(snapshot, path)
    except OSError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({'success': True, 'path': str(path)})


@app.route('/api/state/load', methods=['POST'])
def load_state():
    path = _state_path(_json_body())
    snapshot = load_snapshot(path)
    if not snapshot:
        return jsonify({'error': 'No saved state found'}), 400
    orchestrator = restore_orchestrator(snapshot, **matching_options(load_settings()))
    with _state_lock:
        if state['matching']:
            return _busy()
        state['orchestrator'] = orchestrator
    return jsonify({'success': True, 'platforms': orchestrator.platforms})


def run_server(host='127.0.0.1', port=5000, debug=False):
    """Run the web server"""
    monitor_action(f"run_server called: host={host} port={port} debug={debug}", logger=logger)
    print(f"romtracker {__version__} - Web API")
    print("=" * 50)
    print(f"Listening on: http://{host}:{port}/api/status")
    print("Press Ctrl+C to stop")
    print()
    app.run(host=host, port=port, debug=debug, threaded=True)
