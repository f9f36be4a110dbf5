"""
Flask JSON API exposing the tournament engine.

Every endpoint is stateless: the caller sends the records it holds, the
engine computes, and the response carries what should be written back.
"""
from functools import wraps

from flask import Flask, jsonify, request

from engine.advancement import advance_bracket_winner, check_rescore_safety, find_slot
from engine.completion import check_phase_transition, validate_bracket_completion, validate_pool_completion
from engine.elimination import generate_bracket, seed_bracket_from_pools
from engine.models import BracketSlot, Match, Pool, PoolStanding, Registration, Team
from engine.player_stats import get_player_matches, get_player_stats
from engine.pools import build_pools, generate_round_robin_schedule
from engine.registration import get_expired_registration_user_ids
from engine.settings import load_settings
from engine.standings import calculate_standings
from engine.team_formation import create_teams_from_registrations
from engine.tiers import PlayerStats, record_match_result

app = Flask(__name__)
app.config['ENGINE_SETTINGS'] = load_settings()


def _settings():
    return app.config['ENGINE_SETTINGS']


def _payload() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object.')
    return data


def json_endpoint(f):
    """Turn payload errors into a 400 with {'success': False, 'error': ...}."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            result = f(*args, **kwargs)
        except KeyError as e:
            app.logger.warning(f'{request.path}: missing field {e}')
            return jsonify({'success': False, 'error': f'Missing field: {e.args[0]}'}), 400
        except (TypeError, ValueError) as e:
            app.logger.warning(f'{request.path}: {e}')
            return jsonify({'success': False, 'error': str(e)}), 400
        return jsonify({'success': True, **result})
    return decorated_function


def _slots(data, key='slots'):
    return [BracketSlot.from_dict(s) for s in data.get(key, [])]


def _pools(data):
    return [Pool.from_dict(p) for p in data.get('pools', [])]


@app.route('/api/settings', methods=['GET'])
def api_settings():
    """Return the active engine settings."""
    return jsonify({'success': True, 'settings': _settings()})


@app.route('/api/teams/form', methods=['POST'])
@json_endpoint
def api_form_teams():
    """Create teams from registrations once registration closes."""
    data = _payload()
    registrations = [Registration.from_dict(r) for r in data.get('registrations', [])]
    user_names = data.get('user_names') or {}
    if not isinstance(user_names, dict):
        raise ValueError('user_names must be an object mapping user ids to display names.')
    result = create_teams_from_registrations(
        registrations,
        data['tournament_id'],
        data.get('mode', _settings()['team_formation_mode']),
        user_names=user_names,
        default_rating=_settings()['default_skill_rating'],
    )
    return result.to_dict()


@app.route('/api/pools/generate', methods=['POST'])
@json_endpoint
def api_generate_pools():
    """Snake-draft seeded teams into pools, each with a round-robin schedule."""
    data = _payload()
    teams = [Team.from_dict(t) for t in data.get('teams', [])]
    pool_count = int(data.get('pool_count', _settings()['pool_count']))
    pools = build_pools(data['tournament_id'], teams, pool_count)
    return {
        'pools': [pool.to_dict() for pool in pools],
        'teams': [team.to_dict() for team in teams],
    }


@app.route('/api/pools/schedule', methods=['POST'])
@json_endpoint
def api_pool_schedule():
    """Round-robin schedule for a single pool."""
    data = _payload()
    schedule = generate_round_robin_schedule(data.get('team_ids', []))
    return {'schedule': [entry.to_dict() for entry in schedule]}


@app.route('/api/standings', methods=['POST'])
@json_endpoint
def api_standings():
    """Standings for a set of teams from their completed matches."""
    data = _payload()
    matches = [Match.from_dict(m) for m in data.get('matches', [])]
    standings = calculate_standings(data.get('team_ids', []), matches)
    return {'standings': [s.to_dict() for s in standings]}


@app.route('/api/bracket/generate', methods=['POST'])
@json_endpoint
def api_generate_bracket():
    """Single-elimination bracket from a seeded team list."""
    data = _payload()
    slots = generate_bracket(data['tournament_id'], data.get('team_ids', []))
    return {'slots': [slot.to_dict() for slot in slots]}


@app.route('/api/bracket/seed', methods=['POST'])
@json_endpoint
def api_seed_bracket():
    """Cross-pool bracket seeding from sorted pool standings."""
    data = _payload()
    pool_standings = [
        [PoolStanding.from_dict(s) for s in pool]
        for pool in data.get('standings', [])
    ]
    advancing = int(data.get('teams_per_pool_advancing', _settings()['teams_per_pool_advancing']))
    return {'team_ids': seed_bracket_from_pools(pool_standings, advancing)}


@app.route('/api/bracket/advance', methods=['POST'])
@json_endpoint
def api_advance_winner():
    """Where a slot's winner moves next; 'advance' is null for the final."""
    data = _payload()
    slots = _slots(data)
    current = find_slot(data['slot_id'], slots)
    if current is None:
        raise ValueError(f"Slot {data['slot_id']} not found.")
    advance = advance_bracket_winner(current, data['winner_id'], slots)
    return {'advance': advance.to_dict() if advance else None}


@app.route('/api/bracket/rescore-check', methods=['POST'])
@json_endpoint
def api_rescore_check():
    """Whether a decided slot may change its winner."""
    data = _payload()
    slots = _slots(data)
    current = find_slot(data['slot_id'], slots)
    if current is None:
        raise ValueError(f"Slot {data['slot_id']} not found.")
    return check_rescore_safety(current, data['winner_id'], slots).to_dict()


@app.route('/api/validate/pools', methods=['POST'])
@json_endpoint
def api_validate_pools():
    return validate_pool_completion(_pools(_payload())).to_dict()


@app.route('/api/validate/bracket', methods=['POST'])
@json_endpoint
def api_validate_bracket():
    return validate_bracket_completion(_slots(_payload())).to_dict()


@app.route('/api/tournament/transition', methods=['POST'])
@json_endpoint
def api_phase_transition():
    """Check a tournament status change against the data collected so far."""
    data = _payload()
    check = check_phase_transition(
        data.get('format', _settings()['tournament_format']),
        data['current_status'],
        data['target_status'],
        team_count=int(data.get('team_count', 0)),
        pools=_pools(data),
        slots=_slots(data),
        paused_from=data.get('paused_from'),
    )
    return check.to_dict()


@app.route('/api/registrations/expired', methods=['POST'])
@json_endpoint
def api_expired_registrations():
    data = _payload()
    registrations = [Registration.from_dict(r) for r in data.get('registrations', [])]
    user_ids = get_expired_registration_user_ids(
        registrations,
        now=data.get('now'),
        expiry_days=_settings()['registration_expiry_days'],
    )
    return {'user_ids': user_ids}


@app.route('/api/ratings/record', methods=['POST'])
@json_endpoint
def api_record_rating():
    """Fold a completed match into a player's stats and return the new tier."""
    data = _payload()
    stats = PlayerStats.from_dict(data.get('stats') or {}, capacity=_settings()['ring_buffer_size'])
    record_match_result(
        stats,
        data['result'],
        opponent_tier=data.get('opponent_tier', 'beginner'),
        completed_at=data.get('completed_at'),
        game_type=data.get('game_type', 'doubles'),
        unique_opponents=data.get('unique_opponents'),
    )
    return {'stats': stats.to_dict()}


@app.route('/api/players/stats', methods=['POST'])
@json_endpoint
def api_player_stats():
    """A team's record and match list across pools and bracket."""
    data = _payload()
    pools = _pools(data)
    bracket = _slots(data, 'bracket')
    team_id = data['team_id']
    return {
        'stats': get_player_stats(team_id, pools, bracket),
        'matches': get_player_matches(team_id, pools, bracket, data.get('team_names')),
    }


if __name__ == '__main__':
    app.run(debug=True, port=5000)
