# Entry point for planning a tournament from a registrations file

import argparse
import logging
import os

import yaml

from engine.elimination import generate_bracket, get_round_name
from engine.models import Registration
from engine.pools import build_pools
from engine.registration import get_expired_registration_user_ids
from engine.settings import load_settings
from engine.team_formation import create_teams_from_registrations


def load_registrations(file_path):
    """Load tournament id, display names and registrations from YAML."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}
    registrations = [Registration.from_dict(r) for r in data.get('registrations', [])]
    return data.get('tournament_id', 'tournament'), data.get('user_names', {}), registrations


def print_pools(pools, team_names):
    for pool in pools:
        print(f"\n# {pool.name}")
        for team_id in pool.team_ids:
            print(f"  {team_names[team_id]}")
        for entry in pool.schedule:
            print(f"  Round {entry.round}: {team_names[entry.team1_id]} vs {team_names[entry.team2_id]}")


def print_bracket(slots, team_names):
    first_round = [s for s in slots if s.round == 1]
    print(f"\n# {get_round_name(len(first_round) * 2)}")
    for slot in first_round:
        team1 = team_names.get(slot.team1_id, 'BYE')
        team2 = team_names.get(slot.team2_id, 'BYE')
        print(f"  {team1} vs {team2}")


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Plan teams, pools and bracket from registrations.')
    parser.add_argument('registrations', nargs='?',
                        default=os.path.join(base_dir, 'data', 'registrations.yaml'))
    parser.add_argument('--settings', help='Engine settings YAML file')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = load_settings(args.settings)
    tournament_id, user_names, registrations = load_registrations(args.registrations)

    expired = set(get_expired_registration_user_ids(
        registrations, expiry_days=settings['registration_expiry_days']))
    active = [r for r in registrations
              if r.status in ('pending', 'confirmed') and r.user_id not in expired]
    if expired:
        print(f"Skipping {len(expired)} expired registration(s)")

    result = create_teams_from_registrations(
        active, tournament_id, settings['team_formation_mode'],
        user_names=user_names, default_rating=settings['default_skill_rating'])

    if not result.teams:
        print("No teams formed. Check the registrations file.")
        return
    for reg in result.unmatched:
        print(f"Unmatched: {user_names.get(reg.user_id, reg.user_id)}")

    team_names = {team.id: team.name for team in result.teams}
    if settings['tournament_format'] == 'single-elimination':
        print_bracket(generate_bracket(tournament_id, list(team_names)), team_names)
    else:
        pool_count = 1 if settings['tournament_format'] == 'round-robin' else settings['pool_count']
        print_pools(build_pools(tournament_id, result.teams, pool_count), team_names)


if __name__ == '__main__':
    main()
