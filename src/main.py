# Entry point for generating a bracket from the command line

import argparse
import logging
import random
import sys

from brackets.errors import BracketError
from brackets.generator import generate
from brackets.models import FORMATS, GRAND_FINAL, LOSERS, ROUND_ROBIN_KIND, SEEDING_MODES, WINNERS
from config import load_config, load_participants


def format_match(match):
    slot_a = match.slot_a if match.slot_a is not None else 'TBD'
    slot_b = match.slot_b if match.slot_b is not None else 'TBD'
    line = f"  [{match.id}] {slot_a} vs {slot_b}"
    if match.is_bye:
        line += f"  (bye, {match.winner_id or 'nobody'} advances)"
    elif match.winner_id:
        line += f"  -> {match.winner_id}"
    if match.advances_winner_to:
        line += f"  | winner to {match.advances_winner_to}"
    if match.advances_loser_to:
        line += f"  | loser to {match.advances_loser_to}"
    return line


def print_bracket(bracket):
    for kind in (WINNERS, LOSERS, GRAND_FINAL, ROUND_ROBIN_KIND):
        for round_num, matches in bracket.rounds(kind).items():
            print(f"\n{matches[0].round_name} ({kind} round {round_num})")
            for match in matches:
                print(format_match(match))


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a tournament bracket.')
    parser.add_argument('participants', help='YAML file listing participant ids')
    parser.add_argument('--config', help='Path to bracket.yaml settings')
    parser.add_argument('--format', choices=FORMATS)
    parser.add_argument('--seeding', choices=SEEDING_MODES)
    parser.add_argument('--random-seed', type=int)
    parser.add_argument('--tournament-id', default='tournament')
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        logging.basicConfig(level=config['log_level'],
                            format='%(asctime)s %(levelname)s %(name)s: %(message)s')
        random_seed = args.random_seed if args.random_seed is not None else config['random_seed']
        bracket = generate(
            load_participants(args.participants),
            format=args.format or config['format'],
            seeding=args.seeding or config['seeding'],
            tournament_id=args.tournament_id,
            rng=random.Random(random_seed) if random_seed is not None else None,
        )
    except (BracketError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"--- {bracket.format} bracket for {bracket.tournament_id} ---")
    print(f"{len(bracket.participants)} participants, {bracket.slot_count} slots, "
          f"{len(bracket)} matches")
    print_bracket(bracket)
    return 0


if __name__ == '__main__':
    sys.exit(main())
