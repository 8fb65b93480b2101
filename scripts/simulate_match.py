#!/usr/bin/env python3
"""
Headless Match Runner

Plays full matches with the match engine: map selection, an auto-resolved
draft (every turn times out), then rounds until a team wins.

Usage:
    # Single match with the demo fixture
    python scripts/simulate_match.py

    # Reproducible run
    python scripts/simulate_match.py --seed 42

    # Batch of matches with a summary
    python scripts/simulate_match.py --matches 50 --seed 1 -o output/batch.json
"""

import sys
import os
import json
import asyncio
import argparse
import random
from pathlib import Path
from typing import Dict, List, Any, Optional

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from matchsim.config import get_settings
from matchsim.services.match_engine import MatchEngine, MatchPhase, MatchState
from matchsim.services.providers import InMemoryFixtureProvider, InMemoryRosterProvider
from matchsim.services.round_engine import round_summary

# Guard against a state machine that never finishes
MAX_UNITS = 1_000_000


def play_to_completion(engine: MatchEngine, state: MatchState) -> MatchState:
    """Tick the match until it completes, starting playback when simulation begins."""
    units = 0
    while not state.is_completed:
        if state.phase == MatchPhase.SIMULATION and not state.is_playing:
            state = engine.set_playing(state, True)
        state = engine.tick(state, 1)
        units += 1
        if units > MAX_UNITS:
            raise RuntimeError(f"Match {state.match_id} did not finish after {MAX_UNITS} units")
    return state


async def run_match(fixture_id: str, seed: Optional[int]) -> Dict[str, Any]:
    fixtures = InMemoryFixtureProvider()
    rosters = InMemoryRosterProvider()

    fixture = await fixtures.get_fixture(fixture_id)
    home = await rosters.get_team_roster(fixture.home_team_id)
    away = await rosters.get_team_roster(fixture.away_team_id)

    engine = MatchEngine(get_settings(), rng=random.Random(seed))
    state = play_to_completion(engine, engine.create_match(fixture, home, away))
    result = state.result

    return {
        'fixture_id': fixture.id,
        'seed': seed,
        'map': result.map_name,
        'home_team': fixture.home_team_id,
        'away_team': fixture.away_team_id,
        'home_agents': [a.name for a in state.home_agents],
        'away_agents': [a.name for a in state.away_agents],
        'winner': result.winner,
        'score': f"{result.home_score}-{result.away_score}",
        'rounds_played': result.rounds_played,
        'duration_minutes': round(result.duration_minutes, 1),
        'mvp': result.mvp.as_dict() if result.mvp else None,
        'analysis': result.analysis,
        'player_stats': [s.as_dict() for s in result.player_stats],
        'rounds': [round_summary(r) for r in result.rounds],
    }


def print_match(result: Dict[str, Any]):
    print(f"\nResult: {result['home_team']} {result['score']} {result['away_team']} on {result['map']}")
    print(f"  Winner: {result['winner']}")
    print(f"  Rounds: {result['rounds_played']} ({result['duration_minutes']} min)")
    print(f"  Home agents: {', '.join(result['home_agents'])}")
    print(f"  Away agents: {', '.join(result['away_agents'])}")
    if result['mvp']:
        mvp = result['mvp']
        print(f"  MVP: {mvp['name']} ({mvp['kills']}/{mvp['deaths']}, rating {mvp['rating']})")
    for line in result['analysis']:
        print(f"  - {line}")


def print_summary(results: List[Dict[str, Any]]):
    total = len(results)
    home_wins = sum(1 for r in results if r['winner'] == 'home')
    overtime = sum(1 for r in results if r['rounds_played'] > 24)
    avg_rounds = sum(r['rounds_played'] for r in results) / total

    print(f"\n{'='*60}")
    print(f"MATCH SUMMARY ({total} matches)")
    print(f"{'='*60}")
    print(f"  Home Win Rate: {home_wins}/{total} ({100*home_wins/total:.1f}%)")
    print(f"  Average Rounds: {avg_rounds:.1f}")
    print(f"  Overtime: {overtime} ({100*overtime/total:.1f}%)")

    maps = {}
    for r in results:
        maps[r['map']] = maps.get(r['map'], 0) + 1
    print(f"  Maps:")
    for name, count in sorted(maps.items()):
        print(f"    {name}: {count}")


async def run_batch(fixture_id: str, matches: int, seed: Optional[int]) -> List[Dict[str, Any]]:
    results = []
    for i in range(matches):
        match_seed = None if seed is None else seed + i
        results.append(await run_match(fixture_id, match_seed))
    return results


def main():
    parser = argparse.ArgumentParser(
        description="Play full matches headlessly",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/simulate_match.py --seed 42
  python scripts/simulate_match.py --matches 100 --seed 1 -o output/batch.json
        """
    )

    parser.add_argument('--fixture', '-f', default='demo',
                       help='Fixture id from the demo data (default: demo)')
    parser.add_argument('--matches', '-n', type=int, default=1,
                       help='Number of matches to play (default: 1)')
    parser.add_argument('--seed', '-s', type=int, default=None,
                       help='Random seed (default: nondeterministic)')
    parser.add_argument('--output', '-o', type=str,
                       help='Output JSON file path')

    args = parser.parse_args()

    results = asyncio.run(run_batch(args.fixture, args.matches, args.seed))
    if args.matches == 1:
        print_match(results[0])
    else:
        print_summary(results)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(results[0] if args.matches == 1 else results, f, indent=2, default=str)
        print(f"\nSaved to {output_path}")


if __name__ == "__main__":
    main()
