"""System prompts for timeout advice."""

from typing import TYPE_CHECKING

from ..sides import TeamSide

if TYPE_CHECKING:
    from ..match_engine import MatchState

BASE_PROMPT = """You are an expert esports analyst and coach specializing in tactical FPS games. You are speaking to your team during a tactical timeout.

Rules:
- One or two sentences, no more. The timeout is 30 seconds long.
- Be specific to the score, economy and map you are given.
- Use esports terminology naturally (eco, force buy, retake, lurk, trade).
- Never ask questions back. Give a call."""

SYSTEM_PROMPTS = {
    "coach": f"""{BASE_PROMPT}

You are the head coach. Focus on mentality, composure and the team's game plan.""",

    "analyst": f"""{BASE_PROMPT}

You are the team analyst. Focus on the opponent's economy, tendencies and the numbers.""",

    "player": f"""{BASE_PROMPT}

You are one of the five players on the server. Speak in first person about what you will do next round.""",
}


def get_system_prompt(role: str) -> str:
    return SYSTEM_PROMPTS.get(role, SYSTEM_PROMPTS["player"])


def build_timeout_prompt(state: "MatchState", side: TeamSide, question: str = "") -> str:
    """User prompt describing the match at the moment of the timeout."""
    own_score = state.score_for(side)
    their_score = state.score_for(side.opponent)
    own_agents = state.home_agents if side == TeamSide.HOME else state.away_agents
    their_agents = state.away_agents if side == TeamSide.HOME else state.home_agents

    prompt = "Match Context:\n"
    prompt += f"- Map: {state.map_layout.display_name if state.map_layout else 'Unknown'}\n"
    prompt += f"- Score: {own_score} - {their_score} (us first)\n"
    prompt += f"- Rounds played: {state.current_round}\n"
    prompt += f"- Our credits: {state.economy.for_side(side)}\n"
    prompt += f"- Their credits: {state.economy.for_side(side.opponent)}\n"
    if own_agents:
        prompt += f"- Our agents: {', '.join(a.name for a in own_agents)}\n"
    if their_agents:
        prompt += f"- Their agents: {', '.join(a.name for a in their_agents)}\n"

    recent = state.history[-3:]
    if recent:
        prompt += "\nRecent rounds:\n"
        for r in recent:
            outcome = "won" if r.winner == side else "lost"
            prompt += f"- Round {r.round_number}: {outcome} ({r.end_condition.value})\n"

    if question:
        prompt += f'\nQuestion from the team: "{question}"\n'

    prompt += "\nWhat should we do next round?"
    return prompt
