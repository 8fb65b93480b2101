"""Agent catalog for the draft.

Static reference data: every agent a side can ban or pick, with its role
and difficulty rating. Loaded once at startup and never mutated.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
from enum import Enum


class Role(Enum):
    DUELIST = "duelist"
    INITIATOR = "initiator"
    CONTROLLER = "controller"
    SENTINEL = "sentinel"


class AgentNotFound(Exception):
    """Raised when an agent id is not in the catalog."""

    def __init__(self, agent_id: int):
        super().__init__(f"Agent {agent_id} not found")
        self.agent_id = agent_id


@dataclass(frozen=True)
class Agent:
    """A draftable agent."""
    id: int
    name: str
    role: Role
    difficulty: int  # 1-5
    description: str = ""


DEFAULT_AGENTS: List[Agent] = [
    # Duelists
    Agent(1, "Phoenix", Role.DUELIST, 2, "Aggressive entry fragger with fire-based abilities for healing and area denial"),
    Agent(2, "Jett", Role.DUELIST, 3, "Highly mobile wind-based agent perfect for quick rotations and aggressive plays"),
    Agent(3, "Reyna", Role.DUELIST, 4, "Soul-harvesting vampire who gets stronger with each kill"),
    Agent(4, "Raze", Role.DUELIST, 2, "Explosive specialist who excels at clearing out cramped areas"),
    Agent(5, "Yoru", Role.DUELIST, 5, "Interdimensional infiltrator who manipulates reality"),
    Agent(6, "Neon", Role.DUELIST, 3, "Electric speedster who can outrun any enemy"),
    Agent(7, "Iso", Role.DUELIST, 4, "Assassin who manipulates energy to create shields and isolation"),
    # Controllers
    Agent(8, "Brimstone", Role.CONTROLLER, 2, "Veteran commander with orbital arsenal for area control"),
    Agent(9, "Viper", Role.CONTROLLER, 4, "Chemical warfare specialist who controls territory with toxic screens"),
    Agent(10, "Omen", Role.CONTROLLER, 3, "Phantom wraith who hunts in shadows and controls darkness"),
    Agent(11, "Astra", Role.CONTROLLER, 5, "Cosmic being who harnesses energies of the universe"),
    Agent(12, "Harbor", Role.CONTROLLER, 3, "Ancient technology wielder who controls water and shields"),
    Agent(13, "Clove", Role.CONTROLLER, 4, "Immortal being who can continue fighting beyond death"),
    # Initiators
    Agent(14, "Sova", Role.INITIATOR, 3, "Master tracker who hunts down enemies with precision"),
    Agent(15, "Breach", Role.INITIATOR, 2, "Bionic arms allow him to fire powerful blasts through terrain"),
    Agent(16, "Skye", Role.INITIATOR, 3, "Healer who commands creatures and nature"),
    Agent(17, "KAY/O", Role.INITIATOR, 2, "War machine built to suppress enemy abilities"),
    Agent(18, "Fade", Role.INITIATOR, 4, "Nightmare hunter who reveals enemies' worst fears"),
    Agent(19, "Gekko", Role.INITIATOR, 3, "Los Angeles native who leads pack of creatures"),
    # Sentinels
    Agent(20, "Sage", Role.SENTINEL, 2, "Support specialist who heals teammates and controls space"),
    Agent(21, "Cypher", Role.SENTINEL, 3, "Information broker who watches every move"),
    Agent(22, "Killjoy", Role.SENTINEL, 3, "Genius inventor who secures areas with gadgets"),
    Agent(23, "Chamber", Role.SENTINEL, 4, "Well-dressed weapons designer with custom arsenal"),
    Agent(24, "Deadlock", Role.SENTINEL, 3, "Operative who traps and isolates threats"),
    Agent(25, "Vyse", Role.SENTINEL, 4, "Liquid metal manipulator who reshapes the battlefield"),
    # Custom agents
    Agent(29, "Nexus", Role.INITIATOR, 4, "Digital realm hacker who manipulates electronic systems and data streams"),
    Agent(30, "Tempest", Role.CONTROLLER, 5, "Weather manipulation specialist controlling atmospheric conditions and elemental forces"),
]


class AgentCatalog:
    """Read-only lookup over the agents available for drafting."""

    def __init__(self, agents: Optional[Iterable[Agent]] = None):
        self._agents: Dict[int, Agent] = {}
        for agent in (DEFAULT_AGENTS if agents is None else agents):
            assert agent.id not in self._agents, f"duplicate agent id {agent.id}"
            self._agents[agent.id] = agent

    def __len__(self) -> int:
        return len(self._agents)

    def __contains__(self, agent_id: int) -> bool:
        return agent_id in self._agents

    def list_agents(self) -> List[Agent]:
        return list(self._agents.values())

    def get_agent(self, agent_id: int) -> Agent:
        agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFound(agent_id)
        return agent

    def available_agents(self, excluded_ids: Iterable[int]) -> List[Agent]:
        """Agents not in `excluded_ids`, in catalog order."""
        excluded = set(excluded_ids)
        return [a for a in self._agents.values() if a.id not in excluded]

    def by_role(self, role: Role) -> List[Agent]:
        return [a for a in self._agents.values() if a.role == role]
