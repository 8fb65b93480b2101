from pydantic import BaseModel


class AgentResponse(BaseModel):
    id: int
    name: str
    role: str  # 'duelist', 'initiator', 'controller', 'sentinel'
    difficulty: int
    description: str = ""

    @classmethod
    def from_agent(cls, agent) -> "AgentResponse":
        return cls(
            id=agent.id,
            name=agent.name,
            role=agent.role.value,
            difficulty=agent.difficulty,
            description=agent.description,
        )
