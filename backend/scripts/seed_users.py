"""
Seed a demo account for development: one user, a few traits, two agents
and a two-step pipeline wiring them together.

Run: python -m scripts.seed_users  (from backend/)
"""

import asyncio

from valet.db.session import async_session
from valet.repositories import agents as agent_repository
from valet.repositories import pipelines as pipeline_repository
from valet.repositories import traits as trait_repository
from valet.repositories.users import create_user, get_user_by_email

DEMO_USER = {
    "email": "demo@valet.local",
    "password": "demo-password",  # Change in production!
    "full_name": "Demo User",
}

SEED_TRAITS = [
    {
        "name": "Concise",
        "context": "Keep answers short. Prefer bullet points over paragraphs.",
        "color": "#22c55e",
    },
    {
        "name": "Cites sources",
        "context": "Back every factual claim with a link to where you found it.",
        "color": "#3b82f6",
    },
]

SEED_AGENTS = [
    {
        "name": "Researcher",
        "instructions": "Research {{topic}} on the web and list the five most relevant findings.",
        "traits": ["Cites sources"],
    },
    {
        "name": "Summarizer",
        "instructions": "Turn the research you are given into a one-paragraph brief.",
        "traits": ["Concise"],
    },
]


def _flow(agents: list) -> dict:
    nodes = [
        {
            "id": f"agent-{index}",
            "type": "agent",
            "position": {"x": 100 + 300 * index, "y": 100},
            "data": {"agentId": str(agent.id), "agentName": agent.name},
        }
        for index, agent in enumerate(agents)
    ]
    edges = [
        {"id": f"e{index}", "source": f"agent-{index}", "target": f"agent-{index + 1}"}
        for index in range(len(agents) - 1)
    ]
    return {"nodes": nodes, "edges": edges}


async def seed():
    """Insert the demo account unless it already exists."""
    async with async_session() as session:
        if await get_user_by_email(session, DEMO_USER["email"]) is not None:
            print(f"  {DEMO_USER['email']} already exists, nothing to do.")
            return

        user = await create_user(db=session, **DEMO_USER)
        print(f"  Created user: {user.email}")

        traits = {}
        for data in SEED_TRAITS:
            trait = await trait_repository.create_trait(session, user_id=user.id, **data)
            traits[trait.name] = trait.id
            print(f"  Created trait: {trait.name}")

        agents = []
        for data in SEED_AGENTS:
            agent = await agent_repository.create_agent(
                session,
                user_id=user.id,
                name=data["name"],
                instructions=data["instructions"],
                model=None,
                trait_ids=[traits[name] for name in data["traits"]],
            )
            agents.append(agent)
            print(f"  Created agent: {agent.name}")

        pipeline = await pipeline_repository.create_pipeline(
            session,
            user_id=user.id,
            name="Research brief",
            description="Researches a topic, then summarizes it.",
            flow_data=_flow(agents),
        )
        await pipeline_repository.upsert_template(
            session,
            pipeline.id,
            [{"name": "topic", "description": "What to research", "default_value": "solid-state batteries"}],
        )
        print(f"  Created pipeline: {pipeline.name}")

        await session.commit()
    print("Seeded demo account.")


if __name__ == "__main__":
    asyncio.run(seed())
