"""
Flow resolution: turns a stored flow graph into an ordered agent list.

The graph is the editor's ``{"nodes": [...], "edges": [...]}`` document.
Agent nodes look like ``{"id": "n1", "type": "agent", "data":
{"agentId": "...", "agentName": "..."}}``. Trait nodes only decorate
agents, so they and every edge touching them are ignored here.

Ordering uses Kahn's algorithm. Ties keep the order in which nodes
appear in the document so the same graph always yields the same run.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any

from valet.core.logging import get_logger
from valet.pipeline.errors import FlowResolutionError

logger = get_logger(__name__)

AGENT_NODE_TYPE = "agent"


@dataclass(frozen=True)
class AgentNode:
    node_id: str
    agent_id: str
    agent_name: str | None = None

    @property
    def display_name(self) -> str:
        return self.agent_name or self.agent_id


def _agent_nodes(nodes: list[dict[str, Any]]) -> list[AgentNode]:
    agent_nodes: list[AgentNode] = []
    for node in nodes:
        if node.get("type") != AGENT_NODE_TYPE:
            continue
        data = node.get("data") or {}
        agent_id = data.get("agentId")
        if not node.get("id") or not agent_id:
            raise FlowResolutionError(
                "Agent node is missing its id or agent reference",
                details={"node": node},
            )
        agent_nodes.append(
            AgentNode(node_id=str(node["id"]), agent_id=str(agent_id), agent_name=data.get("agentName"))
        )
    return agent_nodes


def topological_order(flow_data: dict[str, Any] | None) -> list[AgentNode]:
    """
    Agent nodes in execution order.

    Raises:
        FlowResolutionError: the agent graph contains a cycle, or a node
            is malformed.
    """
    flow_data = flow_data or {}
    agent_nodes = _agent_nodes(flow_data.get("nodes") or [])
    by_id = {n.node_id: n for n in agent_nodes}

    in_degree = {node_id: 0 for node_id in by_id}
    adjacency: dict[str, list[str]] = {node_id: [] for node_id in by_id}

    for edge in flow_data.get("edges") or []:
        source, target = str(edge.get("source")), str(edge.get("target"))
        # trait edges and dangling edges do not affect ordering
        if source not in by_id or target not in by_id:
            continue
        adjacency[source].append(target)
        in_degree[target] += 1

    queue = deque(node_id for node_id in by_id if in_degree[node_id] == 0)
    ordered: list[AgentNode] = []
    while queue:
        node_id = queue.popleft()
        ordered.append(by_id[node_id])
        for neighbour in adjacency[node_id]:
            in_degree[neighbour] -= 1
            if in_degree[neighbour] == 0:
                queue.append(neighbour)

    if len(ordered) != len(agent_nodes):
        stuck = [by_id[i].display_name for i, degree in in_degree.items() if degree > 0]
        raise FlowResolutionError(
            "Pipeline flow contains a cycle between agents: " + ", ".join(stuck),
            details={"nodes": stuck},
        )

    logger.debug("Flow resolved", steps=[n.display_name for n in ordered])
    return ordered
