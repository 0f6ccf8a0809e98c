import pytest

from valet.pipeline.errors import FlowResolutionError
from valet.pipeline.flow import topological_order


def agent(node_id, name=None):
    return {
        "id": node_id,
        "type": "agent",
        "data": {"agentId": f"agent-{node_id}", "agentName": name or node_id.upper()},
    }


def trait(node_id):
    return {"id": node_id, "type": "trait", "data": {"traitId": f"trait-{node_id}"}}


def edge(source, target):
    return {"id": f"{source}-{target}", "source": source, "target": target}


def names(nodes):
    return [n.agent_name for n in nodes]


def test_follows_edges_not_document_order():
    flow = {
        "nodes": [agent("c"), agent("a"), agent("b")],
        "edges": [edge("a", "b"), edge("b", "c")],
    }
    assert names(topological_order(flow)) == ["A", "B", "C"]


def test_trait_nodes_and_edges_are_ignored():
    flow = {
        "nodes": [trait("t1"), agent("a"), agent("b")],
        "edges": [edge("t1", "b"), edge("a", "b"), edge("t1", "a")],
    }
    ordered = topological_order(flow)
    assert names(ordered) == ["A", "B"]
    assert ordered[0].agent_id == "agent-a"


def test_unconnected_agents_keep_document_order():
    flow = {"nodes": [agent("x"), agent("y"), agent("z")], "edges": []}
    assert names(topological_order(flow)) == ["X", "Y", "Z"]


def test_dangling_edges_are_ignored():
    flow = {"nodes": [agent("a")], "edges": [edge("a", "ghost")]}
    assert names(topological_order(flow)) == ["A"]


@pytest.mark.parametrize("flow", [None, {}, {"nodes": [], "edges": []}])
def test_empty_flow(flow):
    assert topological_order(flow) == []


def test_cycle_is_rejected():
    flow = {
        "nodes": [agent("a"), agent("b"), agent("c")],
        "edges": [edge("a", "b"), edge("b", "c"), edge("c", "b")],
    }
    with pytest.raises(FlowResolutionError, match="cycle") as exc_info:
        topological_order(flow)
    assert set(exc_info.value.details["nodes"]) == {"B", "C"}


def test_agent_node_without_reference_is_rejected():
    flow = {"nodes": [{"id": "a", "type": "agent", "data": {}}], "edges": []}
    with pytest.raises(FlowResolutionError):
        topological_order(flow)


def test_display_name_falls_back_to_agent_id():
    flow = {"nodes": [{"id": "a", "type": "agent", "data": {"agentId": "123"}}], "edges": []}
    assert topological_order(flow)[0].display_name == "123"
