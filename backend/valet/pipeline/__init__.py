"""
Pipeline execution.

A pipeline's flow graph is resolved into an ordered list of agents
(`flow.topological_order`), which `PipelineEngine` runs one after
another, chaining each agent's output into the next. Progress is
persisted as run events (`events`) for the streaming endpoint.
"""

from valet.pipeline.engine import PipelineEngine, PipelineResult
from valet.pipeline.errors import PipelineError
from valet.pipeline.flow import AgentNode, topological_order

__all__ = ["PipelineEngine", "PipelineResult", "PipelineError", "AgentNode", "topological_order"]
