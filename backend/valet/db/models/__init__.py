"""
Models package: re-exports Base and all models.

Import models here so Alembic's `target_metadata = Base.metadata`
picks up every table automatically.

When adding a new model:
    1. Create `valet/db/models/<table_name>.py`
    2. Import it here
"""

from valet.db.models.base import Base
from valet.db.models.user import User
from valet.db.models.user_session import UserSession
from valet.db.models.api_key import ApiKey
from valet.db.models.agent import Agent
from valet.db.models.trait import Trait
from valet.db.models.agent_trait import AgentTrait
from valet.db.models.pipeline import Pipeline
from valet.db.models.pipeline_template import PipelineTemplate
from valet.db.models.pipeline_tab import PipelineTab
from valet.db.models.pipeline_run import PipelineRun
from valet.db.models.pipeline_run_step import PipelineRunStep
from valet.db.models.pipeline_run_event import PipelineRunEvent

__all__ = [
    "Base",
    "User",
    "UserSession",
    "ApiKey",
    "Agent",
    "Trait",
    "AgentTrait",
    "Pipeline",
    "PipelineTemplate",
    "PipelineTab",
    "PipelineRun",
    "PipelineRunStep",
    "PipelineRunEvent",
]
