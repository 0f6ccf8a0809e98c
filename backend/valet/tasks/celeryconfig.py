"""
Celery configuration for the pipeline worker.

Loaded by `celery_app.config_from_object("valet.tasks.celeryconfig")`.
Broker and result-backend URLs come from application settings.
"""

from valet.core.config import settings

# ═══════════════════════════════════════════════════════════
#  Broker & Result Backend
# ═══════════════════════════════════════════════════════════

broker_url = settings.CELERY_BROKER_URL
result_backend = settings.CELERY_RESULT_BACKEND

# ═══════════════════════════════════════════════════════════
#  Serialization (JSON only, no pickle)
# ═══════════════════════════════════════════════════════════

task_serializer = "json"
result_serializer = "json"
accept_content = ["json"]

timezone = "UTC"
enable_utc = True

# ═══════════════════════════════════════════════════════════
#  Task Execution
# ═══════════════════════════════════════════════════════════

# Ack after completion so a crashed worker does not lose a run
task_acks_late = True
task_reject_on_worker_lost = True

# One run at a time per process; a run is a chain of LLM calls
worker_prefetch_multiplier = 1

# A run makes one provider call per agent, each with up to 10 tool uses
task_soft_time_limit = 900
task_time_limit = 960

result_expires = 86400

worker_max_tasks_per_child = 100

# ═══════════════════════════════════════════════════════════
#  Task Routes
# ═══════════════════════════════════════════════════════════

task_routes = {
    "valet.tasks.pipeline_tasks.*": {"queue": "pipelines"},
}

task_default_queue = "default"

# ═══════════════════════════════════════════════════════════
#  Beat Schedule (periodic tasks)
# ═══════════════════════════════════════════════════════════
# Run with: celery -A valet.tasks beat

beat_schedule = {
    "purge-expired-sessions": {
        "task": "valet.tasks.session_tasks.purge_expired_sessions",
        "schedule": 3600.0,
    },
}
