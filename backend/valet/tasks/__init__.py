"""
Celery application.

Run a worker with:
    celery -A valet.tasks worker -Q pipelines -l info
"""

from celery import Celery
from celery.signals import worker_process_init

from valet.core.config import settings
from valet.core.logging import setup_logging
from valet.core.tracing import setup_tracing

celery_app = Celery("valet", include=["valet.tasks.pipeline_tasks", "valet.tasks.session_tasks"])
celery_app.config_from_object("valet.tasks.celeryconfig")


@worker_process_init.connect
def _init_worker_process(**kwargs) -> None:
    setup_logging("DEBUG" if settings.APP_ENV == "development" else "INFO")
    setup_tracing()
