"""Run start, history, detail and the SSE progress stream."""

import json
import uuid

import pytest

from valet.core.constants import RunEventType, RunStatus
from valet.pipeline.events import append_event
from valet.repositories import pipelines as pipeline_repository
from valet.repositories import runs as run_repository
from valet.tasks import pipeline_tasks


@pytest.fixture
async def pipeline(session_factory, user):
    async with session_factory() as db:
        pipeline = await pipeline_repository.create_pipeline(db, user_id=user.id, name="Flow")
        await pipeline_repository.upsert_template(
            db,
            pipeline.id,
            [
                {"name": "topic", "description": None, "default_value": "bees"},
                {"name": "tone", "description": None, "default_value": "dry"},
            ],
        )
        await db.commit()
    return pipeline


def parse_sse(text):
    """``(event, id, data)`` per frame; comment frames are skipped."""
    frames = []
    for chunk in text.strip().split("\n\n"):
        fields = {}
        for line in chunk.splitlines():
            if line.startswith(":"):
                continue
            key, _, value = line.partition(": ")
            fields[key] = value
        if fields:
            frames.append((fields.get("event"), fields.get("id"), json.loads(fields["data"])))
    return frames


async def test_start_run_merges_template_defaults(auth_client, pipeline, queued_runs, db):
    response = await auth_client.post(
        f"/api/pipelines/{pipeline.id}/runs",
        json={"input": "start here", "variables": {"tone": "playful"}},
    )

    assert response.status_code == 201
    run_id = response.json()["run_id"]
    assert queued_runs == [run_id]

    run = await run_repository.get_run(db, uuid.UUID(run_id))
    assert run.status == RunStatus.PENDING
    assert run.input == "start here"
    assert run.variables == {"topic": "bees", "tone": "playful"}


async def test_start_run_on_missing_pipeline(auth_client, queued_runs):
    response = await auth_client.post(f"/api/pipelines/{uuid.uuid4()}/runs", json={})

    assert response.status_code == 404
    assert queued_runs == []


async def test_queue_failure_marks_run_failed(auth_client, pipeline, monkeypatch, db):
    def broken_enqueue(run_id):
        raise ConnectionError("broker down")

    monkeypatch.setattr(pipeline_tasks, "enqueue_pipeline_run", broken_enqueue)

    response = await auth_client.post(f"/api/pipelines/{pipeline.id}/runs", json={})

    assert response.status_code == 503
    (run,) = await run_repository.list_runs(db, pipeline.user_id, pipeline.id)
    assert run.status == RunStatus.FAILED


async def test_history_and_detail(auth_client, pipeline, queued_runs):
    for text in ("one", "two"):
        await auth_client.post(f"/api/pipelines/{pipeline.id}/runs", json={"input": text})

    runs = (await auth_client.get(f"/api/pipelines/{pipeline.id}/runs")).json()["runs"]
    assert [r["input"] for r in runs] == ["two", "one"]

    detail = (await auth_client.get(f"/api/runs/{runs[0]['id']}")).json()["run"]
    assert detail["status"] == "pending"
    assert detail["steps"] == []


async def test_other_users_run_is_not_found(auth_client, session_factory, other_user):
    async with session_factory() as db:
        theirs = await pipeline_repository.create_pipeline(db, user_id=other_user.id, name="T")
        run = await run_repository.create_run(
            db, pipeline_id=theirs.id, user_id=other_user.id, input_text="", variables={}
        )
        await db.commit()

    assert (await auth_client.get(f"/api/runs/{run.id}")).status_code == 404
    assert (await auth_client.get(f"/api/runs/{run.id}/stream")).status_code == 404


class TestStream:
    async def finished_run(self, session_factory, pipeline, user):
        async with session_factory() as db:
            run = await run_repository.create_run(
                db, pipeline_id=pipeline.id, user_id=user.id, input_text="go", variables={}
            )
            await run_repository.mark_run_running(db, run.id)
            await append_event(db, run.id, RunEventType.STATUS, {"status": "running"})
            await append_event(db, run.id, RunEventType.STEP_START, {"step_index": 0, "agent_name": "A"})
            await append_event(db, run.id, RunEventType.STEP_COMPLETE, {"step_index": 0, "output": "done"})
            await run_repository.complete_run(
                db, run.id, final_output="done", model="m", input_tokens=1, output_tokens=2
            )
            await append_event(
                db, run.id, RunEventType.PIPELINE_COMPLETE, {"final_output": "done"}
            )
            await db.commit()
        return run

    async def test_replays_events_and_closes(self, auth_client, session_factory, pipeline, user):
        run = await self.finished_run(session_factory, pipeline, user)

        response = await auth_client.get(f"/api/runs/{run.id}/stream")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        frames = parse_sse(response.text)
        assert {event for event, _, _ in frames} == {"update"}
        assert [data["type"] for _, _, data in frames] == [
            "status",
            "status",
            "step_start",
            "step_complete",
            "pipeline_complete",
        ]
        assert frames[0][2] == {"type": "status", "status": "completed"}
        assert frames[3][2] == {"type": "step_complete", "step_index": 0, "output": "done"}

    async def test_resume_after_seq(self, auth_client, session_factory, pipeline, user):
        run = await self.finished_run(session_factory, pipeline, user)
        full = parse_sse((await auth_client.get(f"/api/runs/{run.id}/stream")).text)
        cursor = full[2][1]

        response = await auth_client.get(f"/api/runs/{run.id}/stream", params={"after_seq": cursor})

        types = [data["type"] for _, _, data in parse_sse(response.text)]
        assert types == ["status", "step_complete", "pipeline_complete"]

    async def test_requires_session(self, client, session_factory, pipeline, user):
        run = await self.finished_run(session_factory, pipeline, user)

        assert (await client.get(f"/api/runs/{run.id}/stream")).status_code == 401
