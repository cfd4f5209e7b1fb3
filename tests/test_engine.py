# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Tests for the check engine."""

import logging

import pytest

from testpipe.engine import check_job, check_pipeline
from testpipe.errors import (
    IncompleteTaskError,
    MalformedPlanError,
    MissingResourceError,
    ParamParityError,
    UnresolvedResourceError,
)
from testpipe.resolver import TaskResolver
from testpipe.resource_map import ResourceMap
from testpipe.schemas import (
    AggregateStep,
    DoStep,
    GetStep,
    Job,
    Pipeline,
    PutStep,
    TaskDefinition,
    TaskStep,
)


def _task(name, inputs=(), outputs=(), params=None, **kwargs):
    """Task step with an inline config."""
    config = {
        "inputs": [{"name": n} for n in inputs],
        "outputs": [{"name": n} for n in outputs],
        "params": {k: None for k in (params or {})},
        "run": {"path": "run.sh"},
    }
    return TaskStep(name, config=config, params=dict(params or {}), **kwargs)


class TestCheckJob:
    """Tests for check_job()."""

    def test_get_then_task(self):
        """A task whose input was fetched earlier passes."""
        job = Job("some-job", (GetStep("a-resource"), _task("t", inputs=["a-resource"])))
        record = check_job(job, ResourceMap())
        assert record.job_name == "some-job"
        assert record.steps_checked == 2
        assert record.tasks_checked == 1

    def test_missing_input(self):
        job = Job("some-job", (_task("some-task", inputs=["a-resource"]),))
        with pytest.raises(MissingResourceError) as excinfo:
            check_job(job, ResourceMap(), pipeline_path="p.yml")
        error = excinfo.value
        assert error.diff.missing == ("a-resource",)
        assert (error.pipeline_path, error.job_name, error.task_name) == ("p.yml", "some-job", "some-task")

    def test_forward_only_visibility(self):
        """An output produced later in the job does not satisfy an earlier task."""
        job = Job("some-job", (
            _task("some-task", inputs=["a-resource"]),
            _task("some-downstream-task", outputs=["a-resource"]),
        ))
        with pytest.raises(MissingResourceError):
            check_job(job, ResourceMap())

    def test_upstream_output(self):
        job = Job("some-job", (
            _task("some-upstream-task", outputs=["a-resource"]),
            _task("some-task", inputs=["a-resource"]),
        ))
        assert check_job(job, ResourceMap()).tasks_checked == 2

    def test_put_provides_input(self):
        job = Job("j", (PutStep("image"), _task("t", inputs=["image"])))
        check_job(job, ResourceMap())

    def test_output_mapping(self):
        job = Job("j", (
            _task("upstream", outputs=["some-resource"], output_mapping={"some-resource": "a-resource"}),
            _task("downstream", inputs=["a-resource"]),
        ))
        check_job(job, ResourceMap())

    def test_output_mapping_hides_original_name(self):
        job = Job("j", (
            _task("upstream", outputs=["some-resource"], output_mapping={"some-resource": "a-resource"}),
            _task("downstream", inputs=["some-resource"]),
        ))
        with pytest.raises(MissingResourceError):
            check_job(job, ResourceMap())

    def test_input_mapping(self):
        job = Job("j", (
            GetStep("some-resource"),
            _task("t", inputs=["a-resource"], input_mapping={"a-resource": "some-resource"}),
        ))
        check_job(job, ResourceMap())

    def test_nested_groups(self):
        """Resources produced inside groups are visible to later steps."""
        job = Job("j", (
            AggregateStep((GetStep("a"), DoStep((GetStep("b"), _task("build", inputs=["b"], outputs=["c"]))))),
            _task("t", inputs=["a", "b", "c"]),
        ))
        assert check_job(job, ResourceMap()).tasks_checked == 2

    def test_param_parity_checked_before_inputs(self):
        step = TaskStep(
            "t",
            config={"inputs": [{"name": "missing"}], "params": {"baz": None}, "run": {"path": "x"}},
            params={"foo": "bar"},
        )
        job = Job("some-job", (step,))
        with pytest.raises(ParamParityError) as excinfo:
            check_job(job, ResourceMap())
        assert excinfo.value.diff.extra == ("foo",)
        assert excinfo.value.diff.missing == ("baz",)

    def test_stops_at_first_error(self):
        """Later tasks are not resolved once one fails."""
        calls = []

        def load(path):
            calls.append(path)
            return TaskDefinition(run_path="x")

        job = Job("j", (TaskStep("empty"), TaskStep("later", file="r/task.yml")))
        with pytest.raises(IncompleteTaskError):
            check_job(job, ResourceMap({"r": "/r"}), TaskResolver(load=load))
        assert calls == []

    def test_renamed_get_resolves_task_file(self, tmp_path):
        some_resource = tmp_path / "some-resource"
        some_resource.mkdir()
        (some_resource / "task.yml").write_text("run:\n  path: some-command\n")
        job = Job("some-job", (
            GetStep("a-resource", resource="some-resource"),
            TaskStep("some-task", file="a-resource/task.yml"),
        ))
        check_job(job, ResourceMap({"some-resource": str(some_resource)}))

    def test_malformed_plan(self):
        with pytest.raises(MalformedPlanError) as excinfo:
            check_job(Job("j", ({"get": "raw"},)), ResourceMap())
        assert excinfo.value.job_name == "j"

    def test_logs_success(self, caplog):
        with caplog.at_level(logging.INFO, logger="testpipe.engine"):
            check_job(Job("some-job", ()), ResourceMap())
        assert "some-job: ok" in caplog.text


class TestCheckPipeline:
    """Tests for check_pipeline()."""

    def test_all_jobs_checked(self):
        pipeline = Pipeline("p.yml", (
            Job("a", (GetStep("r"), _task("t", inputs=["r"]))),
            Job("b", (PutStep("x"),)),
        ))
        record = check_pipeline(pipeline)
        assert record.pipeline_path == "p.yml"
        assert [job.job_name for job in record.jobs] == ["a", "b"]
        assert record.tasks_checked == 1

    def test_jobs_do_not_share_resources(self):
        """A resource fetched in one job is not available in the next."""
        pipeline = Pipeline("p.yml", (
            Job("a", (GetStep("r"),)),
            Job("b", (_task("t", inputs=["r"]),)),
        ))
        with pytest.raises(MissingResourceError) as excinfo:
            check_pipeline(pipeline)
        assert excinfo.value.job_name == "b"
        assert excinfo.value.pipeline_path == "p.yml"

    def test_jobs_do_not_share_aliases(self, tmp_path):
        """A get rename in one job does not resolve task files in another."""
        some_resource = tmp_path / "some-resource"
        some_resource.mkdir()
        (some_resource / "task.yml").write_text("run:\n  path: x\n")
        pipeline = Pipeline("p.yml", (
            Job("a", (GetStep("alias", resource="some-resource"), TaskStep("t", file="alias/task.yml"))),
            Job("b", (TaskStep("t", file="alias/task.yml"),)),
        ))
        with pytest.raises(UnresolvedResourceError) as excinfo:
            check_pipeline(pipeline, ResourceMap({"some-resource": str(some_resource)}))
        assert "failed to find path for task: alias/task.yml" in str(excinfo.value)
        assert excinfo.value.job_name == "b"

    def test_empty_pipeline(self):
        assert check_pipeline(Pipeline("p.yml")).jobs == []
