# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Error classes for testpipe.

Every failure is a deterministic authoring defect, so nothing here is
retried. Errors carry enough context to locate the fault:
- pipeline_path: the pipeline document being checked
- job_name / task_name: where in the plan the fault was found

The engine fills in pipeline_path and job_name on the way out; the CLI
catches TestpipeError at the boundary and renders it.
"""

from typing import Optional

from testpipe.schemas import DiffResult


class TestpipeError(Exception):
    """Base exception for testpipe."""

    # Keep pytest from collecting this as a test class
    __test__ = False

    def __init__(
        self,
        message: str,
        pipeline_path: Optional[str] = None,
        job_name: Optional[str] = None,
        task_name: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.pipeline_path = pipeline_path
        self.job_name = job_name
        self.task_name = task_name

    def with_context(
        self,
        pipeline_path: Optional[str] = None,
        job_name: Optional[str] = None,
    ) -> "TestpipeError":
        """Fill in location fields that are still unset. Returns self."""
        if self.pipeline_path is None:
            self.pipeline_path = pipeline_path
        if self.job_name is None:
            self.job_name = job_name
        return self


class PipelineLoadError(TestpipeError):
    """Pipeline document could not be read or parsed."""
    pass


class ConfigLoadError(TestpipeError):
    """Config document could not be read or parsed."""
    pass


class MalformedPlanError(TestpipeError):
    """A plan item matches none of the known step shapes."""
    pass


class UnresolvedResourceError(TestpipeError):
    """A task file path names a resource the resource map cannot locate."""
    pass


class TaskLoadError(TestpipeError):
    """A task definition could not be read or parsed."""
    pass


class IncompleteTaskError(TestpipeError):
    """A resolved task has no definition or no run path."""
    pass


class DiffError(TestpipeError):
    """A check found names on the wrong side of a comparison.

    `kind` names what was compared ("params" or "resources") and is used
    in the rendered report.
    """

    kind = ""

    def __init__(
        self,
        message: str,
        diff: DiffResult,
        pipeline_path: Optional[str] = None,
        job_name: Optional[str] = None,
        task_name: Optional[str] = None,
    ):
        super().__init__(
            message,
            pipeline_path=pipeline_path,
            job_name=job_name,
            task_name=task_name,
        )
        self.diff = diff


class ParamParityError(DiffError):
    """Invoked params do not match the params the task declares."""

    kind = "params"

    def __init__(self, diff: DiffResult, **context):
        super().__init__("Params do not have parity", diff, **context)


class MissingResourceError(DiffError):
    """A task input is not available at the point the task runs."""

    kind = "resources"

    def __init__(self, diff: DiffResult, **context):
        super().__init__("Task invocation is missing resources", diff, **context)
