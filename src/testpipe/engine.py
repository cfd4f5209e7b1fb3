# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Engine - check every job of a pipeline.

For each job:
- flatten the plan into execution order
- replay it once, left to right, growing the job's available resources
- for each task: resolve its definition, check param parity, check its
  inputs are available, then make its outputs available

The first failure in a job stops the run and is raised with the pipeline
path, job and task attached. Each job starts from a fresh JobState, so
get aliases never leak between jobs.
"""

import logging
from typing import Optional

from testpipe.availability import JobState
from testpipe.checks import check_inputs, check_params
from testpipe.errors import MissingResourceError, ParamParityError, TestpipeError
from testpipe.planner import flatten
from testpipe.resolver import TaskResolver
from testpipe.resource_map import ResourceMap
from testpipe.schemas import CheckRecord, Job, JobRecord, Pipeline, TaskStep


logger = logging.getLogger(__name__)


def check_job(
    job: Job,
    resource_map: ResourceMap,
    resolver: Optional[TaskResolver] = None,
    pipeline_path: Optional[str] = None,
) -> JobRecord:
    """Check one job. Raises the first TestpipeError found."""
    resolver = resolver or TaskResolver()
    record = JobRecord(job_name=job.name)
    state = JobState.start(resource_map)

    try:
        steps = flatten(job.plan)
        for step in steps:
            logger.debug(f"{job.name}: {step!r}")
            record.steps_checked += 1

            if not isinstance(step, TaskStep):
                state = state.after(step)
                continue

            definition = resolver.resolve(step, state.resource_map, job.name)
            context = {"job_name": job.name, "task_name": step.name}

            params_diff = check_params(definition, step)
            if not params_diff.is_empty:
                raise ParamParityError(params_diff, **context)

            inputs_diff = check_inputs(definition, step, state)
            if not inputs_diff.is_empty:
                raise MissingResourceError(inputs_diff, **context)

            state = state.after(step, definition)
            record.tasks_checked += 1
    except TestpipeError as e:
        raise e.with_context(pipeline_path=pipeline_path, job_name=job.name)

    logger.info(f"{job.name}: ok ({record.tasks_checked} tasks)")
    return record


def check_pipeline(
    pipeline: Pipeline,
    resource_map: Optional[ResourceMap] = None,
    resolver: Optional[TaskResolver] = None,
) -> CheckRecord:
    """Check every job of a pipeline in document order.

    Args:
        pipeline: The parsed pipeline
        resource_map: Where resources are checked out; empty if not given
        resolver: Shared resolver, so task files are cached across jobs

    Returns:
        CheckRecord listing the jobs that passed

    Raises:
        TestpipeError: The first failure found
    """
    resource_map = resource_map if resource_map is not None else ResourceMap()
    resolver = resolver or TaskResolver()
    record = CheckRecord(pipeline_path=pipeline.path)

    for job in pipeline.jobs:
        record.jobs.append(check_job(job, resource_map, resolver, pipeline.path))

    logger.info(f"{pipeline.path}: {len(record.jobs)} jobs ok")
    return record
