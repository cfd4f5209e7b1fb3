# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Pipeline plan schemas."""

from testpipe.schemas.plan import (
    AggregateStep,
    DiffResult,
    DoStep,
    GetStep,
    Job,
    LEAF_STEPS,
    Pipeline,
    PutStep,
    Step,
    TaskDefinition,
    TaskStep,
)
from testpipe.schemas.record import CheckRecord, JobRecord

__all__ = [
    "AggregateStep",
    "CheckRecord",
    "DiffResult",
    "DoStep",
    "GetStep",
    "Job",
    "JobRecord",
    "LEAF_STEPS",
    "Pipeline",
    "PutStep",
    "Step",
    "TaskDefinition",
    "TaskStep",
]
