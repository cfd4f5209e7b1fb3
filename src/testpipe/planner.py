# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Planner - flatten a job's step tree into execution order.

aggregate and do groups are expanded in place, depth-first, left to right.
No distinction is kept between the two: availability is computed as one
forward pass, so parallel siblings are treated as if they ran in document
order.
"""

from typing import Iterable, List

from testpipe.errors import MalformedPlanError
from testpipe.schemas import LEAF_STEPS, AggregateStep, DoStep, Step


def flatten(steps: Iterable[Step]) -> List[Step]:
    """Return the get/put/task leaves of a step tree in document order."""
    flat: List[Step] = []
    for step in steps:
        if isinstance(step, (AggregateStep, DoStep)):
            flat.extend(flatten(step.steps))
        elif isinstance(step, LEAF_STEPS):
            flat.append(step)
        else:
            raise MalformedPlanError(f"unknown step in plan: {step!r}")
    return flat
