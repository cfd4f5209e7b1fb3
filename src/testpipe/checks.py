# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Parity and availability checks.

Both checks are pure: they compare names and return a DiffResult. Raising
is left to the engine, which knows where in the pipeline the task sits.
"""

from typing import Iterable, List

from testpipe.availability import JobState
from testpipe.schemas import DiffResult, TaskDefinition, TaskStep


def _ordered_difference(names: Iterable[str], other: Iterable[str]) -> List[str]:
    """Names not in `other`, first-seen order, no repeats."""
    other = set(other)
    return [name for name in dict.fromkeys(names) if name not in other]


def check_params(definition: TaskDefinition, step: TaskStep) -> DiffResult:
    """Compare invoked param keys against declared param keys.

    Only presence matters; values on either side are never looked at.
    """
    invoked = list(step.params)
    return DiffResult(
        extra=tuple(_ordered_difference(invoked, definition.params)),
        missing=tuple(_ordered_difference(definition.params, invoked)),
    )


def check_inputs(definition: TaskDefinition, step: TaskStep, state: JobState) -> DiffResult:
    """Find declared inputs that nothing earlier in the job produced.

    An input is satisfied when its own name is available, or when
    input_mapping points it at a name that is.
    """
    if not definition.inputs:
        return DiffResult()

    missing = []
    for name in dict.fromkeys(definition.inputs):
        if state.is_available(name):
            continue
        mapped = step.input_mapping.get(name)
        if mapped is not None and state.is_available(mapped):
            continue
        missing.append(name)
    return DiffResult(missing=tuple(missing))
