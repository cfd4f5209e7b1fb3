# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Availability - which resource names a job has produced so far.

A JobState is replayed forward over the flattened plan. Each step returns a
new state; nothing is mutated, so a resource only becomes visible to steps
after the one that produced it.

- get X:              X is available
- get X resource: Y:  X is available, and X resolves to Y's directory for
                      task file lookups
- put X:              X is available
- task:               declared outputs are available, under their
                      output_mapping name when one is given
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Tuple

from testpipe.resource_map import ResourceMap
from testpipe.schemas import GetStep, PutStep, Step, TaskDefinition, TaskStep


@dataclass(frozen=True)
class JobState:
    """Resources visible at one point in a job, plus the job's resource map."""
    resource_map: ResourceMap
    resources: Tuple[str, ...] = ()

    @classmethod
    def start(cls, resource_map: ResourceMap) -> "JobState":
        """Fresh state for a new job; aliases from other jobs are not carried."""
        return cls(resource_map=ResourceMap(resource_map))

    def is_available(self, name: str) -> bool:
        return name in self.resources

    def with_resources(self, names: Iterable[str]) -> "JobState":
        added = tuple(n for n in dict.fromkeys(names) if n not in self.resources)
        if not added:
            return self
        return replace(self, resources=self.resources + added)

    def after_get(self, step: GetStep) -> "JobState":
        state = self.with_resources([step.name])
        if step.resource:
            state = replace(state, resource_map=state.resource_map.with_alias(step.name, step.resource))
        return state

    def after_put(self, step: PutStep) -> "JobState":
        return self.with_resources([step.name])

    def after_task(self, step: TaskStep, definition: TaskDefinition) -> "JobState":
        # A mapped output is visible under its local name only; the declared
        # name is not also added
        names = [step.output_mapping.get(output, output) for output in definition.outputs]
        # Mapped outputs the task does not declare still count
        names.extend(
            local for output, local in step.output_mapping.items()
            if output not in definition.outputs
        )
        return self.with_resources(names)

    def after(self, step: Step, definition: Optional[TaskDefinition] = None) -> "JobState":
        """Advance past any leaf step. Task steps need their definition."""
        if isinstance(step, GetStep):
            return self.after_get(step)
        if isinstance(step, PutStep):
            return self.after_put(step)
        if isinstance(step, TaskStep):
            if definition is None:
                raise ValueError(f"task {step.name} must be resolved before it is replayed")
            return self.after_task(step, definition)
        raise TypeError(f"not a leaf step: {step!r}")
