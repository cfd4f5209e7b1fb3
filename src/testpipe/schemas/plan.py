# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Plan and task schemas for testpipe.

A pipeline document is parsed once into these types:
- Pipeline → Job → Step tree (get / put / task / aggregate / do)
- TaskStep.config holds the raw inline definition; the resolver turns it
  (or the external file it points at) into a TaskDefinition
- DiffResult is what the parity and availability checks produce
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class GetStep:
    """Fetch a resource.

    `resource` is set when the step renames the underlying resource:
    `get: a-resource` + `resource: some-resource`.
    """
    name: str
    resource: Optional[str] = None


@dataclass(frozen=True)
class PutStep:
    """Publish a resource."""
    name: str


@dataclass(frozen=True)
class TaskStep:
    """Invoke a task, either from `file:` or from an inline `config:`."""
    name: str
    file: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    params: Dict[str, Any] = field(default_factory=dict)
    input_mapping: Dict[str, str] = field(default_factory=dict)
    output_mapping: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AggregateStep:
    """Steps that run in parallel."""
    steps: Tuple["Step", ...] = ()


@dataclass(frozen=True)
class DoStep:
    """Steps that run in sequence."""
    steps: Tuple["Step", ...] = ()


Step = Union[GetStep, PutStep, TaskStep, AggregateStep, DoStep]

# Steps that survive flattening
LEAF_STEPS = (GetStep, PutStep, TaskStep)


@dataclass(frozen=True)
class Job:
    name: str
    plan: Tuple[Step, ...] = ()


@dataclass(frozen=True)
class Pipeline:
    """A parsed pipeline document. `path` is where it was read from."""
    path: str
    jobs: Tuple[Job, ...] = ()


@dataclass(frozen=True)
class TaskDefinition:
    """A resolved task contract.

    Only the names matter: declared param values are never inspected.
    """
    params: Tuple[str, ...] = ()
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    run_path: Optional[str] = None


@dataclass(frozen=True)
class DiffResult:
    """Names present on one side of a comparison but not the other.

    Both tuples keep first-seen order so diagnostics are reproducible.
    """
    extra: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.extra and not self.missing
