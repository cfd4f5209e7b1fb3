# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Records of a successful check run."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class JobRecord:
    """A job that passed every check."""
    job_name: str
    steps_checked: int = 0
    tasks_checked: int = 0


@dataclass
class CheckRecord:
    """A pipeline whose jobs all passed."""
    pipeline_path: str
    jobs: List[JobRecord] = field(default_factory=list)

    @property
    def tasks_checked(self) -> int:
        return sum(job.tasks_checked for job in self.jobs)
