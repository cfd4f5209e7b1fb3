# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Resolver - turn a task step into its TaskDefinition.

Resolution order:
- inline `config:` on the step wins
- otherwise `file: <resource>/<path>` is located through the ResourceMap
  and loaded from disk

Every resolution ends with two policy checks: a definition must exist and
it must name a run path.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from testpipe.errors import IncompleteTaskError, TaskLoadError, UnresolvedResourceError
from testpipe.loader import load_task_file, parse_task_definition
from testpipe.resource_map import ResourceMap
from testpipe.schemas import TaskDefinition, TaskStep


logger = logging.getLogger(__name__)


class TaskCache:
    """Task definitions keyed by file path, for one run.

    Entries are written once and never replaced, so the cache can be shared
    read-only across jobs.
    """

    def __init__(self):
        self._entries: Dict[str, TaskDefinition] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_or_load(self, path: str, load: Callable[[str], TaskDefinition]) -> TaskDefinition:
        if path in self._entries:
            logger.debug(f"Task cache hit: {path}")
            return self._entries[path]
        definition = load(path)
        self._entries.setdefault(path, definition)
        return self._entries[path]


def split_task_path(task_file: str) -> Tuple[str, str]:
    """Split `<resource>/<relative path>` into its two parts."""
    resource, _, relative = task_file.partition("/")
    return resource, relative


class TaskResolver:
    """Resolves task steps for one engine run."""

    def __init__(
        self,
        cache: Optional[TaskCache] = None,
        load: Callable[[str], TaskDefinition] = load_task_file,
    ):
        self.cache = cache if cache is not None else TaskCache()
        self._load = load

    def locate(self, task_file: str, resource_map: ResourceMap) -> str:
        """Return the on-disk path of an external task file.

        Raises:
            UnresolvedResourceError: If the map is empty or has no usable
                entry for the file's resource.
        """
        if not resource_map:
            raise UnresolvedResourceError(f"failed to load {task_file}; no config provided")

        resource, relative = split_task_path(task_file)
        resource_path = resource_map.get(resource)
        if not resource_path:
            raise UnresolvedResourceError(f"failed to find path for task: {task_file}")

        return str(Path(resource_path) / relative)

    def resolve(self, step: TaskStep, resource_map: ResourceMap, job_name: str) -> TaskDefinition:
        """Return the effective definition of a task step.

        Args:
            step: The task step as it appears in the plan
            resource_map: Where resources are checked out, for `file:` tasks
            job_name: Owning job, for error messages

        Returns:
            The canonical TaskDefinition

        Raises:
            UnresolvedResourceError, TaskLoadError, IncompleteTaskError
        """
        context = {"job_name": job_name, "task_name": step.name}
        definition = None

        try:
            if step.config is not None:
                definition = parse_task_definition(step.config, source=f"{job_name}/{step.name}")
            elif step.file:
                path = self.locate(step.file, resource_map)
                logger.debug(f"Resolving {job_name}/{step.name} from {path}")
                definition = self.cache.get_or_load(path, self._load)
        except (UnresolvedResourceError, TaskLoadError) as e:
            e.task_name = e.task_name or step.name
            raise e.with_context(job_name=job_name)

        if definition is None:
            raise IncompleteTaskError(f"task {job_name}/{step.name} is missing a definition", **context)
        if not definition.run_path:
            raise IncompleteTaskError(f"task {job_name}/{step.name} is missing a path", **context)

        return definition
