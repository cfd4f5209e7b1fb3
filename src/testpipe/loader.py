# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""
Loader - read pipeline, task and config documents.

Turns YAML into the plan schemas:
- pipeline: {{placeholder}} tokens are neutralized to `true` first, so
  templated pipelines still parse
- task: external task file or inline `config:` → TaskDefinition
- config: `resource_map` → ResourceMap

No checking happens here beyond what is needed to build the types.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from testpipe.errors import (
    ConfigLoadError,
    MalformedPlanError,
    PipelineLoadError,
    TaskLoadError,
)
from testpipe.resource_map import ResourceMap
from testpipe.schemas import (
    AggregateStep,
    DoStep,
    GetStep,
    Job,
    Pipeline,
    PutStep,
    Step,
    TaskDefinition,
    TaskStep,
)


logger = logging.getLogger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{([a-zA-Z0-9_-]+)\}\}")

# Keys that decide a step's shape; exactly one must be set
STEP_KEYS = ("get", "put", "task", "aggregate", "do")


# =============================================================================
# Pipelines
# =============================================================================

def neutralize_placeholders(text: str) -> str:
    """Replace every {{identifier}} token with a literal `true`."""
    return PLACEHOLDER_PATTERN.sub("true", text)


def load_pipeline(path: Union[str, Path]) -> Pipeline:
    """Read and parse a pipeline document."""
    path = str(path)
    try:
        raw = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise PipelineLoadError(f"failed to read pipeline at {path}: {e}", pipeline_path=path)

    try:
        data = yaml.safe_load(neutralize_placeholders(raw))
    except yaml.YAMLError as e:
        raise PipelineLoadError(f"failed to unmarshal pipeline at {path}: {e}", pipeline_path=path)

    try:
        return parse_pipeline(data, path)
    except MalformedPlanError as e:
        raise e.with_context(pipeline_path=path)


def parse_pipeline(data: Any, path: str) -> Pipeline:
    """Build a Pipeline from an already-parsed document."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PipelineLoadError(
            f"failed to unmarshal pipeline at {path}: document must be a mapping",
            pipeline_path=path,
        )

    raw_jobs = data.get("jobs") or []
    if not isinstance(raw_jobs, list):
        raise MalformedPlanError("'jobs' must be a list", pipeline_path=path)

    jobs = []
    for index, raw_job in enumerate(raw_jobs):
        jobs.append(parse_job(raw_job, index))
    return Pipeline(path=path, jobs=tuple(jobs))


def parse_job(data: Any, index: int = 0) -> Job:
    if not isinstance(data, dict):
        raise MalformedPlanError(f"job {index} must be a mapping")

    name = data.get("name")
    if not name or not isinstance(name, str):
        raise MalformedPlanError(f"job {index} is missing a name")

    raw_plan = data.get("plan") or []
    if not isinstance(raw_plan, list):
        raise MalformedPlanError(f"plan of job {name} must be a list", job_name=name)

    try:
        plan = _parse_steps(raw_plan)
    except MalformedPlanError as e:
        raise e.with_context(job_name=name)
    return Job(name=name, plan=plan)


def _parse_steps(items: List[Any]) -> Tuple[Step, ...]:
    return tuple(parse_step(item) for item in items)


def parse_step(data: Any) -> Step:
    """Build one step from its mapping.

    Raises MalformedPlanError when the item has none of the step keys, more
    than one of them, or a value of the wrong type.
    """
    if not isinstance(data, dict):
        raise MalformedPlanError(f"plan item must be a mapping, got: {data!r}")

    present = [key for key in STEP_KEYS if data.get(key) not in (None, "")]
    if not present:
        raise MalformedPlanError(f"plan item matches no known step: {data!r}")
    if len(present) > 1:
        raise MalformedPlanError(
            f"plan item has more than one step type ({', '.join(present)}): {data!r}"
        )
    kind = present[0]
    value = data[kind]

    if kind in ("aggregate", "do"):
        if not isinstance(value, list):
            raise MalformedPlanError(f"'{kind}' must be a list of steps")
        children = _parse_steps(value)
        return AggregateStep(children) if kind == "aggregate" else DoStep(children)

    if not isinstance(value, str):
        raise MalformedPlanError(f"'{kind}' must be a name, got: {value!r}")

    if kind == "get":
        resource = data.get("resource")
        if resource is not None and not isinstance(resource, str):
            raise MalformedPlanError(f"resource of get {value} must be a name")
        return GetStep(name=value, resource=resource or None)
    if kind == "put":
        return PutStep(name=value)
    return _parse_task_step(value, data)


def _parse_task_step(name: str, data: Dict[str, Any]) -> TaskStep:
    config = data.get("config")
    if config is not None and not isinstance(config, dict):
        raise MalformedPlanError(f"config of task {name} must be a mapping", task_name=name)

    task_file = data.get("file")
    if task_file is not None and not isinstance(task_file, str):
        raise MalformedPlanError(f"file of task {name} must be a path", task_name=name)

    return TaskStep(
        name=name,
        file=task_file or None,
        config=config,
        params=_mapping(data, "params", name),
        input_mapping=_mapping(data, "input_mapping", name),
        output_mapping=_mapping(data, "output_mapping", name),
    )


def _mapping(data: Dict[str, Any], key: str, task_name: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedPlanError(f"{key} of task {task_name} must be a mapping", task_name=task_name)
    return {str(k): v for k, v in value.items()}


# =============================================================================
# Tasks
# =============================================================================

def load_task_file(path: Union[str, Path]) -> TaskDefinition:
    """Read and parse an external task file."""
    try:
        raw = Path(path).read_text()
    except OSError:
        raise TaskLoadError(f"failed to open task at {path}")
    except UnicodeDecodeError as e:
        raise TaskLoadError(f"failed to parse task at {path}: {e}")

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise TaskLoadError(f"failed to parse task at {path}: {e}")

    return parse_task_definition(data, source=str(path))


def parse_task_definition(data: Any, source: str) -> TaskDefinition:
    """Canonicalize a task document into a TaskDefinition.

    Args:
        data: Parsed YAML (file contents or an inline `config:` mapping)
        source: Where the document came from, for error messages

    Returns:
        TaskDefinition with declared names in document order
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise TaskLoadError(f"task at {source} must be a mapping")

    params = data.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise TaskLoadError(f"params of task at {source} must be a mapping")

    run = data.get("run")
    if run is None:
        run = {}
    if not isinstance(run, dict):
        raise TaskLoadError(f"run of task at {source} must be a mapping")
    run_path = run.get("path")

    return TaskDefinition(
        params=tuple(str(k) for k in params),
        inputs=_named_list(data, "inputs", source),
        outputs=_named_list(data, "outputs", source),
        run_path=str(run_path) if run_path else None,
    )


def _named_list(data: Dict[str, Any], key: str, source: str) -> Tuple[str, ...]:
    """Extract the `name` of each entry in an inputs/outputs list."""
    items = data.get(key)
    if items is None:
        return ()
    if not isinstance(items, list):
        raise TaskLoadError(f"{key} of task at {source} must be a list")

    names = []
    for item in items:
        if not isinstance(item, dict) or not item.get("name"):
            raise TaskLoadError(f"each entry in {key} of task at {source} needs a name")
        names.append(str(item["name"]))
    return tuple(names)


# =============================================================================
# Config
# =============================================================================

def load_config(path: Optional[Union[str, Path]]) -> ResourceMap:
    """Read the resource map from a config document.

    No path means no config: an empty map is returned.
    """
    if not path:
        return ResourceMap()

    try:
        raw = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigLoadError(f"Failed reading config file: {e}")

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed unmarshaling config file: {e}")

    return parse_config(data)


def parse_config(data: Any) -> ResourceMap:
    if data is None:
        return ResourceMap()
    if not isinstance(data, dict):
        raise ConfigLoadError("config file must contain a YAML mapping")

    raw_map = data.get("resource_map")
    if raw_map is None:
        return ResourceMap()
    if not isinstance(raw_map, Mapping):
        raise ConfigLoadError("resource_map must be a mapping of resource name to path")

    paths = {}
    for name, value in raw_map.items():
        paths[str(name)] = str(Path(str(value)).expanduser()) if value else ""
    logger.debug(f"Loaded resource map with {len(paths)} entries")
    return ResourceMap(paths)
