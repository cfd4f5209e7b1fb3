# Copyright 2025 Ben Mensi
# SPDX-License-Identifier: Apache-2.0

"""Render check failures for a human."""

from typing import Optional

import jinja2

from testpipe.errors import DiffError, TestpipeError


DIFF_TEMPLATE = """\
{{ heading }}:
  Pipeline:	{{ pipeline_path }}
  Job:		{{ job_name }}
  Task:		{{ task_name }}
{%- if extra %}

  Extra {{ kind }} that should be removed:
{%- for name in extra %}
    {{ name }}
{%- endfor %}
{%- endif %}
{%- if missing %}

  Missing {{ kind }} that should be added:
{%- for name in missing %}
    {{ name }}
{%- endfor %}
{%- endif %}
"""

ERROR_TEMPLATE = """\
{% if pipeline_path %}Pipeline: {{ pipeline_path }}
{% endif %}{% if job_name %}Job: {{ job_name }}
{% endif %}{% if task_name %}Task: {{ task_name }}
{% endif %}Error: {{ message }}
"""

_env = jinja2.Environment(autoescape=False, undefined=jinja2.StrictUndefined)
_diff_template = _env.from_string(DIFF_TEMPLATE)
_error_template = _env.from_string(ERROR_TEMPLATE)


def render_diff(error: DiffError) -> str:
    """Render the extra/missing report for a parity or availability failure."""
    return _diff_template.render(
        heading=error.message,
        kind=error.kind,
        pipeline_path=error.pipeline_path or "",
        job_name=error.job_name or "",
        task_name=error.task_name or "",
        extra=error.diff.extra,
        missing=error.diff.missing,
    )


def render_error(error: TestpipeError, pipeline_path: Optional[str] = None) -> str:
    """Render any testpipe failure.

    `pipeline_path` is used when the error itself does not carry one.
    """
    if pipeline_path and error.pipeline_path is None:
        error.with_context(pipeline_path=pipeline_path)
    if isinstance(error, DiffError):
        return render_diff(error)
    return _error_template.render(
        pipeline_path=error.pipeline_path,
        job_name=error.job_name,
        task_name=error.task_name,
        message=error.message,
    )
