"""Template rendering for user-supplied strings.

Release titles, target commitish, milestone names, provider URLs and
announcement messages are Jinja2 templates rendered against the run's
variables (``{{ tag }}``, ``{{ project_name }}``, ...). Unknown variables are
errors rather than empty strings.
"""

from __future__ import annotations

from collections.abc import Mapping

from jinja2 import Environment, StrictUndefined, TemplateError

from .errors import ReleaseError
from .result import Err, Ok, Result

__all__ = ["render"]

_env = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)


def render(template: str, variables: Mapping[str, object]) -> Result[str, ReleaseError]:
    """Render ``template`` with ``variables``.

    Returns:
        Ok(rendered) or Err(ReleaseError(kind="template")) naming the template.
    """
    if "{" not in template:
        return Ok(template)
    try:
        return Ok(_env.from_string(template).render(**variables))
    except TemplateError as e:
        return Err(
            ReleaseError(
                kind="template",
                message=f"failed to render template: {e}",
                hint=template,
            )
        )
