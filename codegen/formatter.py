# ============================================================================
# MODULE FORMATTER
# ============================================================================
# EPOCH: 1 - VIRTUAL DB MODULE
# STATUS: Codegen - IR to source text
# PURPOSE: Render a ModuleIR through a Jinja2 template
# CREATED: 19 OCT 2026
# ============================================================================
"""
Module Formatter

Lays out a ModuleIR as Python source. Each node renders its own
fragment; the template only fixes the order and spacing.
"""

import logging

from jinja2 import BaseLoader, Environment, StrictUndefined

from codegen.ir import ModuleIR

logger = logging.getLogger(__name__)


MODULE_TEMPLATE = """\
# Generated by quarry. Do not edit.
{% for statement in imports -%}
{{ statement.render() }}
{% endfor %}
{{ client.render() }}
{% if bindings %}
{% for binding in bindings -%}
{{ binding.render() }}
{% endfor %}
{%- endif %}
"""


class ModuleFormatter:
    """Jinja2-based formatter for generated modules. Reusable."""

    def __init__(self, template: str = MODULE_TEMPLATE):
        self._env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )
        self._template = self._env.from_string(template)

    def format(self, module: ModuleIR) -> str:
        return self._template.render(
            imports=module.imports,
            client=module.client,
            bindings=module.bindings,
        )


__all__ = ["MODULE_TEMPLATE", "ModuleFormatter"]
