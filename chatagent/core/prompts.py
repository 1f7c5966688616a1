# chatagent/core/prompts.py
"""
Prompt rendering from the Jinja2 templates shipped with the package.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import jinja2

TEMPLATES_DIR = Path(__file__).parent.parent / "templates" / "prompts"

# 模板别名
ALIASES = {
    'analysis': 'system_analysis.j2',
    'ask_analysis': 'system_ask_analysis.j2',
    'instruction': 'system_instruction.j2',
    'ask_instruction': 'system_ask_instruction.j2',
    'generate_code': 'system_generate_code.j2',
    'patch': 'system_patch.j2',
}


class PromptRenderer:

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.env = self._create_jinja_env()

    def _create_jinja_env(self) -> jinja2.Environment:
        loader = jinja2.FileSystemLoader(str(self.templates_dir))
        return jinja2.Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)

    def _resolve_template_path(self, template: str) -> str:
        if template in ALIASES:
            template = ALIASES[template]
        if not template.endswith('.j2'):
            template += '.j2'
        return template

    def render(self, template: str, **context: Any) -> str:
        template_path = self._resolve_template_path(template)
        try:
            tmpl = self.env.get_template(template_path)
        except jinja2.TemplateNotFound:
            raise FileNotFoundError(f"Template not found: {template_path}")
        return tmpl.render(**context).strip()

    def system_prompts(self) -> Dict[str, str]:
        """System prompt for every session role, keyed by alias."""
        return {alias: self.render(alias) for alias in ALIASES}
