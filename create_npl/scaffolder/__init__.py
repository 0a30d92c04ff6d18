"""create-npl scaffolder -- copies template trees and fills in placeholders.

Quick usage::

    from create_npl.scaffolder import materialize, substitute

    await materialize(config.create_template_path, project_dir)
    await substitute(
        [project_dir / "package.json", project_dir / ".env"],
        {"name": "demo", "tenant": "acme", "app": "iou", "package": "iou"},
    )
"""

from create_npl.scaffolder.templates import (
    PLACEHOLDER_PATTERN,
    TemplateRenderer,
    materialize,
    substitute,
)

__all__ = [
    "PLACEHOLDER_PATTERN",
    "TemplateRenderer",
    "materialize",
    "substitute",
]
