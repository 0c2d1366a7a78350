"""WhatsApp template registry loading and parameter rendering."""

from dataclasses import dataclass, field
from pathlib import Path

import yaml


_templates: dict | None = None


@dataclass
class RenderedTemplate:
    """A template name with its ordered, not yet truncated parameters."""

    template_name: str
    body_params: list[str] = field(default_factory=list)
    header_params: list[str] = field(default_factory=list)
    button: dict | None = None  # {"sub_type", "index", "text"}


def load_templates() -> dict:
    """
    Load the template registry from YAML.

    Caches templates after first load.
    """
    global _templates
    if _templates is not None:
        return _templates

    yaml_path = Path(__file__).parent / "templates.yaml"
    with open(yaml_path) as f:
        _templates = yaml.safe_load(f)

    return _templates


def render_template(message_type: str, context: dict) -> RenderedTemplate:
    """
    Resolve a message type to its WhatsApp template and parameters.

    Args:
        message_type: Key in templates.yaml, e.g. "meeting_ready_user"
        context: Values for the template's parameter keys

    Returns:
        RenderedTemplate with parameters in template order

    Raises:
        KeyError: If the message type is unknown or a parameter is missing
    """
    entry = load_templates()[message_type]

    button = None
    if entry.get("button"):
        button_entry = entry["button"]
        button = {
            "sub_type": button_entry.get("sub_type", "url"),
            "index": button_entry.get("index", 0),
            "text": str(context[button_entry["param"]]),
        }

    return RenderedTemplate(
        template_name=entry["template_name"],
        body_params=[str(context[key]) for key in entry.get("body") or []],
        header_params=[str(context[key]) for key in entry.get("header") or []],
        button=button,
    )
