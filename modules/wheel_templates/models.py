"""Wheel templates: reusable prototypes copied by value into new wheels."""

from repository import Field, Repository

WHEEL_TEMPLATES_SLOT = "wheel-templates"
MAX_TEMPLATE_NAME_LENGTH = 100


class WheelTemplateRepository(Repository):
    slot = WHEEL_TEMPLATES_SLOT
    entity = "Template"
    fields = (
        Field("name", required=True, max_length=MAX_TEMPLATE_NAME_LENGTH),
        Field("year", required=True, max_length=10),
        Field("make", required=True, max_length=50),
        Field("model", required=True, max_length=50),
        Field("trim", max_length=50),
        Field("size", max_length=30),
        Field("boltPattern", max_length=30),
        Field("offset", max_length=30),
        Field("oemPart", max_length=50),
    )


def template_to_wheel(template: dict) -> dict:
    """Wheel fields prefilled from a template (no link back to the template)."""
    return {name: template[name] for name in
            ("year", "make", "model", "trim", "size", "boltPattern", "offset", "oemPart")
            if template.get(name) not in (None, "")}
