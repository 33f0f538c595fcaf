import re
from collections.abc import Mapping

from .exceptions import InvariantViolation

COMPONENT_TYPE_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
COMPONENT_ID_PATTERN = re.compile(r"^[^:\s]+$")


def assert_component_type(component_type):
    if not isinstance(component_type, str) or not COMPONENT_TYPE_PATTERN.match(component_type):
        raise InvariantViolation(
            f"Invalid component type {component_type!r}: only letters, digits and '_' are allowed."
        )


def assert_component_id(component):
    """
    The persisted tag does not carry the type, so the id has to:
    the segment before the first '-' must equal the component type,
    and the id may not contain ':' or whitespace.
    """
    if not isinstance(component.id, str) or not COMPONENT_ID_PATTERN.match(component.id):
        raise InvariantViolation(f"Invalid component id: {component.id!r}")

    if component.id.split("-", 1)[0] != component.type:
        raise InvariantViolation(
            f"Component id {component.id!r} does not start with its type {component.type!r}."
        )


def assert_component(component):
    assert_component_id(component)

    if not isinstance(component.content, Mapping):
        raise InvariantViolation(f"{component.id}: content must be a mapping.")

    if not isinstance(component.settings, Mapping):
        raise InvariantViolation(f"{component.id}: settings must be a mapping.")

    if isinstance(component.order, bool) or not isinstance(component.order, int):
        raise InvariantViolation(f"{component.id}: order must be an integer.")
