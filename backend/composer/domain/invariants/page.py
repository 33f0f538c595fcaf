from composer.utils.order import ORDER_STEP
from .component import assert_component
from .exceptions import InvariantViolation


def assert_component_order(components, step=ORDER_STEP):
    orders = [component.order for component in components]
    expected = [index * step for index in range(len(orders))]

    if orders != expected:
        raise InvariantViolation(
            f"Component orders are not renumbered in steps of {step}: {orders}"
        )


def assert_page_components(components):
    ids = [component.id for component in components]
    duplicates = sorted({component_id for component_id in ids if ids.count(component_id) > 1})

    if duplicates:
        raise InvariantViolation(f"Duplicate component ids: {duplicates}")

    assert_component_order(components)

    for component in components:
        assert_component(component)
