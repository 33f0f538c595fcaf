# composer/domain/codec.py
"""
Page content codec.

A page persists its components inside a single text field, one HTML
comment per component::

    \\n<!-- component:<id>:<order>:<json> -->

``<json>`` is ``{"content": ..., "settings": ...}``. The type is not stored;
it is the segment of ``<id>`` before the first '-'.
"""
from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Iterable, List

from composer.domain.components import ComponentItem, component_type_from_id
from composer.domain.invariants.component import assert_component_id
from composer.utils.order import sort_by_order

logger = logging.getLogger(__name__)

COMPONENT_TAG = "\n<!-- component:{id}:{order}:{payload} -->"

COMPONENT_TAG_PATTERN = re.compile(
    r"<!--\s*component:(?P<id>[^:\s]+):(?P<order>-?\d+):(?P<payload>.*?)\s*-->"
)

# "-->" would close the comment early. "\u003e" is the JSON escape for ">",
# so any JSON reader turns it back into "-->".
COMMENT_CLOSE = "-->"
ESCAPED_COMMENT_CLOSE = "--\\u003e"


def encode_payload(component: ComponentItem) -> str:
    payload = json.dumps(
        component.payload(),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return payload.replace(COMMENT_CLOSE, ESCAPED_COMMENT_CLOSE)


def encode_components(components: Iterable[ComponentItem]) -> str:
    """
    Serializes components, sorted by order, into page content.
    """
    lines = []

    for component in sort_by_order(components):
        assert_component_id(component)
        lines.append(
            COMPONENT_TAG.format(
                id=component.id,
                order=component.order,
                payload=encode_payload(component),
            )
        )

    return "".join(lines)


def decode_components(text: str | None) -> List[ComponentItem]:
    """
    Parses every component tag in ``text``. Tags whose payload is not valid
    JSON (or not shaped like a payload) are skipped; other text is ignored.
    """
    if not text:
        return []

    components: List[ComponentItem] = []

    for match in COMPONENT_TAG_PATTERN.finditer(text):
        component_id = match.group("id")

        try:
            payload = json.loads(match.group("payload"))
        except ValueError:
            logger.warning("Skipping component %s: malformed JSON payload", component_id)
            continue

        if not isinstance(payload, Mapping):
            logger.warning("Skipping component %s: payload is not an object", component_id)
            continue

        content = payload.get("content", {})
        settings = payload.get("settings", {})

        if content is None:
            content = {}
        if settings is None:
            settings = {}

        if not isinstance(content, Mapping) or not isinstance(settings, Mapping):
            logger.warning("Skipping component %s: content/settings are not objects", component_id)
            continue

        components.append(
            ComponentItem(
                id=component_id,
                type=component_type_from_id(component_id),
                content=dict(content),
                settings=dict(settings),
                order=int(match.group("order")),
            )
        )

    return sort_by_order(components)
