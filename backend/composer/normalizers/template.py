from composer.domain.templates import ComponentPreset, PageTemplate


def normalize_template(template: PageTemplate, include_components=False):
    data = {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "component_types": [c.type for c in template.components],
    }

    if include_components:
        data["components"] = [
            {
                "type": c.type,
                "content": c.content,
                "settings": c.settings,
                "order": c.order,
            }
            for c in sorted(template.components, key=lambda c: c.order)
        ]

    return data


def normalize_preset(preset: ComponentPreset):
    return {
        "id": preset.id,
        "type": preset.type,
        "name": preset.name,
        "description": preset.description,
    }
