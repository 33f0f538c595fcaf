from composer.domain.components import ComponentItem, PaletteEntry


def normalize_component(component: ComponentItem):
    return component.to_dict()


def normalize_palette_entry(entry: PaletteEntry):
    return {
        "type": entry.id,
        "name": entry.name,
        "description": entry.description,
    }
