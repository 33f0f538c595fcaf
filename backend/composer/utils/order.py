ORDER_STEP = 10


def sort_by_order(items, order_field="order"):
    """
    Stable sort on the order field: ties keep their current relative position.
    """
    return sorted(items, key=lambda item: getattr(item, order_field))


def compact_order(items, order_field="order", step=ORDER_STEP):
    """
    Re-assigns order values (0, step, 2*step, ...) following the list's current
    positions. Mutates the items in place and returns the list.

    The gaps are cosmetic: every structural change renumbers the whole list.
    """
    for index, item in enumerate(items):
        setattr(item, order_field, index * step)

    return items


def insert_at(items, index, item):
    """
    Splices ``item`` at ``index`` (clamped to the list bounds) and renumbers.
    """
    index = max(0, min(index, len(items)))
    item.order = index * ORDER_STEP
    items.insert(index, item)
    compact_order(items)
    return index


def move(items, source, destination):
    """
    Moves the item at ``source`` to ``destination`` and renumbers.
    """
    if not 0 <= source < len(items):
        raise IndexError(f"Source index {source} out of range")
    if not 0 <= destination < len(items):
        raise IndexError(f"Destination index {destination} out of range")

    if source == destination:
        return False

    moved = items.pop(source)
    items.insert(destination, moved)
    compact_order(items)
    return True


def remove_by_id(items, item_id):
    """
    Removes the item whose ``id`` matches and renumbers the remainder.
    Returns the removed item, or None when nothing matched.
    """
    for index, item in enumerate(items):
        if item.id == item_id:
            removed = items.pop(index)
            compact_order(items)
            return removed

    return None
