from typing import Any, List, Sequence

EMPTY_MARKER = "(no items)"


def render_items(title: str, entities: Sequence[Any]) -> List[str]:
    """Renders a titled bullet list from a snapshot returned by ``get_all`` or ``lookup``."""
    if not entities:
        return [f"{title} (0):", f" - {EMPTY_MARKER}"]
    return [f"{title} ({len(entities)}):"] + [f" - {entity}" for entity in entities]


def render_group(title: str, key: Any, entities: Sequence[Any]) -> List[str]:
    return render_items(f"{title} for {key}", entities)
