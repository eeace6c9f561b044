"""Choice between drawing everything and the culled path."""

from enum import Enum

from .cull import RenderBudget


class RenderMode(Enum):
    """How a render pass materializes contacts."""

    FULL = "full"  # Every laid-out contact, no culling
    VIRTUALIZED = "virtualized"  # Viewport cull + render budget


def select_render_mode(
    total_contacts: int,
    budget: RenderBudget,
    virtualization_enabled: bool = True,
) -> RenderMode:
    """Pick the render path for a contact count.

    Args:
        total_contacts: Number of contacts handed to render().
        budget: Render budget holding the threshold.
        virtualization_enabled: False forces the full path.

    Returns:
        RenderMode.VIRTUALIZED when enabled and total_contacts >= threshold.
    """
    if virtualization_enabled and total_contacts >= budget.threshold:
        return RenderMode.VIRTUALIZED
    return RenderMode.FULL
