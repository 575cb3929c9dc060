from .generator import (
    render_as_child_family,
    render_family_set,
    render_main_family,
    render_spouse_as_child_family,
)

__all__ = [
    "render_as_child_family",
    "render_family_set",
    "render_main_family",
    "render_spouse_as_child_family",
]
