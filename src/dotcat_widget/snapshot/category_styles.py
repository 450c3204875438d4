# src/dotcat_widget/snapshot/category_styles.py

from __future__ import annotations

from dataclasses import dataclass

from .snapshot_models import TaskCategory


@dataclass(frozen=True, slots=True)
class CategoryStyle:
    icon: str  # SF Symbols name; renderers map it to their own glyph set
    color: str  # "#RRGGBB"


FALLBACK_STYLE = CategoryStyle(icon="pawprint.fill", color="#6366F1")

CATEGORY_STYLES: dict[TaskCategory, CategoryStyle] = {
    TaskCategory.VACCINE: CategoryStyle(icon="syringe.fill", color="#10B981"),
    TaskCategory.MEDICINE: CategoryStyle(icon="pills.fill", color="#F59E0B"),
    TaskCategory.VET: CategoryStyle(icon="cross.fill", color="#1ABC9C"),
    TaskCategory.FOOD: CategoryStyle(icon="fork.knife", color="#EF4444"),
    TaskCategory.GROOMING: CategoryStyle(icon="scissors", color="#F39C12"),
    TaskCategory.OTHER: FALLBACK_STYLE,
}


def style_for(category: TaskCategory | str | None) -> CategoryStyle:
    """Style for any category value; unknown or future values get the fallback."""
    if not isinstance(category, TaskCategory):
        category = TaskCategory.from_raw(category)
    return CATEGORY_STYLES.get(category, FALLBACK_STYLE)
