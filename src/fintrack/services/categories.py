"""Category management services."""

from __future__ import annotations

import re
from typing import Any, Optional

from ..domain.money import parse_type
from ..domain.repositories import CategoryRepository
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.category import DEFAULT_CATEGORY_COLOR, Category

logger = get_logger("categories")

_UNSET: Any = object()
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")
NAME_MAX_LENGTH = 64

# Palette offered by the category editor
DEFAULT_COLORS = (
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#10b981",
    "#06b6d4",
    "#3b82f6",
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
)


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Category name is required", field="name")
    if len(cleaned) > NAME_MAX_LENGTH:
        raise ValidationError(f"Category name must be at most {NAME_MAX_LENGTH} characters", field="name")
    return cleaned


def _clean_color(color: Optional[str]) -> str:
    if color is None or not color.strip():
        return DEFAULT_CATEGORY_COLOR
    cleaned = color.strip().lower()
    if not _COLOR_RE.match(cleaned):
        raise ValidationError(f"Color must look like #rrggbb: {color!r}", field="color")
    return cleaned


def create_category(
    repo: CategoryRepository,
    *,
    user_id: int,
    name: str,
    category_type: object,
    color: Optional[str] = None,
) -> Category:
    category = Category(
        user_id=user_id,
        name=_clean_name(name),
        category_type=parse_type(category_type).value,
        color=_clean_color(color),
    )
    created = repo.create(category, user_id=user_id)
    logger.info(
        "Category created",
        extra={"user_id": user_id, "category_id": created.id, "category_type": created.category_type},
    )
    return created


def update_category(
    repo: CategoryRepository,
    category_id: int,
    *,
    user_id: int,
    name: object = _UNSET,
    color: object = _UNSET,
    category_type: object = _UNSET,
) -> Category:
    current = repo.get_by_id(category_id, user_id=user_id)
    if current is None:
        raise NotFoundError("category", category_id)
    changes = Category(
        id=current.id,
        user_id=user_id,
        name=current.name if name is _UNSET else _clean_name(name),  # type: ignore[arg-type]
        color=current.color if color is _UNSET else _clean_color(color),  # type: ignore[arg-type]
        category_type=(
            current.category_type if category_type is _UNSET else parse_type(category_type).value
        ),
    )
    updated = repo.update(changes, user_id=user_id)
    logger.info("Category updated", extra={"user_id": user_id, "category_id": category_id})
    return updated


def delete_category(repo: CategoryRepository, category_id: int, *, user_id: int) -> int:
    """Delete a category; transactions that used it become uncategorized."""

    cleared = repo.delete(category_id, user_id=user_id)
    logger.info(
        "Category deleted",
        extra={"user_id": user_id, "category_id": category_id, "transactions_cleared": cleared},
    )
    return cleared


def list_categories(
    repo: CategoryRepository, *, user_id: int, category_type: Optional[str] = None
) -> list[Category]:
    if category_type is None:
        return repo.list_all(user_id=user_id)
    return repo.list_by_type(category_type, user_id=user_id)
