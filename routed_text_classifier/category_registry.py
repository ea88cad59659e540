"""
Category registry holding the fixed classification taxonomy.

The registry is validated once at construction and is read-only afterwards,
so a single instance can be shared by concurrent classification calls.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Any

from .models.data_models import CategoryDefinition
from .exceptions import ConfigError


logger = logging.getLogger(__name__)

MIN_EXAMPLES_PER_CATEGORY = 2


class CategoryRegistry:
    """Ordered, validated collection of category definitions."""

    def __init__(self, categories: Sequence[CategoryDefinition]):
        """
        Validate and store the categories.

        Args:
            categories: Category definitions in canonical order

        Raises:
            ConfigError: If the category set is empty, has duplicate names,
                categories with too few examples, or a broken parent chain
        """
        categories = tuple(categories)
        if not categories:
            raise ConfigError("Category registry cannot be empty")

        by_name: Dict[str, CategoryDefinition] = {}
        for category in categories:
            if category.name in by_name:
                raise ConfigError(f"Duplicate category name: {category.name}")
            if len(category.examples) < MIN_EXAMPLES_PER_CATEGORY:
                raise ConfigError(
                    f"Category '{category.name}' needs at least {MIN_EXAMPLES_PER_CATEGORY} "
                    f"examples, got {len(category.examples)}"
                )
            by_name[category.name] = category

        self._categories: Tuple[CategoryDefinition, ...] = categories
        self._by_name = by_name
        self._positions = {category.name: i for i, category in enumerate(categories)}
        self._validate_parents()

        logger.info(f"Registered {len(categories)} categories")

    @classmethod
    def register(cls, categories: Sequence[CategoryDefinition]) -> 'CategoryRegistry':
        """Build a registry, failing with ConfigError on an invalid taxonomy."""
        return cls(categories)

    def _validate_parents(self) -> None:
        """
        Check that every parent exists and that no category is its own ancestor.

        Raises:
            ConfigError: On a dangling parent reference or a cycle
        """
        for category in self._categories:
            if category.parent is not None and category.parent not in self._by_name:
                raise ConfigError(
                    f"Category '{category.name}' references unknown parent '{category.parent}'"
                )

        # Walk each chain; revisiting a name on the current walk means a cycle
        acyclic = set()
        for category in self._categories:
            path: List[str] = []
            on_path = set()
            current: Optional[str] = category.name
            while current is not None and current not in acyclic:
                if current in on_path:
                    cycle = " -> ".join(path[path.index(current):] + [current])
                    raise ConfigError(f"Category parent cycle detected: {cycle}")
                on_path.add(current)
                path.append(current)
                current = self._by_name[current].parent
            acyclic.update(path)

    def lookup(self, name: str) -> Optional[CategoryDefinition]:
        """Return the category with this name, or None."""
        return self._by_name.get(name)

    def all(self) -> Tuple[CategoryDefinition, ...]:
        """All categories in registration order."""
        return self._categories

    def names(self) -> List[str]:
        """Category names in registration order."""
        return [category.name for category in self._categories]

    def index_of(self, name: str) -> int:
        """Registration position of a category."""
        try:
            return self._positions[name]
        except KeyError:
            raise ConfigError(f"Unknown category: {name}")

    def ancestors(self, name: str) -> List[str]:
        """Parent chain of a category, nearest parent first."""
        category = self.lookup(name)
        if category is None:
            raise ConfigError(f"Unknown category: {name}")
        chain = []
        current = category.parent
        while current is not None:
            chain.append(current)
            current = self._by_name[current].parent
        return chain

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._categories)

    def __iter__(self) -> Iterator[CategoryDefinition]:
        return iter(self._categories)


def _category_from_dict(i: int, data: Any) -> CategoryDefinition:
    if not isinstance(data, dict):
        raise ConfigError(f"Category {i} must be a JSON object")

    for required in ("name", "description", "examples"):
        if required not in data:
            raise ConfigError(f"Category {i} missing required '{required}' field")

    name = data["name"]
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(f"Category {i} name must be a non-empty string")

    examples = data["examples"]
    if not isinstance(examples, list) or not all(isinstance(x, str) for x in examples):
        raise ConfigError(f"Category '{name}' examples must be a list of strings")

    keywords = data.get("keywords") or []
    if not isinstance(keywords, list) or not all(isinstance(x, str) for x in keywords):
        raise ConfigError(f"Category '{name}' keywords must be a list of strings")

    try:
        return CategoryDefinition(
            name=name,
            label=data.get("label") or name,
            description=data["description"],
            examples=tuple(examples),
            keywords=frozenset(keywords),
            parent=data.get("parent"),
        )
    except ValueError as e:
        raise ConfigError(f"Invalid category {i}: {e}")


def load_categories(filepath: str) -> CategoryRegistry:
    """
    Load a taxonomy JSON file into a registry.

    The file holds ``{"categories": [{"name", "label", "description",
    "examples", "keywords"?, "parent"?}, ...]}``.

    Args:
        filepath: Path to the taxonomy JSON file

    Returns:
        Validated CategoryRegistry

    Raises:
        ConfigError: If the file is missing, unreadable or describes an invalid taxonomy
    """
    path = Path(filepath)
    if not path.exists():
        raise ConfigError(f"Categories file not found: {filepath}")
    if not path.is_file():
        raise ConfigError(f"Path is not a file: {filepath}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in categories file: {str(e)}")
    except OSError as e:
        raise ConfigError(f"Failed to read categories file: {str(e)}")

    if not isinstance(data, dict) or "categories" not in data:
        raise ConfigError("Categories file missing required 'categories' field")
    if not isinstance(data["categories"], list):
        raise ConfigError("'categories' field must be a list")

    categories = [_category_from_dict(i, item) for i, item in enumerate(data["categories"])]
    return CategoryRegistry.register(categories)
