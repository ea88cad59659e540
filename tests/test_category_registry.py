"""
Tests for the category registry and taxonomy loading.
"""

import json
import pytest

from routed_text_classifier.category_registry import CategoryRegistry, load_categories
from routed_text_classifier.models.data_models import CategoryDefinition
from routed_text_classifier.exceptions import ConfigError


def make_category(name, parent=None, examples=("first example", "second example"), **kwargs):
    return CategoryDefinition(
        name=name,
        label=kwargs.pop("label", name.title()),
        description=kwargs.pop("description", f"Texts about {name}"),
        examples=examples,
        parent=parent,
        **kwargs
    )


class TestCategoryRegistry:
    """Test cases for CategoryRegistry."""

    def test_register_preserves_order(self):
        """Test that all() returns categories in registration order."""
        registry = CategoryRegistry.register([
            make_category("zeta"),
            make_category("alpha"),
            make_category("mid")
        ])

        assert [c.name for c in registry.all()] == ["zeta", "alpha", "mid"]
        assert registry.names() == ["zeta", "alpha", "mid"]
        assert registry.index_of("alpha") == 1
        assert len(registry) == 3

    def test_lookup(self):
        """Test lookup by name returns the definition or None."""
        registry = CategoryRegistry.register([make_category("billing"), make_category("tech")])

        assert registry.lookup("billing").name == "billing"
        assert registry.lookup("missing") is None
        assert "tech" in registry
        assert "missing" not in registry

    def test_duplicate_names_rejected(self):
        """Test that two categories sharing a name fail registration."""
        with pytest.raises(ConfigError, match="Duplicate category name"):
            CategoryRegistry.register([make_category("billing"), make_category("billing")])

    def test_single_example_rejected(self):
        """Test that a category with only one example fails registration."""
        with pytest.raises(ConfigError, match="at least 2 examples"):
            CategoryRegistry.register([make_category("billing", examples=("only one",))])

    def test_empty_registry_rejected(self):
        """Test that an empty category set fails registration."""
        with pytest.raises(ConfigError, match="cannot be empty"):
            CategoryRegistry.register([])

    def test_dangling_parent_rejected(self):
        """Test that a parent must reference a registered category."""
        with pytest.raises(ConfigError, match="unknown parent"):
            CategoryRegistry.register([make_category("refund", parent="billing")])

    def test_self_parent_rejected(self):
        """Test that a category cannot be its own parent."""
        with pytest.raises(ConfigError, match="cycle"):
            CategoryRegistry.register([make_category("billing", parent="billing")])

    def test_parent_cycle_rejected(self):
        """Test that a longer parent cycle is detected."""
        with pytest.raises(ConfigError, match="cycle"):
            CategoryRegistry.register([
                make_category("a", parent="c"),
                make_category("b", parent="a"),
                make_category("c", parent="b"),
                make_category("d")
            ])

    def test_parent_declared_after_child(self):
        """Test that parents may be registered after their children."""
        registry = CategoryRegistry.register([
            make_category("refund", parent="billing"),
            make_category("billing")
        ])

        assert registry.ancestors("refund") == ["billing"]
        assert registry.ancestors("billing") == []

    def test_ancestors_chain(self):
        """Test ancestors are returned nearest first."""
        registry = CategoryRegistry.register([
            make_category("root"),
            make_category("middle", parent="root"),
            make_category("leaf", parent="middle")
        ])

        assert registry.ancestors("leaf") == ["middle", "root"]

    def test_ancestors_unknown_category(self):
        """Test ancestors of an unknown category raises ConfigError."""
        registry = CategoryRegistry.register([make_category("root")])

        with pytest.raises(ConfigError):
            registry.ancestors("missing")

    def test_category_definition_is_immutable(self):
        """Test that category definitions cannot be modified after creation."""
        category = make_category("billing", examples=["a", "b"], keywords={"invoice"})

        assert category.examples == ("a", "b")
        assert category.keywords == frozenset({"invoice"})
        with pytest.raises(Exception):
            category.name = "other"


class TestLoadCategories:
    """Test cases for loading a taxonomy from JSON."""

    def write(self, tmp_path, data):
        path = tmp_path / "categories.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def test_load_valid_file(self, tmp_path):
        """Test loading a valid taxonomy file."""
        path = self.write(tmp_path, {
            "categories": [
                {
                    "name": "billing",
                    "label": "Billing",
                    "description": "Payments",
                    "examples": ["charged twice", "need invoice"],
                    "keywords": ["invoice"]
                },
                {
                    "name": "refund",
                    "description": "Refund requests",
                    "examples": ["money back", "refund me"],
                    "parent": "billing"
                }
            ]
        })

        registry = load_categories(path)

        assert registry.names() == ["billing", "refund"]
        assert registry.lookup("refund").label == "refund"
        assert registry.lookup("refund").parent == "billing"
        assert registry.lookup("billing").keywords == frozenset({"invoice"})

    def test_load_missing_file(self):
        """Test loading a nonexistent file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_categories("/nonexistent/categories.json")

    def test_load_invalid_json(self, tmp_path):
        """Test invalid JSON raises ConfigError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_categories(str(path))

    def test_load_missing_examples_field(self, tmp_path):
        """Test a category without examples raises ConfigError."""
        path = self.write(tmp_path, {"categories": [{"name": "x", "description": "y"}]})

        with pytest.raises(ConfigError, match="examples"):
            load_categories(path)

    def test_load_bundled_example_taxonomy(self):
        """Test the bundled support ticket taxonomy is valid."""
        from routed_text_classifier.config import DEFAULT_CATEGORIES_PATH

        registry = load_categories(DEFAULT_CATEGORIES_PATH)

        assert registry.names()[0] == "billing"
        assert registry.ancestors("billing_refund") == ["billing"]
