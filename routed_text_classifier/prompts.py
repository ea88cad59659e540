"""
Prompt templates for the confidence-routed text classifier.
Contains all LLM prompts used throughout the system.
"""

from typing import Iterable

from .models.data_models import CategoryDefinition


class ClassificationPrompts:
    """Prompts for few-shot classification."""

    @staticmethod
    def category_block(category: CategoryDefinition, max_examples: int) -> str:
        """Render one category with its description and first examples."""
        lines = [f"- {category.name} ({category.label}): {category.description}"]
        if category.keywords:
            lines.append(f"  Keywords: {', '.join(sorted(category.keywords))}")
        for example in category.examples[:max_examples]:
            lines.append(f"  Example: {example}")
        return "\n".join(lines)

    @staticmethod
    def system_prompt(categories: Iterable[CategoryDefinition], max_examples: int = 3) -> str:
        """System prompt listing the taxonomy and the reply contract."""
        category_list = "\n".join(
            ClassificationPrompts.category_block(category, max_examples)
            for category in categories
        )

        return f"""You are a text classification expert. Assign the input text to exactly one of the categories below.

CATEGORIES:
{category_list}

INSTRUCTIONS:
1. Read the input text and compare it with each category description and its examples
2. Choose the single best matching category, using its exact name
3. Estimate your confidence between 0.0 and 1.0 that this category is correct
4. If a second category is also plausible, report it with its own confidence
5. Keep the reasoning to one or two sentences

Respond with ONLY a JSON object in this format:
{{
  "category": "exact category name",
  "confidence": 0.92,
  "reasoning": "short explanation",
  "secondary_category": "exact category name or null",
  "secondary_confidence": 0.05
}}"""

    @staticmethod
    def classification_prompt(text: str) -> str:
        """Per-request message carrying the text to classify."""
        return f"""Text to classify:
{text}"""
