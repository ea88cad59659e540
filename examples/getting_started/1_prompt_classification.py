"""
Prompt-based classification with confidence routing.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from routed_text_classifier import (
    load_categories,
    PromptClassifier,
    ConfidenceRouter,
    FallbackHandler
)
from routed_text_classifier.services import InMemoryReviewQueue
from routed_text_classifier.services.bedrock import StrandsGenerationBackend

# Load the support ticket taxonomy
registry = load_categories(
    os.path.join(os.path.dirname(__file__), '..', 'datasets', 'support_tickets.json')
)

classifier = PromptClassifier(registry, StrandsGenerationBackend())
router = ConfidenceRouter(high=0.85, low=0.5)
review_queue = InMemoryReviewQueue()
handler = FallbackHandler(review_queue, fallback_category="uncategorized")

test_texts = [
    "I was charged for the premium plan but I'm on the free tier.",
    "The export button does nothing when I click it.",
    "Hello, just wanted to say thanks!"
]

print("Support Ticket Classification Results:")
print("=" * 50)

for i, text in enumerate(test_texts, 1):
    result = classifier.classify(text)
    route = router.route(result)
    handled = handler.handle(text, result, route)

    print(f"\n{i}. Text: {text[:60]}...")
    print(f"   Predicted Category: {result.category}")
    print(f"   Confidence: {result.confidence:.4f}")
    print(f"   Route: {route.value} -> Action: {handled.action.value} ({handled.category})")
    if handled.review_id:
        print(f"   Review ID: {handled.review_id}")

print(f"\nPending reviews: {len(review_queue)}")
