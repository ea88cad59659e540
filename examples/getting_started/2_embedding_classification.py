"""
Embedding similarity classification with a saved exemplar index.

The first run embeds every category example and saves the index; later runs
load it from disk.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from routed_text_classifier import load_categories, EmbeddingClassifier
from routed_text_classifier.services.bedrock import BedrockEmbeddingService

datasets_dir = os.path.join(os.path.dirname(__file__), '..', 'datasets')
index_path = os.path.join(datasets_dir, 'support_tickets_index.pkl.gz')

registry = load_categories(os.path.join(datasets_dir, 'support_tickets.json'))
classifier = EmbeddingClassifier(registry, BedrockEmbeddingService())

if os.path.exists(index_path):
    classifier.load_index(index_path)
    print("Loaded existing exemplar index")
else:
    classifier.build_index()
    classifier.save_index(index_path)
    print("Built and saved exemplar index")

texts = [
    "My two-factor code is never accepted.",
    "Would love a calendar integration.",
    "The invoice total doesn't match my plan."
]

# Batch classification runs concurrently and keeps input order
for item in classifier.classify_batch(texts):
    if item.ok:
        print(f"{item.text[:50]:<50} -> {item.result.category} ({item.result.confidence:.4f})")
    else:
        print(f"{item.text[:50]:<50} -> failed: {item.error}")
