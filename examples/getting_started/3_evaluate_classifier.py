"""
Evaluate a classifier against labeled support tickets and save the report.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from routed_text_classifier import (
    load_categories,
    load_training_data,
    PromptClassifier,
    Evaluator,
    save_report
)
from routed_text_classifier.services.bedrock import StrandsGenerationBackend

datasets_dir = os.path.join(os.path.dirname(__file__), '..', 'datasets')

registry = load_categories(os.path.join(datasets_dir, 'support_tickets.json'))
dataset = load_training_data(
    os.path.join(datasets_dir, 'support_tickets_eval.jsonl'),
    registry=registry
)

classifier = PromptClassifier(registry, StrandsGenerationBackend())
evaluation = Evaluator().evaluate_dataset(classifier, dataset, categories=registry.names())

print(evaluation.format_report())

save_report(evaluation, os.path.join('output', 'support_tickets_evaluation.json'))
print("\nReport written to output/support_tickets_evaluation.json")
