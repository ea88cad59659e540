"""
Concurrent batch classification shared by all classifier strategies.

Texts are fanned out over a bounded thread pool and fanned back in by input
index, so output order always matches input order. Two failure modes exist:

- best-effort (default): every text gets a BatchItemResult holding either its
  ClassificationResult or the exception it raised.
- fail-fast: once any item fails, outstanding work is cancelled and the
  failure with the lowest input index among the items that ran is re-raised;
  on success a plain list of ClassificationResult is returned.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed, FIRST_EXCEPTION, wait
from typing import Callable, List, Optional, Sequence, Union

from .models import ClassificationResult, BatchItemResult
from .exceptions import InvalidInputError


logger = logging.getLogger(__name__)

ClassifyFn = Callable[[str], ClassificationResult]


def run_batch(
    classify: ClassifyFn,
    texts: Sequence[str],
    max_workers: Optional[int] = None,
    fail_fast: Optional[bool] = None
) -> Union[List[ClassificationResult], List[BatchItemResult]]:
    """
    Run ``classify`` over ``texts`` concurrently.

    Args:
        classify: Single-text classification function
        texts: Input texts
        max_workers: Upper bound on concurrent provider calls
        fail_fast: Abort on first failure (defaults to configuration)

    Returns:
        ClassificationResult list in fail-fast mode, BatchItemResult list otherwise

    Raises:
        InvalidInputError: If texts is not a sequence of strings
        ClassifierError: Lowest-index failure among the items that ran, fail-fast mode only
    """
    from .config import config

    if isinstance(texts, str):
        raise InvalidInputError("texts must be a sequence of strings, not a single string")
    texts = list(texts)

    if max_workers is None:
        max_workers = config.batch.max_workers
    if max_workers <= 0:
        raise InvalidInputError("max_workers must be positive")
    if fail_fast is None:
        fail_fast = config.batch.fail_fast

    if not texts:
        return []

    workers = min(max_workers, len(texts))
    logger.info(
        f"Classifying batch of {len(texts)} texts with {workers} workers "
        f"({'fail-fast' if fail_fast else 'best-effort'})"
    )

    if fail_fast:
        return _run_fail_fast(classify, texts, workers)
    return _run_best_effort(classify, texts, workers)


def _run_best_effort(classify: ClassifyFn, texts: List[str], workers: int) -> List[BatchItemResult]:
    items: List[Optional[BatchItemResult]] = [None] * len(texts)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(classify, text): i for i, text in enumerate(texts)}
        for future in as_completed(futures):
            index = futures[future]
            try:
                items[index] = BatchItemResult(index=index, text=texts[index], result=future.result())
            except Exception as e:
                logger.warning(f"Batch item {index} failed: {type(e).__name__}: {e}")
                items[index] = BatchItemResult(index=index, text=texts[index], error=e)

    failed = sum(1 for item in items if not item.ok)
    if failed:
        logger.warning(f"Batch completed with {failed}/{len(texts)} failed items")
    return items


def _run_fail_fast(classify: ClassifyFn, texts: List[str], workers: int) -> List[ClassificationResult]:
    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(classify, text) for text in texts]
        _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        for future in not_done:
            future.cancel()
        # Running items settle before the lowest-index failure is picked
        wait(futures)

        failed = [f for f in futures if not f.cancelled() and f.exception() is not None]
        if failed:
            index = futures.index(failed[0])
            error = failed[0].exception()
            logger.error(f"Batch aborted: item {index} failed: {type(error).__name__}: {error}")
            raise error

        return [future.result() for future in futures]
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
