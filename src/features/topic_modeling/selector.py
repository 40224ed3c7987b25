"""
Topic-Count Selector

Fits a trial model for every candidate topic count and records each
requested quality metric. The sweep only measures; picking k from the
curves (elbow, plateau) is left to the caller.

Usage:
    from src.features.topic_modeling.selector import TopicCountSelector

    selector = TopicCountSelector(
        hyperparameters=GibbsHyperparameters(iterations=300, burn_in=100),
        metrics=["Arun2010", "CaoJuan2009", "Deveaud2014"],
        max_workers=4,
    )
    sweep = selector.sweep(dtm, range(2, 16))
    print(sweep.to_frame().pivot(index="k", columns="metric", values="score"))
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from src.utils.parallel import ParallelProcessor

from .constants import DEFAULT_METRICS, SUPPORTED_METRICS
from .exceptions import CancelledError
from .metrics import compute_metrics, validate_metrics
from .sampler import CancelFlag, fit_lda, validate_hyperparameters, validate_topic_count
from .schemas import DocumentTermMatrix, GibbsHyperparameters, MetricRecord, TopicCountSweep

logger = logging.getLogger(__name__)


def score_candidate(
    args: Tuple[DocumentTermMatrix, int, GibbsHyperparameters, Tuple[str, ...], Optional[CancelFlag]]
) -> List[MetricRecord]:
    """
    Fit one candidate k and score it (module level so worker processes can pickle it).

    Args:
        args: (dtm, k, hyperparameters, metrics, cancel_event); the event is
            only passed when the candidate runs in the calling process

    Returns:
        One MetricRecord per requested metric
    """
    dtm, k, hyperparameters, metrics, cancel_event = args
    fit = fit_lda(dtm, k, hyperparameters, cancel_event=cancel_event)
    scores = compute_metrics(fit, dtm, metrics)
    return [MetricRecord(k=k, metric=name, score=score) for name, score in scores.items()]


class TopicCountSelector:
    """
    Sweeps candidate topic counts and measures each with the requested metrics.

    Every candidate is fitted with the same hyperparameters and seed, so the
    per-k fits are independent and can run in separate processes; they share
    only the read-only DTM.
    """

    def __init__(
        self,
        hyperparameters: Optional[GibbsHyperparameters] = None,
        metrics: Optional[Sequence[str]] = None,
        max_workers: Optional[int] = 1,
    ):
        """
        Initialize selector.

        Args:
            hyperparameters: Sampler settings shared by every trial fit
            metrics: Metric names (defaults to Arun2010, CaoJuan2009, Deveaud2014);
                an unordered set is ordered as in SUPPORTED_METRICS
            max_workers: Worker processes for per-k fits (1 = sequential, None = cpu count)

        Raises:
            ValueError: If a metric name is unknown
            InvalidHyperparameterError: If a sampler setting is out of range
        """
        self.hyperparameters = hyperparameters or GibbsHyperparameters()
        if metrics is None:
            metrics = DEFAULT_METRICS
        validate_metrics(list(metrics))
        if isinstance(metrics, (set, frozenset)):
            metrics = sorted(metrics, key=SUPPORTED_METRICS.index)
        self.metrics = tuple(metrics)
        self.max_workers = max_workers

        validate_hyperparameters(self.hyperparameters)

    def sweep(
        self,
        dtm: DocumentTermMatrix,
        k_values: Iterable[int],
        cancel_event: Optional[CancelFlag] = None,
    ) -> TopicCountSweep:
        """
        Fit and score every candidate topic count.

        All candidates are validated before the first fit, so a bad k never
        leaves a partial sweep behind.

        Args:
            dtm: Document-term matrix (read only)
            k_values: Candidate topic counts, e.g. ``range(2, 16)``
            cancel_event: Checked between sweeps of each fit when running
                sequentially, and between candidate fits otherwise

        Returns:
            TopicCountSweep with one record per (k, metric)

        Raises:
            InvalidTopicCountError: If any k < 2 or k > number of documents
            CancelledError: If ``cancel_event`` is set before the sweep completes
        """
        k_values = tuple(sorted(set(int(k) for k in k_values)))
        if not k_values:
            raise ValueError("At least one candidate topic count is required")
        for k in k_values:
            validate_topic_count(k, dtm.num_documents)

        logger.info(
            f"Sweeping k in {list(k_values)} with metrics {list(self.metrics)} "
            f"on {dtm.num_documents} documents x {dtm.num_terms} terms"
        )

        def _on_result(completed: int, records: List[MetricRecord]) -> None:
            logger.info(f"Scored k={records[0].k} ({completed}/{len(k_values)})")
            if cancel_event is not None and cancel_event.is_set() and completed < len(k_values):
                raise CancelledError(
                    f"Topic-count sweep cancelled after {completed} of {len(k_values)} candidates"
                )

        if cancel_event is not None and cancel_event.is_set():
            raise CancelledError("Topic-count sweep cancelled before the first candidate")

        processor = ParallelProcessor(max_workers=self.max_workers)
        # events cannot be pickled into worker processes
        in_process = not processor.should_use_parallel(
            len(k_values), processor.resolve_workers(len(k_values))
        )
        fit_cancel_event = cancel_event if in_process else None

        per_k = processor.map(
            score_candidate,
            [(dtm, k, self.hyperparameters, self.metrics, fit_cancel_event) for k in k_values],
            progress_callback=_on_result,
        )

        records = tuple(record for records in per_k for record in records)
        return TopicCountSweep(records=records, metrics=self.metrics, k_values=k_values)
