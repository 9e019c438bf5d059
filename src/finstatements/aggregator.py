# FinStatements - Financial statement engine for back-office applications
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Entry collection and aggregation.

This module provides the two steps between the adapters and the statement
builders:

1. ``collect_entries()``
   Runs every adapter's fetch concurrently in a thread pool, waits until
   all of them have returned, failed or timed out, then normalizes the
   records of the successful ones. A failed source never aborts the
   request: it is listed in ``failed_sources`` and a
   ``source_unavailable`` warning is recorded.

2. ``aggregate()``
   Groups ledger entries by (statement type, category, sub-category) and
   sums their integer amounts. The output order follows the taxonomy
   (statement type, then category declaration order, then sub-category),
   so that two calls over the same data return identical lists.
"""

import logging
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional

from .adapters import LedgerEntry, Scope, SourceAdapter
from .errors import EngineWarning, SourceUnavailable
from .periods import DateRange
from .taxonomy import STATEMENT_TYPES, Taxonomy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryTotal:
    """Sum of the entries sharing one grouping key, in minor units."""

    statement_type: str
    category: str
    sub_category: Optional[str]
    total: int


@dataclass
class CollectionResult:
    """Entries gathered from every source for one request."""

    entries: list[LedgerEntry] = field(default_factory=list)
    failed_sources: list[str] = field(default_factory=list)
    warnings: list[EngineWarning] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_sources)


def _unavailable(adapter: SourceAdapter, exc: SourceUnavailable) -> EngineWarning:
    return EngineWarning(
        kind="source_unavailable",
        message=str(exc),
        source=adapter.source_type,
    )


def collect_entries(
    adapters: Sequence[SourceAdapter],
    date_range: DateRange,
    scope: Optional[Scope] = None,
    *,
    max_workers: int = 5,
    timeout: Optional[float] = None,
) -> CollectionResult:
    """
    Fetch from every adapter concurrently and normalize the results.

    Parameters
    ----------
    adapters:
        Adapters to query. Results are joined in this order.
    date_range / scope:
        Passed unchanged to each adapter's ``fetch``.
    max_workers:
        Upper bound on concurrently running fetches.
    timeout:
        Seconds to wait for the whole batch. Fetches still running after
        that are abandoned and their source reported as unavailable.

    Returns
    -------
    CollectionResult
        Entries of the successful sources, names of the failed ones, and
        every warning raised along the way. A source whose payload cannot
        be normalized at all (not a sequence of records) counts as failed,
        exactly like one whose fetch raised.
    """
    result = CollectionResult()
    if not adapters:
        return result

    started = time.perf_counter()
    executor = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(adapters))),
        thread_name_prefix="finstatements-source",
    )
    try:
        futures = [
            (adapter, executor.submit(adapter.fetch, date_range, scope))
            for adapter in adapters
        ]
        done, _ = wait([f for _, f in futures], timeout=timeout)
    finally:
        # Abandoned fetches have no side effects; never block on them.
        executor.shutdown(wait=False, cancel_futures=True)

    for adapter, future in futures:
        if future not in done:
            err = SourceUnavailable(adapter.source_type, f"timed out after {timeout}s")
        else:
            exc = future.exception()
            if exc is None:
                try:
                    batch = adapter.normalize_all(future.result())
                except Exception as norm_exc:
                    # Payload not a sequence of records
                    exc = norm_exc
                else:
                    result.entries.extend(batch.entries)
                    result.warnings.extend(batch.warnings)
                    continue
            if isinstance(exc, SourceUnavailable):
                err = exc
            else:
                err = SourceUnavailable(adapter.source_type, f"{type(exc).__name__}: {exc}")

        logger.warning("%s", err)
        result.failed_sources.append(adapter.source_type)
        result.warnings.append(_unavailable(adapter, err))

    logger.debug(
        "Collected %d entries from %d sources (%d failed) in %.3fs",
        len(result.entries),
        len(adapters),
        len(result.failed_sources),
        time.perf_counter() - started,
    )
    return result


def aggregate(entries: Iterable[LedgerEntry], taxonomy: Taxonomy) -> list[CategoryTotal]:
    """Group entries by (statement type, category, sub-category) and sum them.

    Every entry must use a category of the taxonomy, declared under the
    entry's own statement type. Adapters guarantee this for the entries
    they produce, so a violation here is a programming error.

    Args:
        entries: Canonical ledger entries.
        taxonomy: Reference taxonomy.

    Returns:
        One CategoryTotal per distinct key, in taxonomy order.

    Raises:
        UnknownCategory: if an entry's category is unknown or belongs to
            another statement type.
    """
    # Plain Python ints: sums never wrap, whatever their magnitude.
    sums: dict[tuple[str, str, Optional[str]], int] = {}
    for e in entries:
        taxonomy.lookup(e.category, e.statement_type)
        key = (e.statement_type, e.category, e.sub_category or None)
        sums[key] = sums.get(key, 0) + int(e.amount_minor)

    statement_rank = {st: i for i, st in enumerate(STATEMENT_TYPES)}
    category_rank = {c.code: i for i, c in enumerate(taxonomy)}

    totals = [
        CategoryTotal(statement_type=st, category=cat, sub_category=sub, total=total)
        for (st, cat, sub), total in sums.items()
    ]
    totals.sort(
        key=lambda t: (
            statement_rank[t.statement_type],
            category_rank[t.category],
            t.sub_category or "",
        )
    )
    return totals
