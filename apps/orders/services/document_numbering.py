"""
Sequential per-year document numbering.

Numbers look like ``ORD-2024-0007``, ``INV-2024-0012`` and ``PO-2024-003``.
Each (series, year) pair has a DocumentSequence counter row. Allocation
locks that row with SELECT ... FOR UPDATE, so concurrent allocators in the
same series and year run one after another, and the lock is held until the
surrounding transaction (which also inserts the numbered entity) commits.

The counter is always reconciled against the highest number already
issued, so rows created before the counter existed (imports, manual
fixes) are never reissued. The unique constraint on every number column
stays as the last guard: ``create_with_document_number`` retries the
allocate + insert unit when it trips.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models.functions import Length
from django.utils import timezone

from ..models import (
    DocumentSeries,
    DocumentSequence,
    Order,
    Invoice,
    PurchaseOrder,
)
from .exceptions import UnknownDocumentSeriesError, DocumentNumberConflictError

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class SeriesFormat:
    prefix: str
    width: int
    model: type
    field: str


SERIES_FORMATS = {
    DocumentSeries.ORDER: SeriesFormat('ORD', 4, Order, 'order_number'),
    DocumentSeries.INVOICE: SeriesFormat('INV', 4, Invoice, 'invoice_number'),
    DocumentSeries.PURCHASE_ORDER: SeriesFormat('PO', 3, PurchaseOrder, 'po_number'),
}


def get_series_format(series: str) -> SeriesFormat:
    try:
        return SERIES_FORMATS[DocumentSeries(series)]
    except ValueError:
        raise UnknownDocumentSeriesError(f"Unknown document series: {series!r}")


def series_prefix(series: str, year: int) -> str:
    """``ORD-2024-`` style prefix shared by every number of the series/year."""
    return f"{get_series_format(series).prefix}-{year}-"


def format_document_number(series: str, year: int, value: int) -> str:
    """
    Format a sequence value.

    Example:
        >>> format_document_number('order', 2024, 8)
        'ORD-2024-0008'
        >>> format_document_number('purchase_order', 2024, 8)
        'PO-2024-008'
    """
    width = get_series_format(series).width
    return f"{series_prefix(series, year)}{value:0{width}d}"


def parse_sequence_value(number: str, prefix: str) -> Optional[int]:
    """Trailing numeric part of ``number`` after ``prefix``, or None."""
    if not number.startswith(prefix):
        return None
    suffix = number[len(prefix):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def find_highest_issued(series: str, year: int) -> int:
    """
    Numerically largest sequence value already used in ``series``/``year``.

    Ordering by length first keeps ``0010`` after ``0009`` and also puts a
    number that outgrew its padding (``10000``) ahead of ``9999``.
    Returns 0 when the year has no numbers yet.
    """
    fmt = get_series_format(series)
    prefix = series_prefix(series, year)

    numbers = (
        fmt.model.objects
        .filter(**{f'{fmt.field}__startswith': prefix})
        .annotate(number_length=Length(fmt.field))
        .order_by('-number_length', f'-{fmt.field}')
        .values_list(fmt.field, flat=True)
    )
    for number in numbers.iterator():
        value = parse_sequence_value(number, prefix)
        if value is not None:
            return value
    return 0


def _lock_sequence(series: str, year: int) -> DocumentSequence:
    """Fetch and lock the counter row, creating it on first use."""
    try:
        return DocumentSequence.objects.select_for_update().get(series=series, year=year)
    except DocumentSequence.DoesNotExist:
        pass

    try:
        with transaction.atomic():
            return DocumentSequence.objects.create(series=series, year=year, last_value=0)
    except IntegrityError:
        # Another allocator created the row first; wait for its lock
        return DocumentSequence.objects.select_for_update().get(series=series, year=year)


@transaction.atomic
def allocate_document_number(*, series: str, year: Optional[int] = None) -> str:
    """
    Allocate the next document number in a series.

    Call this inside the transaction that inserts the numbered entity:
    the counter lock is only released when that transaction ends. Use
    ``create_with_document_number`` to get the retry loop as well.

    Args:
        series: 'order', 'invoice' or 'purchase_order'
        year: Numbering year (defaults to the current UTC year)

    Returns:
        Formatted number, e.g. 'ORD-2024-0008'

    Raises:
        UnknownDocumentSeriesError: If series is not recognised
    """
    get_series_format(series)
    if year is None:
        year = timezone.now().year

    sequence = _lock_sequence(series, year)
    next_value = max(sequence.last_value, find_highest_issued(series, year)) + 1

    sequence.last_value = next_value
    sequence.save(update_fields=['last_value', 'updated_at'])

    return format_document_number(series, year, next_value)


def create_with_document_number(
    *,
    series: str,
    create: Callable[[str], T],
    year: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> T:
    """
    Allocate a number and insert the entity carrying it as one unit.

    ``create`` receives the allocated number and must insert the row. Each
    attempt runs in a savepoint; an IntegrityError rolls back both the
    counter bump and the insert, and the unit is retried with a fresh
    number.

    Args:
        series: Document series
        create: Callable inserting the entity, given its number
        year: Numbering year (defaults to the current UTC year)
        max_attempts: Attempts before giving up
            (defaults to settings.DOCUMENT_NUMBER_MAX_RETRIES)

    Returns:
        Whatever ``create`` returns

    Raises:
        DocumentNumberConflictError: If every attempt collided
    """
    if max_attempts is None:
        max_attempts = settings.DOCUMENT_NUMBER_MAX_RETRIES

    for attempt in range(1, max_attempts + 1):
        try:
            with transaction.atomic():
                number = allocate_document_number(series=series, year=year)
                return create(number)
        except IntegrityError:
            logger.warning(
                "Document number collision in series %s (attempt %d/%d)",
                series, attempt, max_attempts
            )

    logger.error("Giving up on %s number allocation after %d attempts", series, max_attempts)
    raise DocumentNumberConflictError(
        f"Could not allocate a unique {series} number after {max_attempts} attempts"
    )
