"""
app/services/document_projector.py

Document Expiry Projector.

Projects a single document's validity across the twelve months of a
requested year from its expiry date E.

Rules
-----
* No document                      -> every month: no_expiry, has_document=False
* Document without expiry date     -> every month: no_expiry, has_document=True
* Document with expiry date E:
    has_document(m) = E.year > year or (E.year == year and m <= E.month)
    expiry month (E.year == year)  -> literal status of E relative to today
    other covered month            -> valid, or expired when the document is
                                      expired and m is before the effective
                                      current month of ``year``
    uncovered month                -> expired, has_document=False

There is no roll-over: a document that expired in an earlier year is
uncovered for every month of any later year.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from app.domain.compliance import MONTH_LABELS, DocumentMonth, DocumentSnapshot, DocumentStatus
from db.models.enums import StoredDocumentStatus

EXPIRING_WINDOW_DAYS = 30


def document_status(expiry_date: date | None, today: date) -> DocumentStatus:
    """
    Overall status of a document on ``today``.
    """

    if expiry_date is None:
        return DocumentStatus.NO_EXPIRY

    days_until = (expiry_date - today).days
    if days_until < 0:
        return DocumentStatus.EXPIRED
    if days_until <= EXPIRING_WINDOW_DAYS:
        return DocumentStatus.EXPIRING_SOON
    return DocumentStatus.VALID


def stored_status(expiry_date: date | None, today: date) -> StoredDocumentStatus:
    """
    Map :func:`document_status` onto the persisted status vocabulary.
    Documents without expiry are stored as current.
    """

    status = document_status(expiry_date, today)
    if status is DocumentStatus.EXPIRED:
        return StoredDocumentStatus.EXPIRED
    if status is DocumentStatus.EXPIRING_SOON:
        return StoredDocumentStatus.EXPIRING_SOON
    return StoredDocumentStatus.CURRENT


def effective_current_month(year: int, today: date) -> int:
    """
    0-based month index that separates "past" from "not yet past" in
    ``year``.

    Past years return 12 (every month is past), future years return -1
    (no month is past) and the current year returns today's month.
    """

    if year < today.year:
        return 12
    if year > today.year:
        return -1
    return today.month - 1


def project_document(
    document: DocumentSnapshot | None,
    year: int,
    today: date,
) -> tuple[DocumentMonth, ...]:
    """
    Return twelve :class:`DocumentMonth` values for ``year``.
    """

    if document is None:
        return _uniform(DocumentStatus.NO_EXPIRY, has_document=False)

    expiry = document.expiry_date
    if expiry is None:
        return _uniform(DocumentStatus.NO_EXPIRY, has_document=True)

    overall = document_status(expiry, today)
    expiry_month = expiry.month - 1
    past_boundary = effective_current_month(year, today)

    months: list[DocumentMonth] = []
    for month_index, label in enumerate(MONTH_LABELS):
        covered = expiry.year > year or (expiry.year == year and month_index <= expiry_month)

        if not covered:
            status = DocumentStatus.EXPIRED
        elif expiry.year == year and month_index == expiry_month:
            status = overall
        elif overall is DocumentStatus.EXPIRED and month_index < past_boundary:
            status = DocumentStatus.EXPIRED
        else:
            status = DocumentStatus.VALID

        months.append(
            DocumentMonth(
                month_index=month_index,
                month=label,
                status=status,
                has_document=covered,
            )
        )
    return tuple(months)


def select_latest_document(documents: Iterable[DocumentSnapshot]) -> DocumentSnapshot | None:
    """
    Pick the authoritative document of a type: greatest ``created_at``,
    ties broken by the larger id so the choice is stable across requests.
    """

    latest: DocumentSnapshot | None = None
    for document in documents:
        if latest is None or (document.created_at, document.id) > (latest.created_at, latest.id):
            latest = document
    return latest


def _uniform(status: DocumentStatus, *, has_document: bool) -> tuple[DocumentMonth, ...]:
    return tuple(
        DocumentMonth(
            month_index=month_index,
            month=label,
            status=status,
            has_document=has_document,
        )
        for month_index, label in enumerate(MONTH_LABELS)
    )
