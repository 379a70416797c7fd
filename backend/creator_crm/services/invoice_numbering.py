from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.orm import Session

from creator_crm import models

INVOICE_PREFIX = "INV-"
_CANONICAL_RE = re.compile(r"^INV-(\d{1,3})$")


@dataclass(frozen=True)
class InvoiceNumber:
    seq: int
    formatted: str


def format_invoice_number(seq: int) -> str:
    """Format: INV-001. Values past 999 keep growing (INV-1000)."""

    return f"{INVOICE_PREFIX}{seq:03d}"


def parse_invoice_number(value: str | None) -> int | None:
    """Sequence value of a canonical invoice number, None for anything else."""

    if not value:
        return None
    m = _CANONICAL_RE.match(str(value).strip())
    if not m:
        return None
    return int(m.group(1))


def next_invoice_number(existing: Iterable[str | None]) -> InvoiceNumber:
    """Next free number against a set of existing invoice numbers.

    - Non-canonical numbers (legacy/opaque) never drive the sequence but still
      block collisions.
    - Gaps are not reused: the candidate starts after the highest canonical value.
    """

    taken: set[str] = set()
    highest = 0
    for raw in existing:
        if not raw:
            continue
        number = str(raw).strip()
        taken.add(number)
        seq = parse_invoice_number(number)
        if seq is not None and seq > highest:
            highest = seq

    seq = highest + 1
    candidate = format_invoice_number(seq)
    while candidate in taken:
        seq += 1
        candidate = format_invoice_number(seq)
    return InvoiceNumber(seq=seq, formatted=candidate)


def existing_invoice_numbers(db: Session, *, user_id: str) -> list[str]:
    rows = (
        db.query(models.Invoice.invoice_number)
        .filter(models.Invoice.user_id == str(user_id))
        .all()
    )
    return [r[0] for r in rows]


def generate_invoice_number(db: Session, *, user_id: str) -> InvoiceNumber:
    """Unique at generation time only; nothing is reserved.

    The (user_id, invoice_number) unique constraint is what finally decides
    between two concurrent generations.
    """

    return next_invoice_number(existing_invoice_numbers(db, user_id=user_id))
