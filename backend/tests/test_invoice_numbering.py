from creator_crm import models
from creator_crm.services.invoice_numbering import (
    format_invoice_number,
    generate_invoice_number,
    next_invoice_number,
    parse_invoice_number,
)


def test_next_number_follows_highest_canonical_value():
    assert next_invoice_number(["INV-001", "INV-002"]).formatted == "INV-003"


def test_gaps_are_not_reused():
    assert next_invoice_number(["INV-001", "INV-005"]).formatted == "INV-006"


def test_empty_collection_starts_at_one():
    n = next_invoice_number([])
    assert n.formatted == "INV-001"
    assert n.seq == 1


def test_non_canonical_numbers_do_not_drive_the_sequence():
    assert next_invoice_number(["INV-001", "LEGACY-99"]).formatted == "INV-002"
    assert next_invoice_number([None, "", "inv-7", "INV-0004"]).formatted == "INV-001"


def test_candidate_skips_forward_past_taken_values():
    # "INV-1000" is past the canonical 3-digit form, so INV-999 drives the
    # sequence and the taken set pushes the candidate one further.
    assert next_invoice_number(["INV-999", "INV-1000"]).formatted == "INV-1001"


def test_format_and_parse():
    assert format_invoice_number(7) == "INV-007"
    assert format_invoice_number(1234) == "INV-1234"
    assert parse_invoice_number("INV-042") == 42
    assert parse_invoice_number(" INV-042 ") == 42
    assert parse_invoice_number("INV-1234") is None
    assert parse_invoice_number(None) is None


def test_generate_is_scoped_to_identity(db_session):
    db_session.add_all(
        [
            models.Invoice(user_id="creator-1", invoice_number="INV-001"),
            models.Invoice(user_id="creator-1", invoice_number="INV-002"),
            models.Invoice(user_id="creator-2", invoice_number="INV-010"),
        ]
    )
    db_session.commit()

    assert generate_invoice_number(db_session, user_id="creator-1").formatted == "INV-003"
    assert generate_invoice_number(db_session, user_id="creator-2").formatted == "INV-011"
    assert generate_invoice_number(db_session, user_id="creator-3").formatted == "INV-001"
