# tests/unit/test_references.py

import re

import pytest

from matchpass.domain.limits import BOOKING_REFERENCE_MAX_LENGTH
from matchpass.domain.references import BookingReferenceGenerator


def test_reference_layout():
    generate = BookingReferenceGenerator(clock_ms=lambda: 1744271234567, token=lambda: "A3F09C")
    assert generate() == "IPLBK1744271234567A3F09C"


def test_default_reference_shape():
    reference = BookingReferenceGenerator()()
    assert re.fullmatch(r"IPLBK\d{13}[0-9A-F]{6}", reference)


def test_prefix_is_configurable():
    generate = BookingReferenceGenerator(prefix="TEST", clock_ms=lambda: 1, token=lambda: "000000")
    assert generate() == "TEST1000000"


def test_references_differ_within_the_same_millisecond():
    generate = BookingReferenceGenerator(clock_ms=lambda: 1744271234567)
    references = {generate() for _ in range(50)}
    assert len(references) > 1


def test_prefix_that_would_overflow_the_column_is_refused():
    with pytest.raises(ValueError):
        BookingReferenceGenerator(prefix="X" * (BOOKING_REFERENCE_MAX_LENGTH - 18))

    generate = BookingReferenceGenerator(
        prefix="X" * (BOOKING_REFERENCE_MAX_LENGTH - 19),
        clock_ms=lambda: 1744271234567,
        token=lambda: "A3F09C",
    )
    assert len(generate()) == BOOKING_REFERENCE_MAX_LENGTH
