from pool_ev.util.parsing import parse_share, safe_float


def test_safe_float_parses_numeric_inputs() -> None:
    assert safe_float(1) == 1.0
    assert safe_float(1.5) == 1.5
    assert safe_float("2,35") == 2.35
    assert safe_float(" -2.25 ") == -2.25
    assert safe_float(True) is None
    assert safe_float("  ") is None
    assert safe_float("abc") is None
    assert safe_float(None) is None


def test_parse_share_accepts_fractions_and_percentages() -> None:
    assert parse_share(0.55) == 0.55
    assert parse_share(55) == 0.55
    assert parse_share("12%") == 0.12
    assert parse_share(1) == 1.0
    assert parse_share(0) == 0.0


def test_parse_share_rejects_out_of_range() -> None:
    assert parse_share(-0.1) is None
    assert parse_share(150) is None
    assert parse_share("n/a") is None


def test_safe_float_handles_grouped_and_non_finite_numbers() -> None:
    assert safe_float("1 234,5") == 1234.5
    assert safe_float("3 000") == 3000.0
    assert safe_float("nan") is None
    assert safe_float(float("inf")) is None
    assert safe_float([1.5]) is None
