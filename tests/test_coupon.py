import re

import pytest

from app.core.coupon import generate_coupon_code, normalize_coupon_code, to_base36

COUPON_RE = re.compile(r"^GIT-[A-Z0-9]+-[A-Z0-9]{4}$")


def test_default_code_matches_order_code_format():
    code = generate_coupon_code()
    assert COUPON_RE.match(code), code


def test_timestamp_part_is_base36_of_milliseconds():
    code = generate_coupon_code(now_ms=1_700_000_000_000)
    _, stamp, suffix = code.split("-")
    assert stamp == to_base36(1_700_000_000_000)
    assert int(stamp, 36) == 1_700_000_000_000
    assert len(suffix) == 4


def test_custom_prefix_is_uppercased():
    code = generate_coupon_code(prefix="shop")
    assert code.startswith("SHOP-")
    assert code == code.upper()


def test_random_suffix_varies_for_the_same_instant():
    suffixes = {generate_coupon_code(now_ms=42).rsplit("-", 1)[1] for _ in range(20)}
    assert len(suffixes) > 1


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (9, "9"), (10, "A"), (35, "Z"), (36, "10"), (1295, "ZZ")],
)
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_normalize_coupon_code():
    assert normalize_coupon_code("  git-lqx3k2zb-7f0a ") == "GIT-LQX3K2ZB-7F0A"
