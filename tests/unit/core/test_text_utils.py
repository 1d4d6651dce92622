import pytest
from app.core.utils.text_utils import strip_text, strip_identifier


@pytest.mark.parametrize(
    "test, expected",
    [
        (" Angel ", "Angel"),
        ("", None),
        ("   ", None),
        ("\t \n", None),
        (None, None),
        ("  FC   Barcelona  ", "FC   Barcelona"),
        (" test ", "test")
    ]
)
def test_text_utils(test, expected):
    assert strip_text(test) == expected


@pytest.mark.parametrize(
    "test, expected",
    [
        (" soccer ", "soccer"),
        (12345, "12345"),
        ("", None),
        (None, None),
        (True, True),
    ]
)
def test_strip_identifier(test, expected):
    assert strip_identifier(test) == expected
