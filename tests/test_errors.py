import pytest

from siteforge.errors import Error, chain


def test_message_is_used_as_text():
    err = Error("something broke")
    assert str(err) == "something broke"
    assert err.message == "something broke"
    assert err.source is None


def test_non_string_message_is_converted():
    err = Error(42)
    assert str(err) == "42"


def test_chain_keeps_source_as_cause():
    inner = ValueError("inner problem")
    err = chain("outer problem", inner)
    assert str(err) == "outer problem"
    assert err.source is inner
    assert err.__cause__ is inner


def test_chain_is_raisable_and_catchable():
    inner = OSError("disk")
    with pytest.raises(Error) as info:
        raise chain("Failed to process image: a.png", inner)
    assert info.value.__cause__ is inner
    assert "a.png" in str(info.value)