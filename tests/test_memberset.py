import pytest

from rebroadcast.core.memberset import MemberKey, MemberSet, normalize_key


class Int32(int):
    """Entero de ancho fijo (como los ids que vienen de otra lib)."""


def test_add_get_delete():
    s = MemberSet()
    s.add(1111)
    assert s.get(1111)

    s.delete(1111)
    assert not s.get(1111)

    # borrar algo que no está no rompe
    s.delete(1111)


def test_integer_widths_are_the_same_member():
    s = MemberSet()
    s.add(Int32(12345))
    s.add(728684316415295488)

    assert s.get(12345)
    assert s.get(728684316415295488)
    assert normalize_key(Int32(12345)) == normalize_key(12345) == MemberKey("id", 12345)


def test_text_and_numeric_keys_are_distinct():
    s = MemberSet()
    s.add("8888")

    assert not s.get(8888)
    assert s.get("8888")


def test_text_is_exact_match():
    s = MemberSet(["cake"])
    assert s.get("cake")
    assert not s.get("Cake")


def test_missing_ids_not_present():
    s = MemberSet([1234])
    assert not s.get(0)
    assert 0 not in s
    assert 1234 in s


def test_rejects_unsupported_keys():
    with pytest.raises(TypeError):
        normalize_key(True)
    with pytest.raises(TypeError):
        normalize_key(1.5)  # type: ignore[arg-type]
    assert 1.5 not in MemberSet()


def test_replace_swaps_contents():
    s = MemberSet([1, 2, 3])
    s.replace([3, 4])

    assert not s.get(1)
    assert s.get(4)
    assert len(s) == 2
