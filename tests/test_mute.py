import asyncio

import pytest

from rebroadcast.admission.mute import populate_muted
from rebroadcast.admission.schema import MutedPage, User
from rebroadcast.core.errors import MutedListError
from rebroadcast.core.memberset import MemberSet
from rebroadcast.plugins.fixtures import FixtureMutedSource


def test_follows_cursor_until_exhausted():
    source = FixtureMutedSource.from_ids([1234], [4567], [8910])
    muted = MemberSet()

    loaded = asyncio.run(populate_muted(source, muted))

    assert loaded == 3
    assert source.requested == ["-1", "1", "2"]
    for uid in (1234, 4567, 8910):
        assert muted.get(uid)
    assert not muted.get(1111)


def test_single_page():
    source = FixtureMutedSource.from_ids([1, 2])
    muted = MemberSet()
    assert asyncio.run(populate_muted(source, muted)) == 2
    assert source.requested == ["-1"]


def test_refresh_replaces_previous_members():
    muted = MemberSet([999])
    asyncio.run(populate_muted(FixtureMutedSource.from_ids([1], [2]), muted, replace=True))

    assert not muted.get(999)
    assert muted.get(1) and muted.get(2)


def test_without_replace_members_accumulate():
    muted = MemberSet([999])
    asyncio.run(populate_muted(FixtureMutedSource.from_ids([1]), muted))
    assert muted.get(999) and muted.get(1)


def test_cursor_loop_is_an_error():
    source = FixtureMutedSource(
        {
            "-1": MutedPage(users=[User(id=1)], next_cursor_str="5"),
            "5": MutedPage(users=[User(id=2)], next_cursor_str="-1"),
        }
    )
    with pytest.raises(MutedListError):
        asyncio.run(populate_muted(source, MemberSet()))
