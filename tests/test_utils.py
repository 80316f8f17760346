import pytest

from rebroadcast.infra.utils import import_from_path, new_request_id
from rebroadcast.plugins.fixtures import provide_collaborators


def test_import_from_path_resolves_provider():
    assert import_from_path("rebroadcast.plugins.fixtures:provide_collaborators") is provide_collaborators


@pytest.mark.parametrize(
    "path",
    [
        "rebroadcast.plugins.fixtures",
        ":provide_collaborators",
        "rebroadcast.plugins.fixtures:",
        "rebroadcast.plugins.fixtures:nope",
        "rebroadcast.plugins.fixtures:FixtureBroadcaster",
        "rebroadcast.plugins.twitter_live:RECOVERABLE_CODES",
    ],
)
def test_import_from_path_rejects_bad_paths(path):
    with pytest.raises(ValueError):
        import_from_path(path)


def test_request_ids_are_short_and_unique():
    ids = {new_request_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) == 12 for i in ids)
