import pytest
from bookie.conf import BookieConf, SqliteRepoConf


def config():
    return BookieConf(repo_conf=SqliteRepoConf(db_path=':memory:'))


@pytest.fixture
def repo():
    repo = config().repo_conf.instantiate()
    repo.sync()
    yield repo
    repo.close()


@pytest.fixture
def bk():
    with config().instantiate() as bk:
        yield bk
