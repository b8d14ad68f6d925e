from datetime import datetime, timezone
from freezegun import freeze_time
import pytest
from bookie.conf import SqliteRepoConf
from bookie.models import Folder
from bookie.repos.base import StoreError, DuplicateNameError, DuplicateTitleError, FolderMissingError,\
    RecordNotFoundError


def test_init_requires_path():
    with pytest.raises(ValueError):
        SqliteRepoConf(db_path='').instantiate()


def test_sync_is_repeatable(tmp_path):
    path = str(tmp_path / 'db.sqlite')
    with SqliteRepoConf(db_path=path).instantiate() as repo:
        repo.sync()
        repo.insert_folder('Work', 'job stuff')
    with SqliteRepoConf(db_path=path).instantiate() as repo:
        repo.sync()
        repo.sync()
        assert [f.name for f in repo.list_folders()] == ['Work']


def test_sync_not_a_database(tmp_path):
    path = tmp_path / 'db.sqlite'
    path.write_text('this is not a database, just some text that happens to be long enough to matter' * 10)
    repo = SqliteRepoConf(db_path=str(path)).instantiate()
    with pytest.raises(StoreError):
        repo.sync()
    repo.close()


def test_sync_unexpected_schema(tmp_path):
    path = str(tmp_path / 'db.sqlite')
    with SqliteRepoConf(db_path=path).instantiate() as repo:
        repo.sync()
        repo.connection.executescript('DROP TABLE files;'
                                      'CREATE TABLE files (id INTEGER PRIMARY KEY, folder_id INTEGER, title TEXT);')
    with SqliteRepoConf(db_path=path).instantiate() as repo:
        with pytest.raises(StoreError, match='missing columns'):
            repo.sync()


@freeze_time('2012-05-02T03:04:05Z')
def test_insert_folder(repo):
    expected_time = datetime(2012, 5, 2, 3, 4, 5, tzinfo=timezone.utc)
    folder = repo.insert_folder('Work', 'job stuff')
    assert folder == Folder(1, 'Work', 'job stuff', created_at=expected_time, updated_at=expected_time)
    assert repo.folder_by_id(1) == folder
    assert repo.folder_by_name('Work') == folder
    assert repo.folder_by_name('work') is None
    assert repo.folder_by_id(2) is None


def test_insert_folder_null_notes(repo):
    folder = repo.insert_folder('Work', None)
    assert repo.folder_by_id(folder.id).notes is None


def test_insert_folder_duplicate(repo):
    repo.insert_folder('Work', 'job stuff')
    with pytest.raises(DuplicateNameError) as excinfo:
        repo.insert_folder('Work', 'other')
    assert excinfo.value.name == 'Work'
    assert [(f.name, f.notes) for f in repo.list_folders()] == [('Work', 'job stuff')]


def test_insert_folder_too_long(repo):
    with pytest.raises(StoreError):
        repo.insert_folder('x' * 201, None)
    assert repo.list_folders() == []


def test_ids_not_reused(repo):
    repo.insert_folder('One', None)
    two = repo.insert_folder('Two', None)
    repo.delete_folder(two.id)
    assert repo.insert_folder('Three', None).id == 3


def test_list_folders(repo):
    assert repo.list_folders() == []
    work = repo.insert_folder('Work', 'job stuff')
    home = repo.insert_folder('Home', None)
    repo.insert_file('Plan', 'step one', '', work.id)
    repo.insert_file('Groceries', '', 'errands', home.id)
    repo.insert_file('Budget', '', '', work.id)
    folders = repo.list_folders()
    assert [f.name for f in folders] == ['Work', 'Home']
    assert folders[0].file_titles() == ['Plan', 'Budget']
    assert folders[1].file_titles() == ['Groceries']
    assert folders[1].files[0].label == 'errands'


def test_list_folders_skips_orphaned_files(repo, caplog):
    work = repo.insert_folder('Work', None)
    repo.insert_file('Plan', '', '', work.id)
    repo.connection.executescript("""
        PRAGMA foreign_keys = OFF;
        INSERT INTO files (folder_id, title, content, label, created_at, updated_at)
            VALUES (42, 'Stray', '', '', '2020-01-01T00:00:00+00:00', '2020-01-01T00:00:00+00:00');
    """)
    folders = repo.list_folders()
    assert [f.name for f in folders] == ['Work']
    assert folders[0].file_titles() == ['Plan']
    assert 'missing folder 42' in caplog.text


def test_update_folder(repo):
    with freeze_time('2012-05-02T03:04:05Z'):
        folder = repo.insert_folder('Work', 'job stuff')
    with freeze_time('2013-01-01T00:00:00Z'):
        updated = repo.update_folder(folder.id, notes='x')
    assert updated.name == 'Work'
    assert updated.notes == 'x'
    assert updated.created_at == folder.created_at
    assert updated.updated_at == datetime(2013, 1, 1, tzinfo=timezone.utc)

    updated = repo.update_folder(folder.id, name='Job')
    assert (updated.name, updated.notes) == ('Job', 'x')


def test_update_folder_missing(repo):
    with pytest.raises(RecordNotFoundError):
        repo.update_folder(999, name='X')
    assert repo.list_folders() == []


def test_update_folder_duplicate(repo):
    repo.insert_folder('Work', None)
    home = repo.insert_folder('Home', None)
    with pytest.raises(DuplicateNameError):
        repo.update_folder(home.id, name='Work')
    assert repo.folder_by_id(home.id).name == 'Home'


def test_insert_file(repo):
    folder = repo.insert_folder('Work', None)
    file = repo.insert_file('Plan', 'step one', 'todo', folder.id)
    assert file.id == 1
    assert repo.file_by_id(file.id) == file
    assert repo.file_by_title(folder.id, 'Plan') == file
    assert repo.file_by_title(folder.id, 'plan') is None
    assert repo.file_by_id(2) is None


def test_insert_file_scoped_uniqueness(repo):
    work = repo.insert_folder('Work', None)
    home = repo.insert_folder('Home', None)
    repo.insert_file('Plan', '', '', work.id)
    repo.insert_file('Plan', '', '', home.id)
    with pytest.raises(DuplicateTitleError) as excinfo:
        repo.insert_file('Plan', 'again', '', work.id)
    assert excinfo.value.folder_id == work.id
    assert repo.list_files(work.id) == [repo.file_by_title(work.id, 'Plan')]


def test_insert_file_missing_folder(repo):
    with pytest.raises(FolderMissingError):
        repo.insert_file('Plan', '', '', 42)


def test_delete_folder_cascades(repo):
    work = repo.insert_folder('Work', None)
    home = repo.insert_folder('Home', None)
    a = repo.insert_file('A', '', '', work.id)
    b = repo.insert_file('B', '', '', work.id)
    c = repo.insert_file('C', '', '', home.id)
    repo.delete_folder(work.id)
    assert repo.folder_by_id(work.id) is None
    assert repo.list_files(work.id) == []
    assert repo.file_by_id(a.id) is None
    assert repo.file_by_id(b.id) is None
    assert repo.list_files(home.id) == [c]
    with pytest.raises(RecordNotFoundError):
        repo.delete_file(a.id)


def test_delete_folder_rolls_back(repo):
    work = repo.insert_folder('Work', None)
    plan = repo.insert_file('Plan', '', '', work.id)
    repo.connection.executescript("""
        CREATE TRIGGER keep_folders BEFORE DELETE ON folders
        BEGIN SELECT RAISE(ABORT, 'folder is locked'); END;
    """)
    with pytest.raises(StoreError, match='folder is locked'):
        repo.delete_folder(work.id)
    assert repo.folder_by_id(work.id) == work
    assert repo.list_files(work.id) == [plan]


def test_delete_folder_missing(repo):
    with pytest.raises(RecordNotFoundError):
        repo.delete_folder(1)


def test_delete_file(repo):
    folder = repo.insert_folder('Work', None)
    file = repo.insert_file('Plan', '', '', folder.id)
    repo.delete_file(file.id)
    assert repo.list_files(folder.id) == []
    with pytest.raises(RecordNotFoundError):
        repo.delete_file(file.id)
