"""Provides the :class:`SqliteRepo` class."""

from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import sqlite3
from typing import List, Optional
from bookie.conf import SqliteRepoConf
from bookie.models import File, Folder
from bookie.repos.base import Repo, StoreError, DuplicateNameError, DuplicateTitleError, FolderMissingError,\
    RecordNotFoundError


logger = logging.getLogger(__name__)


_SQL_CREATE_SCHEMA = """
CREATE TABLE IF NOT EXISTS folders (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL CHECK (length(name) BETWEEN 1 AND 200),
    notes TEXT CHECK (notes IS NULL OR length(notes) <= 200),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS folders_index_name ON folders (name);

CREATE TABLE IF NOT EXISTS files (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    folder_id INTEGER NOT NULL,
    title TEXT NOT NULL CHECK (length(title) BETWEEN 1 AND 200),
    content TEXT NOT NULL DEFAULT '' CHECK (length(content) <= 200),
    label TEXT NOT NULL DEFAULT '' CHECK (length(label) <= 200),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY(folder_id) REFERENCES folders(id) ON DELETE CASCADE
);

CREATE UNIQUE INDEX IF NOT EXISTS files_index_folder_id_title ON files (folder_id, title);
"""

_EXPECTED_COLUMNS = {
    'folders': {'id', 'name', 'notes', 'created_at', 'updated_at'},
    'files': {'id', 'folder_id', 'title', 'content', 'label', 'created_at', 'updated_at'},
}

_FOLDER_COLUMNS = 'id, name, notes, created_at, updated_at'
_FILE_COLUMNS = 'id, folder_id, title, content, label, created_at, updated_at'

_SQL_INSERT_FOLDER = 'INSERT INTO folders (name, notes, created_at, updated_at) VALUES (?, ?, ?, ?)'
_SQL_INSERT_FILE = ('INSERT INTO files (folder_id, title, content, label, created_at, updated_at)'
                    ' VALUES (?, ?, ?, ?, ?, ?)')


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return value and datetime.fromisoformat(value)


def _folder_from_row(row: sqlite3.Row) -> Folder:
    return Folder(id=row['id'],
                  name=row['name'],
                  notes=row['notes'],
                  created_at=_parse_time(row['created_at']),
                  updated_at=_parse_time(row['updated_at']))


def _file_from_row(row: sqlite3.Row) -> File:
    return File(id=row['id'],
                folder_id=row['folder_id'],
                title=row['title'],
                content=row['content'],
                label=row['label'],
                created_at=_parse_time(row['created_at']),
                updated_at=_parse_time(row['updated_at']))


def _is_unique_violation(error: sqlite3.IntegrityError) -> bool:
    return str(error).startswith('UNIQUE constraint failed')


def _is_foreign_key_violation(error: sqlite3.IntegrityError) -> bool:
    return str(error).startswith('FOREIGN KEY constraint failed')


class SqliteRepo(Repo):
    """Stores folders and files in a SQLite database file.

    Uniqueness of folder names and of file titles within a folder are enforced by unique indexes, and files
    reference their folder with a foreign key declared ``ON DELETE CASCADE``. Every write happens in its own
    transaction, so a failure never leaves partial changes behind.

    The connection is opened by :meth:`sync`. Remember to call :meth:`close` when done with the instance,
    or use the instance as a context manager.

    .. attribute:: conf
       :type: bookie.conf.SqliteRepoConf
    """
    def __init__(self, conf: SqliteRepoConf):
        if not conf.db_path:
            raise ValueError('`db_path` must be set in SqliteRepoConf.')
        self.conf = conf
        self.connection = None

    @contextmanager
    def _errors(self, action: str):
        try:
            yield
        except StoreError:
            raise
        except sqlite3.Error as e:
            logger.error('Error %s in %s: %s', action, self.conf.db_path, e)
            raise StoreError(f'Error {action}: {e}', e) from e

    def sync(self) -> None:
        logger.info('Syncing database %s', self.conf.db_path)
        with self._errors('syncing database'):
            if not self.connection:
                self.connection = sqlite3.connect(self.conf.db_path)
                self.connection.row_factory = sqlite3.Row
            self.connection.execute('PRAGMA foreign_keys = ON')
            self.connection.executescript(_SQL_CREATE_SCHEMA)
            for table, expected in _EXPECTED_COLUMNS.items():
                found = {r['name'] for r in self.connection.execute(f'PRAGMA table_info({table})')}
                missing = expected.difference(found)
                if missing:
                    raise StoreError(f'Table "{table}" is missing columns: {", ".join(sorted(missing))}')
        logger.info('Database synced successfully')

    def insert_folder(self, name: str, notes: Optional[str]) -> Folder:
        now = _now()
        with self._errors('inserting folder'):
            try:
                with self.connection:
                    cursor = self.connection.execute(_SQL_INSERT_FOLDER, (name, notes, now.isoformat(),
                                                                          now.isoformat()))
            except sqlite3.IntegrityError as e:
                if _is_unique_violation(e):
                    raise DuplicateNameError(name, e) from e
                raise
        logger.info('Inserted folder %d "%s"', cursor.lastrowid, name)
        return Folder(id=cursor.lastrowid, name=name, notes=notes, created_at=now, updated_at=now)

    def folder_by_id(self, folder_id: int) -> Optional[Folder]:
        with self._errors('loading folder'):
            row = self.connection.execute(f'SELECT {_FOLDER_COLUMNS} FROM folders WHERE id = ?',
                                          (folder_id,)).fetchone()
        return row and _folder_from_row(row)

    def folder_by_name(self, name: str) -> Optional[Folder]:
        with self._errors('loading folder'):
            row = self.connection.execute(f'SELECT {_FOLDER_COLUMNS} FROM folders WHERE name = ?',
                                          (name,)).fetchone()
        return row and _folder_from_row(row)

    def list_folders(self) -> List[Folder]:
        with self._errors('listing folders'):
            cursor = self.connection.execute(f'SELECT {_FOLDER_COLUMNS} FROM folders ORDER BY id')
            folders = [_folder_from_row(r) for r in cursor]
            by_id = {f.id: f for f in folders}
            for row in self.connection.execute(f'SELECT {_FILE_COLUMNS} FROM files ORDER BY id'):
                folder = by_id.get(row['folder_id'])
                if folder is None:
                    logger.warning('Ignoring file %d in missing folder %d', row['id'], row['folder_id'])
                    continue
                folder.files.append(_file_from_row(row))
        return folders

    def update_folder(self, folder_id: int, name: Optional[str] = None, notes: Optional[str] = None) -> Folder:
        assignments = []
        params = []
        if name is not None:
            assignments.append('name = ?')
            params.append(name)
        if notes is not None:
            assignments.append('notes = ?')
            params.append(notes)
        assignments.append('updated_at = ?')
        params.append(_now().isoformat())
        params.append(folder_id)
        with self._errors('updating folder'):
            try:
                with self.connection:
                    cursor = self.connection.execute(f'UPDATE folders SET {", ".join(assignments)} WHERE id = ?',
                                                     params)
                    if cursor.rowcount == 0:
                        raise RecordNotFoundError('Folder', folder_id)
            except sqlite3.IntegrityError as e:
                if _is_unique_violation(e):
                    raise DuplicateNameError(name, e) from e
                raise
        logger.info('Updated folder %d', folder_id)
        return self.folder_by_id(folder_id)

    def delete_folder(self, folder_id: int) -> None:
        with self._errors('deleting folder'):
            with self.connection:
                files = self.connection.execute('DELETE FROM files WHERE folder_id = ?', (folder_id,))
                cursor = self.connection.execute('DELETE FROM folders WHERE id = ?', (folder_id,))
                if cursor.rowcount == 0:
                    raise RecordNotFoundError('Folder', folder_id)
        logger.info('Deleted folder %d and %d file(s)', folder_id, files.rowcount)

    def insert_file(self, title: str, content: str, label: str, folder_id: int) -> File:
        now = _now()
        with self._errors('inserting file'):
            try:
                with self.connection:
                    cursor = self.connection.execute(_SQL_INSERT_FILE, (folder_id, title, content, label,
                                                                        now.isoformat(), now.isoformat()))
            except sqlite3.IntegrityError as e:
                if _is_unique_violation(e):
                    raise DuplicateTitleError(title, folder_id, e) from e
                if _is_foreign_key_violation(e):
                    raise FolderMissingError(folder_id, e) from e
                raise
        logger.info('Inserted file %d "%s" into folder %d', cursor.lastrowid, title, folder_id)
        return File(id=cursor.lastrowid, folder_id=folder_id, title=title, content=content, label=label,
                    created_at=now, updated_at=now)

    def file_by_id(self, file_id: int) -> Optional[File]:
        with self._errors('loading file'):
            row = self.connection.execute(f'SELECT {_FILE_COLUMNS} FROM files WHERE id = ?', (file_id,)).fetchone()
        return row and _file_from_row(row)

    def file_by_title(self, folder_id: int, title: str) -> Optional[File]:
        with self._errors('loading file'):
            row = self.connection.execute(f'SELECT {_FILE_COLUMNS} FROM files WHERE folder_id = ? AND title = ?',
                                          (folder_id, title)).fetchone()
        return row and _file_from_row(row)

    def list_files(self, folder_id: int) -> List[File]:
        with self._errors('listing files'):
            cursor = self.connection.execute(f'SELECT {_FILE_COLUMNS} FROM files WHERE folder_id = ? ORDER BY id',
                                             (folder_id,))
            return [_file_from_row(r) for r in cursor]

    def delete_file(self, file_id: int) -> None:
        with self._errors('deleting file'):
            with self.connection:
                cursor = self.connection.execute('DELETE FROM files WHERE id = ?', (file_id,))
                if cursor.rowcount == 0:
                    raise RecordNotFoundError('File', file_id)
        logger.info('Deleted file %d', file_id)

    def close(self):
        if self.connection:
            self.connection.close()
            self.connection = None
