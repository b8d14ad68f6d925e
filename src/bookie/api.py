"""Provides the main entry point for using the library, :class:`Bookie`"""

from __future__ import annotations
from functools import wraps
import logging
from typing import List, Optional, Tuple, Union
from bookie.conf import BookieConf
from bookie.models import MAX_LENGTH, AddFileResult, File, Folder
from bookie.repos import base


logger = logging.getLogger(__name__)


class Error(Exception):
    """Base class for problems with a request. The message is suitable for showing to the user."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyNameError(Error):
    pass


class MissingNotesError(Error):
    pass


class DuplicateNameError(Error):
    pass


class MissingIdError(Error):
    pass


class InvalidIdError(Error):
    pass


class NotFoundError(Error):
    pass


class NoFieldsProvidedError(Error):
    pass


class EmptyTitleError(Error):
    pass


class FolderNotFoundError(Error):
    pass


class DuplicateTitleInFolderError(Error):
    pass


class ValueTooLongError(Error):
    pass


class StorageFailureError(Error):
    """Raised when the repo fails, including when it rejects a write that passed validation."""
    def __init__(self, message: str, cause: base.StoreError):
        super().__init__(message)
        self.cause = cause


IdIsh = Union[int, str, None]

MAX_ID = 2 ** 63 - 1
"""Largest ID that fits in an SQLite INTEGER."""


def _storage_failures(action: str):
    def decorate(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except base.StoreError as e:
                logger.debug('Storage failure while %s', action, exc_info=True)
                raise StorageFailureError(f'Storage failure while {action}: {e.message}', e) from e
        return wrapper
    return decorate


def _is_absent(value: IdIsh) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parse_id(value: IdIsh, kind: str) -> int:
    if _is_absent(value):
        raise MissingIdError(f'{kind} ID is required. Please provide the ID of the {kind.lower()}')
    text = str(value).strip()
    # int() alone would also take '1_0' and non-ASCII digits
    if not (text.isascii() and text.isdigit()):
        raise InvalidIdError(f'Invalid {kind.lower()} ID "{value}". Please provide a valid numeric ID')
    parsed = int(text)
    if parsed <= 0 or parsed > MAX_ID:
        raise InvalidIdError(f'Invalid {kind.lower()} ID "{value}". Please provide a positive numeric ID')
    return parsed


def _check_length(field: str, value: Optional[str]) -> None:
    if value and len(value) > MAX_LENGTH:
        raise ValueTooLongError(f'The {field} cannot be longer than {MAX_LENGTH} characters')


class Bookie:
    """Main entry point for working programmatically with your folders and files.

    Generally, you should get an instance using the :meth:`Bookie.for_user` method. Call :meth:`close` when you're
    done with it, or else use it as a context manager. Creating an instance creates the storage schema if needed,
    so it may raise :exc:`bookie.repos.base.StoreError`.

    Each method validates its arguments before touching the repo and raises a subclass of :exc:`Error` describing
    the first problem it finds. Failures inside the repo are raised as :exc:`StorageFailureError`.

    .. attribute:: conf
       :type: bookie.conf.BookieConf

    .. attribute:: repo
       :type: bookie.repos.base.Repo

    Here's an example of how to use this class:

    .. code-block:: python

       from bookie.api import Bookie
       with Bookie.for_user() as bk:
           folder = bk.create_folder('Work', 'job stuff')
           bk.add_file('Plan', content='step one', folder_id=folder.id)
    """

    @staticmethod
    def for_user() -> Bookie:
        """Creates an instance using the user's ``~/.bookie.conf.py`` file, or the defaults if it does not exist."""
        return BookieConf.for_user().instantiate()

    def __init__(self, conf: BookieConf):
        self.conf = conf
        self.repo = conf.repo_conf.instantiate()
        try:
            self.repo.sync()
        except base.StoreError:
            self.repo.close()
            raise

    @_storage_failures('creating folder')
    def create_folder(self, name: Optional[str], notes: Optional[str]) -> Folder:
        name = (name or '').strip()
        if not name:
            raise EmptyNameError('Folder name cannot be empty, please input a folder name')
        if not notes:
            raise MissingNotesError('Notes are required. Please provide notes for the folder')
        _check_length('folder name', name)
        _check_length('notes', notes)
        if self.repo.folder_by_name(name):
            raise DuplicateNameError(f'A folder named "{name}" already exists. Please use a different name.')
        return self.repo.insert_folder(name, notes)

    @_storage_failures('listing folders')
    def list_folders(self) -> List[Folder]:
        return self.repo.list_folders()

    @_storage_failures('updating folder')
    def update_folder(self, folder_id: IdIsh, name: Optional[str] = None, notes: Optional[str] = None) -> Folder:
        """Changes the name and/or notes of a folder. Arguments left as None are not changed."""
        folder_id = _parse_id(folder_id, 'Folder')
        folder = self.repo.folder_by_id(folder_id)
        if not folder:
            raise NotFoundError(f'Folder with ID {folder_id} not found. Please check the folder ID')
        if name is None and notes is None:
            raise NoFieldsProvidedError('Please provide at least a new name or notes to update')
        if name is not None:
            name = name.strip()
            if not name:
                raise EmptyNameError('Folder name cannot be empty')
            _check_length('folder name', name)
            existing = self.repo.folder_by_name(name)
            if existing and existing.id != folder.id:
                raise DuplicateNameError(f'A folder named "{name}" already exists. Please use a different name.')
        _check_length('notes', notes)
        return self.repo.update_folder(folder_id, name=name, notes=notes)

    @_storage_failures('deleting folder')
    def delete_folder(self, folder_id: IdIsh = None, name: Optional[str] = None) -> Folder:
        """Deletes a folder, identified by ID or name, along with all of its files.

        If both are given, the ID is used and the name is ignored.

        Returns the deleted folder, with :attr:`bookie.models.Folder.files` listing the files that were deleted.
        """
        if not _is_absent(folder_id):
            folder_id = _parse_id(folder_id, 'Folder')
            folder = self.repo.folder_by_id(folder_id)
            if not folder:
                raise NotFoundError(f'Folder with ID {folder_id} not found. Please check the folder ID')
        elif name and name.strip():
            folder = self.repo.folder_by_name(name.strip())
            if not folder:
                raise NotFoundError(f'Folder named "{name.strip()}" not found. Please check the folder name')
        else:
            raise MissingIdError('Folder ID or name is required. Please specify which folder to delete')
        folder.files = self.repo.list_files(folder.id)
        self.repo.delete_folder(folder.id)
        return folder

    @_storage_failures('preparing default folder')
    def ensure_default_folder(self) -> Tuple[Folder, bool]:
        """Returns the default folder, creating it if it does not exist yet.

        The second element of the result is True if the folder was created by this call.
        """
        name = self.conf.default_folder_name
        folder = self.repo.folder_by_name(name)
        if folder:
            return folder, False
        try:
            return self.repo.insert_folder(name, self.conf.default_folder_notes), True
        except base.DuplicateNameError:
            # created by someone else since we looked
            folder = self.repo.folder_by_name(name)
            if not folder:
                raise
            return folder, False

    @_storage_failures('adding file')
    def add_file(self, title: Optional[str], content: Optional[str] = None, label: Optional[str] = None,
                 folder_id: IdIsh = None) -> AddFileResult:
        """Adds a file to a folder.

        If folder_id is omitted, the file goes into the default folder (see :meth:`ensure_default_folder`).
        """
        title = (title or '').strip()
        if not title:
            raise EmptyTitleError('File title cannot be empty, please input a file title')
        _check_length('file title', title)
        _check_length('content', content)
        _check_length('label', label)

        created = False
        if _is_absent(folder_id):
            folder, created = self.ensure_default_folder()
        else:
            folder_id = _parse_id(folder_id, 'Folder')
            folder = self.repo.folder_by_id(folder_id)
            if not folder:
                raise FolderNotFoundError(f'Folder with ID {folder_id} not found. Please check the folder ID')

        if self.repo.file_by_title(folder.id, title):
            raise DuplicateTitleInFolderError(f'A file titled "{title}" already exists in folder "{folder.name}". '
                                              'Please use a different title.')
        file = self.repo.insert_file(title, content or '', label or '', folder.id)
        return AddFileResult(file=file, folder=folder, created_folder=created)

    @_storage_failures('deleting file')
    def delete_file(self, file_id: IdIsh) -> File:
        """Deletes a file and returns the record as it was before deletion."""
        file_id = _parse_id(file_id, 'File')
        file = self.repo.file_by_id(file_id)
        if not file:
            raise NotFoundError(f'File with ID {file_id} not found. Please check the file ID')
        self.repo.delete_file(file_id)
        return file

    def close(self):
        """Closes the associated repo and releases any other resources."""
        self.repo.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
