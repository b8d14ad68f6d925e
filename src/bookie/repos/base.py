"""Defines the API for storing folders and files.

The most important class is :class:`Repo`.
"""

from typing import List, Optional

from bookie.models import File, Folder


class StoreError(Exception):
    """Raised when a :class:`Repo` is unable to read or write records."""
    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class DuplicateNameError(StoreError):
    """Raised when a folder would end up with the same name as another folder."""
    def __init__(self, name: str, cause: BaseException = None):
        super().__init__(f'A folder named "{name}" already exists', cause)
        self.name = name


class DuplicateTitleError(StoreError):
    """Raised when a file would end up with the same title as another file in its folder."""
    def __init__(self, title: str, folder_id: int, cause: BaseException = None):
        super().__init__(f'A file titled "{title}" already exists in folder {folder_id}', cause)
        self.title = title
        self.folder_id = folder_id


class FolderMissingError(StoreError):
    """Raised when a file is inserted for a folder that does not exist."""
    def __init__(self, folder_id: int, cause: BaseException = None):
        super().__init__(f'Folder {folder_id} does not exist', cause)
        self.folder_id = folder_id


class RecordNotFoundError(StoreError):
    """Raised when updating or deleting a record that does not exist."""
    def __init__(self, kind: str, record_id: int):
        super().__init__(f'{kind} {record_id} does not exist')
        self.kind = kind
        self.record_id = record_id


class Repo:
    """Base class for repos, which are responsible for durably storing folders and files.

    Repos enforce the integrity rules of the data model: folder names are unique, file titles are unique
    within a folder, every file belongs to an existing folder, and deleting a folder deletes its files.
    They do not validate or normalize input beyond that; see :class:`bookie.api.Bookie` for those rules.

    Remember to call :meth:`close` when done with an instance, or use it as a context manager.
    """
    def sync(self) -> None:
        """Creates the storage schema if needed. Must be called before any other method.

        Raises :exc:`StoreError` if the schema cannot be created or verified.
        """
        raise NotImplementedError()

    def insert_folder(self, name: str, notes: Optional[str]) -> Folder:
        """Stores a new folder and returns it with its id populated.

        Raises :exc:`DuplicateNameError` if a folder with that name already exists.
        """
        raise NotImplementedError()

    def folder_by_id(self, folder_id: int) -> Optional[Folder]:
        raise NotImplementedError()

    def folder_by_name(self, name: str) -> Optional[Folder]:
        raise NotImplementedError()

    def list_folders(self) -> List[Folder]:
        """Returns all folders ordered by id, each with its :attr:`bookie.models.Folder.files` populated."""
        raise NotImplementedError()

    def update_folder(self, folder_id: int, name: Optional[str] = None, notes: Optional[str] = None) -> Folder:
        """Changes the given fields of a folder and returns the result. Fields passed as None are left alone.

        Raises :exc:`RecordNotFoundError` if there is no such folder, or :exc:`DuplicateNameError`
        if the new name belongs to another folder.
        """
        raise NotImplementedError()

    def delete_folder(self, folder_id: int) -> None:
        """Deletes a folder and all of its files, atomically.

        Raises :exc:`RecordNotFoundError` if there is no such folder.
        """
        raise NotImplementedError()

    def insert_file(self, title: str, content: str, label: str, folder_id: int) -> File:
        """Stores a new file and returns it with its id populated.

        Raises :exc:`FolderMissingError` if the folder does not exist, or :exc:`DuplicateTitleError`
        if the folder already has a file with that title.
        """
        raise NotImplementedError()

    def file_by_id(self, file_id: int) -> Optional[File]:
        raise NotImplementedError()

    def file_by_title(self, folder_id: int, title: str) -> Optional[File]:
        raise NotImplementedError()

    def list_files(self, folder_id: int) -> List[File]:
        """Returns the files in the given folder, in the order they were added."""
        raise NotImplementedError()

    def delete_file(self, file_id: int) -> None:
        """Raises :exc:`RecordNotFoundError` if there is no such file."""
        raise NotImplementedError()

    def close(self) -> None:
        """Release any resources associated with the repo. Should be called when you're done with an instance."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
