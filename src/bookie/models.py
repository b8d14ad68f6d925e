"""Defines classes for representing folders and the files stored in them.

The most important classes are :class:`Folder` and :class:`File`.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


MAX_LENGTH = 200
"""Maximum number of characters allowed in any text field of a folder or file."""


@dataclass
class File:
    """A titled piece of content belonging to exactly one :class:`Folder`.

    Files are never moved between folders; the :attr:`folder_id` is fixed when the file is created.
    """

    id: int
    """Assigned by the repo when the file is inserted."""

    title: str
    """Required. Unique among the files of the same folder, but not globally."""

    folder_id: int
    """The id of the owning folder."""

    content: str = ''

    label: str = ''

    created_at: Optional[datetime] = None

    updated_at: Optional[datetime] = None


@dataclass
class Folder:
    """A named container for :class:`File` records.

    Folder names are unique across the whole store. Deleting a folder deletes every file in it.
    """

    id: int
    """Assigned by the repo when the folder is inserted."""

    name: str
    """Required. Compared case-sensitively when checking for duplicates."""

    notes: Optional[str] = None

    files: List[File] = field(default_factory=list)
    """Files owned by this folder, in the order they were added.

    Only populated by operations that load a folder together with its files, such as
    :meth:`bookie.repos.base.Repo.list_folders`; otherwise this is empty.
    """

    created_at: Optional[datetime] = None

    updated_at: Optional[datetime] = None

    def file_titles(self) -> List[str]:
        return [f.title for f in self.files]


@dataclass
class AddFileResult:
    """Returned by :meth:`bookie.api.Bookie.add_file`."""

    file: File

    folder: Folder
    """The folder the file was added to."""

    created_folder: bool = False
    """True if the default folder did not exist and was created to hold the file."""
