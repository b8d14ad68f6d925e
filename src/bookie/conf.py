from __future__ import annotations
from dataclasses import dataclass, field, replace
import os.path


DEFAULT_FOLDER_NAME = 'Default'

DEFAULT_FOLDER_NOTES = 'Default folder for files with no specified folder'


@dataclass
class RepoConf:
    """Base class for repo config. Use a subclass such as :class:`SqliteRepoConf`."""

    def instantiate(self):
        raise NotImplementedError("Please use a subclass like SqliteRepoConf instead!")

    def standardize(self):
        return self


@dataclass
class SqliteRepoConf(RepoConf):
    """Configures bookie to store folders and files via :class:`bookie.repos.sqlite.SqliteRepo`."""

    db_path: str = 'database.sqlite'
    """Path where the SQLite database file should be stored.

    The file will be created if it does not exist. Relative paths are resolved against the current working
    directory, so by default each directory you run the tool from gets its own collection.
    The special value ``:memory:`` keeps everything in memory, which is mostly useful for testing.
    """

    def instantiate(self):
        from bookie.repos.sqlite import SqliteRepo
        return SqliteRepo(self.standardize())

    def standardize(self):
        if not self.db_path or self.db_path == ':memory:':
            return self
        return replace(self, db_path=os.path.abspath(os.path.expanduser(self.db_path)))


@dataclass
class BookieConf:
    repo_conf: RepoConf = field(default_factory=SqliteRepoConf)
    """Configures where folders and files are stored."""

    default_folder_name: str = DEFAULT_FOLDER_NAME
    """Name of the folder that files are added to when no folder is specified.

    The folder is created the first time it is needed.
    """

    default_folder_notes: str = DEFAULT_FOLDER_NOTES
    """Notes given to the default folder when it is created."""

    log_level: str = 'WARNING'
    """Level for log messages written to stderr. The ``--verbose`` command-line argument lowers this to ``INFO``."""

    @classmethod
    def user_config_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', '.bookie.conf.py'))

    @classmethod
    def for_user(cls) -> BookieConf:
        """Loads the variable ``conf`` from the user's ``~/.bookie.conf.py`` file.

        If the file does not exist, the default configuration is returned. For example, this config file would
        keep all your folders in one database regardless of the working directory:

        .. code-block:: python

           from bookie.conf import *
           conf = BookieConf(repo_conf=SqliteRepoConf(db_path='~/bookie.sqlite'))
        """
        path = cls.user_config_path()
        if not os.path.exists(path):
            return cls()
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of BookieConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            repo_conf=self.repo_conf.standardize()
        )

    def instantiate(self):
        from bookie.api import Bookie
        return Bookie(self.standardize())
