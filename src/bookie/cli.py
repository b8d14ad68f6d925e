"""Command-line interface for bookie."""


import argparse
from dataclasses import replace
import logging
import sys
import textwrap
from terminaltables import AsciiTable
from bookie.api import Bookie, Error
from bookie.conf import BookieConf
from bookie.repos.base import StoreError


logger = logging.getLogger(__name__)

_COMMANDS = [
    ('create-folder', 'Create a new folder'),
    ('list-folders', 'List all folders and files'),
    ('update-folder', 'Update the name and/or notes of a folder'),
    ('delete-folder', 'Delete a folder, by ID or name, along with its files'),
    ('add-file', 'Add a new file to a folder'),
    ('delete-file', 'Delete a file'),
    ('help', 'Display all commands'),
]

_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


def _success(message: str) -> None:
    print(f'\n✅ {message}\n')


def _wrap(text: str, width: int) -> str:
    return textwrap.fill(str(text), width) if text else ''


def _help(args, bk: Bookie) -> int:
    table = AsciiTable([('Command', 'Description')] + _COMMANDS)
    print('\n📚 Bookie CLI - Available Commands:\n')
    print(table.table)
    print()
    return 0


def _create_folder(args, bk: Bookie) -> int:
    folder = bk.create_folder(args.name, args.notes)
    _success(f'Folder "{folder.name}" created successfully with ID: {folder.id}')
    return 0


def _list_folders(args, bk: Bookie) -> int:
    folders = bk.list_folders()
    if not folders:
        print('\n📂 No folders found. Create one using the "create-folder" command.\n')
        return 0
    data = [('ID', 'Folder Name', 'Notes', 'Files')]
    for folder in folders:
        titles = ', '.join(folder.file_titles()) or 'No files'
        data.append((str(folder.id),
                     _wrap(folder.name, 20),
                     _wrap(folder.notes or 'No notes', 30),
                     _wrap(titles, 30)))
    table = AsciiTable(data)
    table.inner_row_border = True
    table.justify_columns[0] = 'right'
    print('\n📚 Your Folders and Files:\n')
    print(table.table)
    print()
    return 0


def _update_folder(args, bk: Bookie) -> int:
    folder = bk.update_folder(args.id, name=args.name, notes=args.notes)
    _success(f'Folder with ID {folder.id} updated successfully to "{folder.name}"')
    return 0


def _delete_folder(args, bk: Bookie) -> int:
    folder = bk.delete_folder(args.id, name=args.name)
    if folder.files:
        print(f'\n🗑  Deleting {len(folder.files)} file(s) in "{folder.name}": {", ".join(folder.file_titles())}')
    _success(f'Folder "{folder.name}" (ID {folder.id}) deleted successfully')
    return 0


def _add_file(args, bk: Bookie) -> int:
    result = bk.add_file(args.title, content=args.content, label=args.label, folder_id=args.folder)
    if result.created_folder:
        print(f'\n📁 Created default folder for your files with ID: {result.folder.id}')
    elif not (args.folder or '').strip():
        print(f'\n📁 Using default folder (ID: {result.folder.id}) for this file')
    _success(f'File "{result.file.title}" added to folder "{result.folder.name}" successfully with ID: '
             f'{result.file.id}')
    return 0


def _delete_file(args, bk: Bookie) -> int:
    file = bk.delete_file(args.file)
    _success(f'File "{file.title}" deleted successfully.')
    return 0


def argparser() -> argparse.ArgumentParser:
    helps = dict(_COMMANDS)

    parser = argparse.ArgumentParser(prog='bookie', description='Organize notes into folders and files.')
    parser.set_defaults(func=None)
    parser.add_argument('--db', help='Path of the SQLite database file to use. Overrides the path from '
                                     '~/.bookie.conf.py; by default, database.sqlite in the current directory.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log what the tool is doing to stderr.')

    subs = parser.add_subparsers(title='Commands')

    p_help = subs.add_parser('help', help=helps['help'])
    p_help.set_defaults(func=_help)

    p_cf = subs.add_parser('create-folder', help=helps['create-folder'])
    p_cf.add_argument('-n', '--name', help='Name of the folder. Must not be used by any other folder.')
    p_cf.add_argument('-d', '--notes', help='Notes for the folder. Required.')
    p_cf.set_defaults(func=_create_folder)

    p_lf = subs.add_parser('list-folders', help=helps['list-folders'])
    p_lf.set_defaults(func=_list_folders)

    p_uf = subs.add_parser('update-folder',
                           help=helps['update-folder'] + '. Fields that are not given keep their current values.')
    p_uf.add_argument('-i', '--id', help='ID of the folder to update.')
    p_uf.add_argument('-n', '--name', help='New name for the folder.')
    p_uf.add_argument('-d', '--notes', help='New notes for the folder.')
    p_uf.set_defaults(func=_update_folder)

    p_df = subs.add_parser('delete-folder',
                           help=helps['delete-folder'] + '. If both an ID and a name are given, the ID is used.')
    p_df.add_argument('-i', '--id', help='ID of the folder.')
    p_df.add_argument('-n', '--name', help='Name of the folder.')
    p_df.set_defaults(func=_delete_folder)

    p_af = subs.add_parser('add-file', help=helps['add-file'])
    p_af.add_argument('-n', '--title', help='Title of the file. Must be unique within the folder.')
    p_af.add_argument('-c', '--content', help='Content of the file.')
    p_af.add_argument('-l', '--label', help='Label of the file.')
    p_af.add_argument('-f', '--folder', metavar='FOLDER_ID',
                      help='ID of the folder to add the file to. If omitted, a folder named "Default" is used, '
                           'and created if necessary.')
    p_af.set_defaults(func=_add_file)

    p_dfile = subs.add_parser('delete-file', help=helps['delete-file'])
    p_dfile.add_argument('-f', '--file', metavar='FILE_ID', help='ID of the file to delete.')
    p_dfile.set_defaults(func=_delete_file)

    return parser


def _configure_logging(conf: BookieConf, verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root = logging.getLogger('bookie')
    root.handlers = [handler]
    root.setLevel(logging.INFO if verbose else conf.log_level.upper())


def _load_conf(args) -> BookieConf:
    conf = BookieConf.for_user()
    if args.db:
        conf = replace(conf, repo_conf=replace(conf.repo_conf, db_path=args.db))
    return conf


def main(args=None) -> int:
    """Runs the tool and returns its exit code.

    args may be an array of string command-line arguments; if absent,
    the process's arguments are used.
    """
    parser = argparser()
    args = parser.parse_args(args)
    if not args.func:
        parser.print_help()
        return 1
    try:
        conf = _load_conf(args)
        _configure_logging(conf, args.verbose)
        bk = conf.instantiate()
    except StoreError as e:
        logger.debug('Unable to sync database', exc_info=True)
        print(f'\n❌ Error syncing database: {e.message}\n', file=sys.stderr)
        return 1
    except Exception as e:
        logger.debug('Unable to initialize', exc_info=True)
        print(f'\n❌ Failed to initialize application: {e}\n', file=sys.stderr)
        return 1
    with bk:
        try:
            return args.func(args, bk)
        except Error as e:
            print(f'\n❌ {e.message}\n', file=sys.stderr)
            return 1
