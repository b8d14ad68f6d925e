"""Handles storage of folders and files.

:class:`bookie.repos.base.Repo` defines an API.
:class:`bookie.repos.sqlite.SqliteRepo` is the implementation backed by a SQLite database file.
"""
