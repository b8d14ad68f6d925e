"""Organizes notes into named folders of titled files, stored in a local SQLite database.

If you installed via ``pip``, run ``bookie help`` to see the available commands.

To use the Python API, look at :class:`bookie.api.Bookie`
"""
