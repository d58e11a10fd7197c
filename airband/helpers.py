"""Filesystem helpers for creating recording directories."""

from __future__ import annotations

import datetime as _dt
import logging
import os
import time as _time

_log = logging.getLogger(__name__)

_DELIM = "/"


def dir_exists(dir_path: str) -> bool:
    """Return True if ``dir_path`` names an existing directory."""
    return os.path.isdir(dir_path)


def file_exists(file_path: str) -> bool:
    """Return True if ``file_path`` names an existing regular file."""
    return os.path.isfile(file_path)


def make_dir(dir_path: str) -> bool:
    """Create a single directory (mode 0755) unless it already exists.

    Returns True when the directory exists afterwards, False on failure.
    """
    if dir_exists(dir_path):
        return True
    try:
        os.mkdir(dir_path, 0o755)
    except OSError as exc:
        _log.error("Could not create directory %s: %s", dir_path, exc.strerror or exc)
        return False
    return True


def _prefix_ends(subdirs: str):
    """Yield the cut points at which each intermediate directory ends."""
    yield 0
    yield from (pos for pos, ch in enumerate(subdirs) if ch == _DELIM and pos >= 1)


def make_subdirs(basedir: str, subdirs: str) -> bool:
    """Create ``basedir`` and every directory along ``subdirs`` beneath it."""
    final_path = basedir + _DELIM + subdirs
    if dir_exists(final_path):
        return True

    for end in _prefix_ends(subdirs):
        if not make_dir(basedir + _DELIM + subdirs[:end]):
            return False

    make_dir(final_path)
    return dir_exists(final_path)


def _date_path(moment) -> str:
    if isinstance(moment, _time.struct_time):
        return _time.strftime("%Y/%m/%d", moment)
    if isinstance(moment, (_dt.date, _dt.datetime)):
        return moment.strftime("%Y/%m/%d")
    raise TypeError(f"unsupported time value: {moment!r}")


def make_dated_subdirs(basedir: str, time) -> str:
    """Create ``basedir/YYYY/MM/DD`` for the given time.

    ``time`` may be a ``datetime.date``, ``datetime.datetime`` or
    ``time.struct_time``. Returns the full path, or an empty string if the
    directories could not be created.
    """
    date_path = _date_path(time)
    if make_subdirs(basedir, date_path):
        return basedir + _DELIM + date_path
    return ""