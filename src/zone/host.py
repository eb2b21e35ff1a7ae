"""Bindings exposing host facilities to injected code.

These are ordinary bindings on the root module, registered through the same
API as any user binding:

    - ``$environ``: the process environment.
    - ``$console``: a ``logging.Logger``; its level is taken from the
      ``ZONE_LOG_LEVEL`` environment variable when set.
    - ``$storage``: the ``shelve`` module, a persistent key/value database
      opener (``storage.open(filename)``).
    - ``$Worker``: the ``threading.Thread`` class for background work.
"""

import logging
import os
import shelve
import threading
from typing import Mapping, Union

from zone.container import Zone
from zone.module import Module

__all__ = ["install_host_bindings", "LOG_LEVEL_VARIABLE"]

LOG_LEVEL_VARIABLE = "ZONE_LOG_LEVEL"


def make_console(environ: Mapping[str, str]) -> logging.Logger:
    console = logging.getLogger("zone.console")
    level = environ.get(LOG_LEVEL_VARIABLE)
    if level:
        console.setLevel(level.upper())
    return console


def make_storage(environ: Mapping[str, str]):
    return shelve


def make_worker(environ: Mapping[str, str]) -> type:
    return threading.Thread


def install_host_bindings(target: Union[Zone, Module]) -> Module:
    """Register the host bindings on the root module of ``target``."""
    root = target() if isinstance(target, Zone) else target.root
    return (
        root.value("$environ", os.environ)
        .factory("$console", ["$environ"], make_console)
        .factory("$storage", ["$environ"], make_storage)
        .factory("$Worker", ["$environ"], make_worker)
    )
