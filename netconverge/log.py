# This file is part of netconverge. See LICENSE file for license information.

import collections.abc
import io
import logging
import logging.config
import os
import sys
import time
from contextlib import suppress

DEFAULT_LOG_FORMAT = "%(asctime)s - %(filename)s[%(levelname)s]: %(message)s"


def setup_basic_logging(level=logging.DEBUG, formatter=None):
    formatter = formatter or logging.Formatter(DEFAULT_LOG_FORMAT)
    root = logging.getLogger()
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    console.setLevel(level)
    root.addHandler(console)
    root.setLevel(level)


def setup_logging(cfg=None, level=logging.WARNING):
    """Configure logging from the 'log_cfgs' entries of cfg.

    Each entry is either a path to a logging.config.fileConfig file or the
    config text itself. The first one that loads wins. When none load,
    basic stderr logging at level is set up unless 'log_basic' is False.
    """
    if not cfg:
        cfg = {}

    log_cfgs = []
    for a_cfg in cfg.get("log_cfgs", []):
        if isinstance(a_cfg, str):
            log_cfgs.append(a_cfg)
        elif isinstance(a_cfg, (collections.abc.Iterable)):
            log_cfgs.append("\n".join([str(c) for c in a_cfg]))
        else:
            log_cfgs.append(str(a_cfg))

    am_tried = 0
    for log_cfg in log_cfgs:
        # A handler pointing at a missing file or socket is expected in
        # early boot, move on to the next config.
        with suppress(FileNotFoundError):
            am_tried += 1

            # If the value is not a filename, assume that it is a config.
            if not (log_cfg.startswith("/") and os.path.isfile(log_cfg)):
                log_cfg = io.StringIO(log_cfg)

            logging.config.fileConfig(log_cfg)
            return

    if am_tried:
        sys.stderr.write(
            "WARN: no logging configured! (tried %s configs)\n" % (am_tried)
        )
    if cfg.get("log_basic", True):
        setup_basic_logging(level=level)


def reset_logging():
    """Remove all current handlers and unset log level."""
    log = logging.getLogger()
    handlers = list(log.handlers)
    for h in handlers:
        h.flush()
        h.close()
        log.removeHandler(h)
    log.setLevel(logging.NOTSET)


def configure_root_logger():
    """Customize the root logger for netconverge"""

    # Always format logging timestamps as UTC time
    logging.Formatter.converter = time.gmtime
    reset_logging()


def logexc(log, msg, *args, log_level: int = logging.WARNING) -> None:
    """Log msg at log_level and the active exception's traceback at debug."""
    log.log(log_level, msg, *args)
    log.debug(msg, exc_info=True, *args)
