# This file is part of netconverge. See LICENSE file for license information.

import copy as obj_copy
import io
import logging
import os
import os.path
import random
import shutil
import string
import threading
from typing import Callable, Dict, Mapping, Optional, Sequence, Union

import yaml

from netconverge import settings
from netconverge.log import logexc

LOG = logging.getLogger(__name__)


def decode_binary(blob: Union[str, bytes], encoding="utf-8") -> str:
    # Converts a binary type into a text type using given encoding.
    return blob if isinstance(blob, str) else blob.decode(encoding=encoding)


def encode_text(text: Union[str, bytes], encoding="utf-8") -> bytes:
    # Converts a text string into a binary type using given encoding.
    return text if isinstance(text, bytes) else text.encode(encoding=encoding)


def rand_str(strlen=32, select_from=None):
    r = random.SystemRandom()
    if not select_from:
        select_from = string.ascii_letters + string.digits
    return "".join([r.choice(select_from) for _x in range(strlen)])


def load_binary_file(
    fname: Union[str, os.PathLike],
    *,
    quiet: bool = False,
) -> bytes:
    LOG.debug("Reading from %s (quiet=%s)", fname, quiet)
    with io.BytesIO() as ofh:
        try:
            with open(fname, "rb") as ifh:
                shutil.copyfileobj(ifh, ofh)
        except FileNotFoundError:
            if not quiet:
                raise
        contents = ofh.getvalue()
    LOG.debug("Read %s bytes from %s", len(contents), fname)
    return contents


def load_text_file(
    fname: Union[str, os.PathLike],
    *,
    quiet: bool = False,
) -> str:
    return decode_binary(load_binary_file(fname, quiet=quiet))


def load_yaml(blob, default=None, allowed=(dict,)):
    loaded = default
    blob = decode_binary(blob)
    try:
        LOG.debug(
            "Attempting to load yaml from string "
            "of length %s with allowed root types %s",
            len(blob),
            allowed,
        )
        converted = yaml.safe_load(blob)
        if converted is None:
            LOG.debug("loaded blob returned None, returning default.")
            converted = default
        elif not isinstance(converted, allowed):
            raise TypeError(
                "Yaml load allows %s root types, but got %s instead"
                % (allowed, type(converted).__name__)
            )
        loaded = converted
    except (yaml.YAMLError, TypeError, ValueError) as e:
        msg = "Failed loading yaml blob"
        mark = getattr(e, "context_mark", None) or getattr(
            e, "problem_mark", None
        )
        if mark:
            msg += (
                '. Invalid format at line {line} column {col}: "{err}"'.format(
                    line=mark.line + 1, col=mark.column + 1, err=e
                )
            )
        else:
            msg += ". {err}".format(err=e)
        LOG.warning(msg)
    return loaded


def read_conf(fname) -> Dict:
    """Read a yaml config and convert to dict, {} when it is absent."""
    try:
        config_file = load_text_file(fname)
    except FileNotFoundError:
        return {}
    return load_yaml(config_file, default={})


def mergemanydict(sources: Sequence[Mapping]) -> dict:
    """Merge multiple dicts, earlier sources taking priority.

    Entries are recursively added, but no values get replaced if they
    already exist. Functionally, this means that the highest priority
    keys must be specified first.

    mergemanydict([{"a": 1, "d": {"a": 1}}, {"a": 10, "d": {"f": 10}}])
    results in {"a": 1, "d": {"a": 1, "f": 10}}
    """
    merged_cfg: dict = {}

    def _merge(into, other):
        for key, value in other.items():
            if key not in into:
                into[key] = obj_copy.deepcopy(value)
            elif isinstance(into[key], dict) and isinstance(value, dict):
                _merge(into[key], value)

    for cfg in sources:
        if cfg:
            _merge(merged_cfg, cfg)
    return merged_cfg


def get_builtin_cfg():
    # Deep copy so that others can't modify
    return obj_copy.deepcopy(settings.CFG_BUILTIN)


def read_cfg(fname: Optional[str] = None) -> dict:
    """Return the builtin config overlaid with the yaml config file.

    The file is fname, else the path in the NETCONVERGE_CFG environment
    variable, else the default location.
    """
    if not fname:
        fname = os.environ.get(
            settings.CFG_ENV_NAME, settings.NETCONVERGE_CONFIG
        )
    return mergemanydict([read_conf(fname), get_builtin_cfg()])


def safe_int(possible_int):
    try:
        return int(possible_int)
    except (ValueError, TypeError):
        return None


def chmod(path, mode):
    real_mode = safe_int(mode)
    if path and real_mode:
        os.chmod(path, real_mode)


def ensure_dir(path, mode=None):
    if not os.path.isdir(path):
        os.makedirs(path)
    chmod(path, mode)


def write_file(filename, content, mode=0o644):
    """
    Writes a file with the given content and sets the file mode as specified.
    The directory containing filename is created first if needed.

    @param filename: The full path of the file to write.
    @param content: The content to write to the file.
    @param mode: The filesystem mode to set on the file.
    """
    ensure_dir(os.path.dirname(filename))
    content = encode_text(content)
    LOG.debug("Writing to %s - [%o] %s bytes", filename, mode, len(content))
    with open(filename, "wb") as fh:
        fh.write(content)
        fh.flush()
    chmod(filename, mode)


def converge_file(filename, content, mode=0o644) -> bool:
    """Write content to filename only if it differs from what is there.

    A missing file always differs. Returns True when a write happened.
    """
    content = encode_text(content)
    current = load_binary_file(filename, quiet=True)
    if os.path.exists(filename) and current == content:
        LOG.debug("Contents of %s already up to date", filename)
        return False
    write_file(filename, content, mode=mode)
    return True


def copy(src, dest):
    LOG.debug("Copying %s to %s", src, dest)
    ensure_dir(os.path.dirname(dest))
    shutil.copy(src, dest)


def sym_link(source, link, force=False):
    LOG.debug("Creating symbolic link from %r => %r", link, source)
    ensure_dir(os.path.dirname(link))
    if force and os.path.lexists(link):
        # Replace through a temporary link so readers never see it missing
        tmp_link = os.path.join(os.path.dirname(link), "tmp" + rand_str(8))
        os.symlink(source, tmp_link)
        os.replace(tmp_link, link)
        return
    os.symlink(source, link)


def read_and_follow_link(path) -> str:
    """Return the absolute path that path finally resolves to.

    @raises FileNotFoundError: when nothing exists at path.
    """
    if not os.path.lexists(path):
        raise FileNotFoundError(f"No such file or link: {path}")
    return os.path.realpath(path)


def spawn_detached(func: Callable, *args, name: Optional[str] = None) -> None:
    """Run func(*args) on a daemon thread nobody waits for.

    Nothing is returned to the caller. Exceptions raised by func are only
    visible in the log.
    """

    def _run():
        try:
            func(*args)
        except Exception:
            logexc(LOG, "Detached task %s failed", name or func.__name__)

    thread = threading.Thread(target=_run, name=name)
    thread.daemon = True
    thread.start()
    LOG.debug("Started detached task %s", thread.name)
