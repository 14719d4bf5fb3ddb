from collections import OrderedDict
import os
import posixpath

from .exc import ConfigFailed
from .yaml import preserve_yaml_mark, get_yaml_type_name, yaml_scalar_text

_TRUE_STRINGS = ("1", "true", "yes", "on")
_FALSE_STRINGS = ("0", "false", "no", "off", "")

def expect_type(val, type_):
    if type_ is None:
        return val
    return preserve_yaml_mark(type_(val), val)

def expect_list(val, subtype=None):
    if isinstance(val, list):
        return preserve_yaml_mark([expect_type(v, subtype) for v in val], val)
    if subtype is not None and isinstance(val, subtype):
        return preserve_yaml_mark([val], val)
    raise ConfigFailed(
        "Expected a list, but got {}".format(get_yaml_type_name(val)),
        element=val
    )

def expect_list_or_none(val, subtype=None):
    if val is None:
        return val
    return expect_list(val, subtype=subtype)

def expect_mapping(val, what):
    if not isinstance(val, dict):
        raise ConfigFailed(
            "Expected {} to be a mapping, but got {}".format(what, get_yaml_type_name(val)),
            element=val
        )
    return val

def copy_dict(val):
    return preserve_yaml_mark(OrderedDict(val), val)

def expect_bool(val):
    if isinstance(val, (bool, int)):
        return bool(val)
    lowered = str(val).strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError("expected a boolean, got %r" % (val, ))

def expect_env_mapping(val):
    """
    Coerce an environment mapping to ``str`` names and values.

    Order is kept. A null value becomes the empty string, scalars keep
    the text they were written with.
    """
    if not isinstance(val, dict):
        raise ValueError("expected a mapping of names to values, got %s"
                         % get_yaml_type_name(val))
    return OrderedDict(
        (str(k), "" if v is None else yaml_scalar_text(v)) for k, v in val.items()
    )

def tarfile_add(tf, srcname, arcname=None, recursive=True):
    if arcname is None:
        arcname = srcname
    paths = [(arcname, srcname)]

    while True:
        try:
            arcname, srcname = paths.pop()
        except IndexError:
            break

        ti = tf.gettarinfo(srcname, arcname)

        if ti.isreg():
            with open(srcname, "rb") as fi:
                tf.addfile(ti, fi)
        elif ti.isdir():
            tf.addfile(ti)
            if recursive:
                for fn in sorted(os.listdir(srcname)):
                    paths.append((posixpath.join(arcname, fn), os.path.join(srcname, fn)))
        else:
            tf.addfile(ti)
