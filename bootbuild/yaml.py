from collections import OrderedDict

import yaml

from . import exc

__all__ = ['from_yaml', 'YamlMarked', 'preserve_yaml_mark', 'get_yaml_type_name',
           'yaml_scalar_text']

#
# Values loaded from a build file remember where they came from, so
# configuration errors can point at a line and column.
#

class YamlMarked(object):
    yaml_mark = None

    @property
    def filename(self):
        return self.yaml_mark.name

    @property
    def line(self):
        return self.yaml_mark.line + 1

    @property
    def column(self):
        return self.yaml_mark.column

class YamlVoid(YamlMarked):
    def __init__(self, mark=None):
        self.yaml_mark = mark

class YamlScalar(YamlMarked):
    TYPE_NAME = "scalar"
    BASE = None

    def __new__(cls, val, mark=None, text=None):
        o = super().__new__(cls, cls.BASE(val))
        o.yaml_mark = mark
        o.yaml_text = text
        return o

class YamlStr(YamlScalar, str):
    TYPE_NAME = "string"
    BASE = str

class YamlInt(YamlScalar, int):
    TYPE_NAME = "integer"
    BASE = int

class YamlFloat(YamlScalar, float):
    TYPE_NAME = "float"
    BASE = float

class YamlBool(YamlScalar, int):
    # bool can't be subclassed, so this compares equal to True/False instead
    TYPE_NAME = "boolean"
    BASE = bool

    def __repr__(self):
        return repr(bool(self))

class YamlDict(YamlMarked, OrderedDict):
    TYPE_NAME = "mapping"

    def __init__(self, val, mark=None):
        super().__init__(val)
        self.yaml_mark = mark

class YamlList(YamlMarked, list):
    TYPE_NAME = "list"

    def __init__(self, val, mark=None):
        super().__init__(val)
        self.yaml_mark = mark

YAML_TYPE_MAP = {
    str: YamlStr,
    int: YamlInt,
    float: YamlFloat,
    bool: YamlBool,
    dict: YamlDict,
    OrderedDict: YamlDict,
    list: YamlList,
}

#
#
#

class YamlLoader(yaml.SafeLoader):
    pass

def constructor(tag):
    def dec(func):
        YamlLoader.add_constructor(tag, func)
        return func
    return dec

@constructor('tag:yaml.org,2002:map')
@constructor('tag:yaml.org,2002:omap')
def _construct_mapping(loader, node):
    loader.flatten_mapping(node)
    return YamlDict(loader.construct_pairs(node), mark=node.start_mark)

@constructor('tag:yaml.org,2002:seq')
def _construct_yaml_seq(loader, node):
    return YamlList(loader.construct_sequence(node), mark=node.start_mark)

# Timestamps are kept as the text written
@constructor('tag:yaml.org,2002:timestamp')
@constructor('tag:yaml.org,2002:str')
def _construct_yaml_str(loader, node):
    return YamlStr(loader.construct_scalar(node), mark=node.start_mark)

@constructor('tag:yaml.org,2002:bool')
def _construct_yaml_bool(loader, node):
    return YamlBool(loader.construct_yaml_bool(node), mark=node.start_mark)

@constructor('tag:yaml.org,2002:int')
def _construct_yaml_int(loader, node):
    return YamlInt(loader.construct_yaml_int(node), mark=node.start_mark, text=node.value)

@constructor('tag:yaml.org,2002:float')
def _construct_yaml_float(loader, node):
    return YamlFloat(loader.construct_yaml_float(node), mark=node.start_mark, text=node.value)

#
#
#

def from_yaml(obj):
    try:
        return yaml.load(obj, YamlLoader)
    except yaml.YAMLError as ye:
        if getattr(ye, "problem_mark", None) is not None:
            raise exc.ConfigFailed(ye.problem, element=YamlVoid(ye.problem_mark))
        else:
            raise exc.ConfigFailed(str(ye))

def get_yaml_type_name(obj):
    if isinstance(obj, YamlMarked) and hasattr(obj, "TYPE_NAME"):
        return obj.TYPE_NAME
    if obj is None:
        return "null"
    return type(obj).__name__

def preserve_yaml_mark(dst, src):
    if isinstance(src, YamlMarked) and not isinstance(dst, YamlMarked):
        ycls = YAML_TYPE_MAP.get(type(dst))
        if ycls is not None:
            return ycls(dst, mark=src.yaml_mark)
    return dst

def yaml_scalar_text(val):
    """
    Render a scalar the way it was written in the build file.

    Numbers keep their source text (``17.10`` stays ``17.10``) and
    booleans use YAML spelling.
    """
    if isinstance(val, (YamlBool, bool)):
        return "true" if val else "false"
    text = getattr(val, "yaml_text", None)
    if text is not None:
        return text
    return str(val)
