import json
import posixpath
import re

FILTERS = {}

def register_filter(func):
    FILTERS[func.__name__] = func
    return func

def setup_filters(tpl_env):
    tpl_env.filters.pop("tojson", None)
    tpl_env.filters.pop("safe", None)

    tpl_env.filters.update(FILTERS)

#
#
#

@register_filter
def dirname(path):
    return posixpath.dirname(path)

@register_filter
def basename(path):
    return posixpath.basename(path)

@register_filter
def env_items(d):
    return ["{}={}".format(k, v) for k, v in d.items()]

def _regex(regex, ignorecase=False):
    flags = 0
    if ignorecase:
        flags |= re.IGNORECASE
    return re.compile(regex, flags=flags)

@register_filter
def regex_search(s, regex, default="", **kwargs):
    m = _regex(regex, **kwargs).search(s)
    if m is None:
        return default
    try:
        return m.group(1)
    except IndexError:
        return m.group(0)

@register_filter
def regex_replace(s, regex, replace, **kwargs):
    return _regex(regex, **kwargs).sub(replace, s)

@register_filter
def to_json(d):
    return json.dumps(d)
