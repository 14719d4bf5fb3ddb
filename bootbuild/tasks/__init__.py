import keyword as _keyword
import os as _os

from ..exc import ConfigFailed

TASKS = {}

def get_task_cls(type_name):
    cls = _find_task_cls(type_name)
    if cls is None:
        raise ValueError("No task type called `%s'." % (type_name,))
    return cls

_tasks_fully_loaded = False
def iter_tasks():
    global _tasks_fully_loaded
    if not _tasks_fully_loaded:
        for mn in sorted(_os.listdir(_os.path.dirname(__file__))):
            if mn.endswith(".py") and not mn.startswith("_"):
                __import__(_make_mod_name(__name__, mn[:-3]))
        _tasks_fully_loaded = True

    for task in TASKS.values():
        yield task

def _find_task_cls(type_name):
    try:
        return TASKS[type_name]
    except KeyError:
        pass

    try:
        __import__(_make_mod_name(__name__, type_name))
    except ImportError:
        pass

    return TASKS.get(type_name)

def _make_mod_name(basename, name):
    name = name.replace("-", "_")
    while _keyword.iskeyword(name):
        name = name + "_"
    return "{}.{}".format(basename, name)

#
#
#

class Task(object):
    task_type = None
    Schema = None
    schema = None
    schema_doc = True

    def __init_subclass__(cls, type, **kwargs):
        if cls.Schema is not None:
            cls.schema = TaskSchema(cls.Schema)
        super().__init_subclass__(**kwargs)
        cls.task_type = type
        TASKS[type] = cls

    def __init__(self, name, project=None):
        self.name = name
        self.project = project
        self.description = None
        self.depends_on = []
        self.setup()
        if self.schema is not None:
            self.schema.apply_defaults(self)

    def __repr__(self):
        return "<{} {!r}>".format(type(self).__name__, self.name)

    def setup(self):
        pass

    def configure(self, values, element=None):
        """
        Apply a mapping of property values to this task.

        Keys are schema names (``image-name``) or aliases. Values are
        converted by the matching :class:`TaskVar`, then either assigned
        to the task attribute or handed to the var's method.
        """
        if self.schema is None:
            if values:
                raise ConfigFailed(
                    "Task type `%s' takes no properties" % self.task_type,
                    task=self, element=element
                )
            return
        self.schema.apply(self, values, element=element)

    def run(self, ctx):
        raise NotImplementedError

def _fixup_var_name(name):
    return name.replace("_", "-")

class TaskSchema(object):
    def __init__(self, schema):
        self.values = {}
        self.aliases = {}

        for k, v in schema.__dict__.items():
            if isinstance(v, TaskVar):
                self.__add_var(k, v)

    def __add_var(self, key, var):
        var.name = key
        self.values[_fixup_var_name(key)] = var
        for alias in var.aliases:
            self.aliases[alias] = var

    def lookup(self, key):
        varobj = self.values.get(key)
        if varobj is None:
            varobj = self.aliases.get(key)
        return varobj

    def apply_defaults(self, task):
        for varobj in self.values.values():
            if varobj.method is None:
                setattr(task, varobj.name, varobj.default)

    def apply(self, task, values, element=None):
        if not isinstance(values, dict):
            raise ConfigFailed("Non-mapping provided but map is required",
                               task=task, element=element)

        for k, v in values.items():
            varobj = self.lookup(k)
            if varobj is None:
                raise ConfigFailed("Unknown item `%s' found" % k,
                                   task=task, element=k)
            varobj.handle(task, v)

class TaskVar(object):
    name = None

    def __init__(self, *aliases, default=None, type=None, method=None, help=None):
        self.aliases = aliases
        self.default = default
        self.type = type
        self.method = method
        self.help = help

    def convert(self, task, value):
        if value is None or self.type is None:
            return value
        try:
            return self.type(value)
        except (TypeError, ValueError) as exc:
            raise ConfigFailed(
                "Invalid value for {}: {}".format(_fixup_var_name(self.name), exc),
                task=task, element=value
            )

    def handle(self, task, value):
        value = self.convert(task, value)
        if self.method is not None:
            getattr(task, self.method)(value)
        else:
            setattr(task, self.name, value)
