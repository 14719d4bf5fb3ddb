from collections import OrderedDict
import os

import docker
import jinja2

from .exc import BuildFailed, ConfigFailed, TaskFailed, TemplateFailed
from .display import Display
from .filters import setup_filters
from .tasks import get_task_cls
from .utils import copy_dict, expect_list_or_none, expect_mapping
from .vars import BuildVars
from .yaml import from_yaml, preserve_yaml_mark, get_yaml_type_name, yaml_scalar_text

DEFAULT_VERSION = "unspecified"

class BuildResult(object):
    def __init__(self, tasks=None):
        self.tasks = tasks or []

#
#
#

class BuildContext(object):
    """
    State shared by the tasks of a single run.

    The docker client is only created once a task asks for it, so runs
    that never start a builder work without a docker daemon.
    """

    def __init__(self, project, display=None, docker_client=None):
        self.project = project
        self.display = display if display is not None else Display()
        self._docker_client = docker_client
        self._owns_docker_client = docker_client is None
        self.current_task = None

    @property
    def docker_client(self):
        if self._docker_client is None:
            try:
                # XXX timeout is problematic
                self._docker_client = docker.from_env(timeout=600)
            except docker.errors.DockerException as de:
                raise TaskFailed("Unable to connect to docker: {}".format(de))
        return self._docker_client

    def resolve_path(self, path):
        if os.path.isabs(path):
            return path
        return os.path.join(self.project.root_dir, path)

    def run_task(self, task):
        self.display.status(">>> Task: {}".format(task.name))
        self.current_task = task
        try:
            task.run(self)
        except BuildFailed as bf:
            if bf.task is None:
                bf.task = task
            raise
        finally:
            self.current_task = None

    def close(self):
        if self._owns_docker_client and self._docker_client is not None:
            self._docker_client.close()
        self._docker_client = None

#
#
#

class Project(object):
    def __init__(self, filename=None, config=None, vars=None, root_dir=None, name=None):
        if root_dir is None:
            if filename is not None:
                root_dir = os.path.dirname(filename) or "."
            else:
                root_dir = "."
        self._root_dir = root_dir

        self.filename = filename
        self.name = name if name is not None else os.path.basename(os.path.abspath(root_dir))
        self.version = DEFAULT_VERSION
        self.global_vars = {}
        self.tasks = OrderedDict()
        self.default_tasks = None
        self._override_vars = dict(vars) if vars else {}
        self.vars = BuildVars(self, self._override_vars)

        self.tpl_env = jinja2.Environment(undefined=jinja2.StrictUndefined)
        setup_filters(self.tpl_env)

        if config is not None:
            self.load_config(config)
        if self.filename is not None:
            self._parse()

    def __repr__(self):
        return "Project(%r)" % (self.filename or self.name, )

    def _parse(self):
        with open(self.filename, "r") as f:
            config = from_yaml(f)
        self.load_config(config)

    @property
    def root_dir(self):
        return self._root_dir

    def load_config(self, config):
        if not isinstance(config, dict):
            raise ConfigFailed(
                "Unexpected type at top level, got {}, expected a mapping".format(get_yaml_type_name(config)),
                element=config
            )

        config = copy_dict(config)

        name = config.pop('name', None)
        if name is not None:
            self.name = yaml_scalar_text(name)
        version = config.pop('version', None)
        if version is not None:
            self.version = yaml_scalar_text(version)

        self.load_global_vars(config)
        self.vars = BuildVars(self, self._override_vars)

        tasks = config.pop('tasks', None)
        configure = config.pop('configure', None)
        default_tasks = expect_list_or_none(config.pop('default-tasks', None), str)

        if config:
            raise ConfigFailed(
                "Unexpected attributes {}".format(", ".join(config.keys())),
                element=config
            )

        if tasks is None:
            raise ConfigFailed("Need tasks at top level", element=config)
        expect_mapping(tasks, "tasks")
        for task_name, definition in tasks.items():
            self.add_task_from_dict(task_name, definition)

        if configure is not None:
            for entry in expect_list_or_none(configure):
                self.configure_from_dict(entry)

        if default_tasks is not None:
            for task_name in default_tasks:
                self.get_task(task_name, element=task_name)
            self.default_tasks = default_tasks

        for task in self.tasks.values():
            for dep in task.depends_on:
                if dep not in self.tasks:
                    raise ConfigFailed(
                        "Task `{}' depends on unknown task `{}'".format(task.name, dep),
                        task=task, element=dep
                    )

    def load_global_vars(self, config):
        include_vars = expect_list_or_none(config.pop("include-vars", None), str)
        if include_vars:
            for inc_fn in include_vars:
                with open(os.path.join(self.root_dir, inc_fn), "r") as f:
                    included = from_yaml(f)
                if included is not None:
                    self.global_vars.update(expect_mapping(included, inc_fn))

        svars = config.pop('vars', None)
        if svars:
            self.global_vars.update(expect_mapping(svars, "vars"))

    def get_self_vars(self):
        return {
            'name': self.name,
            'version': self.version,
            'root_dir': self.root_dir
        }

    #
    # Tasks
    #

    def register_task(self, name, type_name, element=None):
        if name in self.tasks:
            raise ConfigFailed("Task `%s' is already defined" % name, element=element)

        try:
            cls = get_task_cls(type_name)
        except ValueError as exc:
            raise ConfigFailed(str(exc), element=type_name)

        task = self.tasks[name] = cls(str(name), project=self)
        return task

    def get_task(self, name, element=None):
        try:
            return self.tasks[name]
        except KeyError:
            raise ConfigFailed("No task called `%s'" % name, element=element)

    def add_task_from_dict(self, name, definition):
        definition = copy_dict(expect_mapping(definition, "task `%s'" % name))

        try:
            type_name = definition.pop('type')
        except KeyError:
            raise ConfigFailed(
                "Task `%s' is missing required field type" % name,
                element=definition
            )

        task = self.register_task(name, type_name, element=name)
        task.depends_on = list(expect_list_or_none(definition.pop('depends-on', None), str) or ())
        description = definition.pop('description', None)
        if description is not None:
            task.description = self.template(description)

        task.configure(self.template(definition), element=definition)
        return task

    def configure_from_dict(self, entry):
        """
        Apply a ``configure`` entry to an already declared task.

        Properties are assigned, so ``environment`` replaces the task's
        mapping outright while ``add-environment`` merges into it.
        """
        entry = copy_dict(expect_mapping(entry, "configure entry"))

        try:
            name = entry.pop('task')
        except KeyError:
            raise ConfigFailed("Configure entry is missing required field task", element=entry)

        task = self.get_task(self.template(name), element=name)
        task.configure(self.template(entry), element=entry)
        return task

    def execution_order(self, names):
        order = []
        state = {}

        def visit(name, element=None):
            st = state.get(name)
            if st == "done":
                return
            if st == "visiting":
                raise ConfigFailed("Dependency cycle detected at task `%s'" % name, element=element)

            task = self.get_task(name, element=element)
            state[name] = "visiting"
            for dep in task.depends_on:
                visit(dep, element=dep)
            state[name] = "done"
            order.append(task)

        for name in names:
            visit(name, element=name)
        return order

    def run(self, names=None, display=None, docker_client=None):
        if not names:
            if self.default_tasks is not None:
                names = self.default_tasks
            else:
                names = list(self.tasks)

        order = self.execution_order(names)

        ctx = BuildContext(self, display=display, docker_client=docker_client)
        try:
            for task in order:
                ctx.run_task(task)
        finally:
            ctx.close()

        return BuildResult([task.name for task in order])

    #
    # Templates
    #

    def template(self, txt):
        if txt is None or isinstance(txt, (int, float)):
            return txt

        if isinstance(txt, dict):
            return preserve_yaml_mark(
                OrderedDict((self.template(k), self.template(v)) for k, v in txt.items()),
                txt
            )
        elif isinstance(txt, list):
            return preserve_yaml_mark([self.template(v) for v in txt], txt)
        elif not isinstance(txt, str):
            return txt

        try:
            tpl = self.tpl_env.from_string(txt)
        except jinja2.TemplateSyntaxError as tse:
            raise TemplateFailed("Problem parsing template: {}".format(tse), element=txt, tse=tse)
        except jinja2.TemplateError as te:
            raise TemplateFailed("Problem parsing template: {}".format(te), element=txt)

        try:
            return preserve_yaml_mark(tpl.render(**self.vars), txt)
        except jinja2.UndefinedError as ue:
            raise TemplateFailed("Problem rendering template: {}".format(ue), element=txt)
