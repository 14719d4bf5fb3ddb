from collections import OrderedDict

from . import Task, TaskVar
from ..builder import Builder, BuildRequest, DEFAULT_BUILDER, normalize_image_name
from ..exc import ConfigFailed
from ..utils import expect_bool, expect_env_mapping

class TaskBootBuildImage(Task, type="boot-build-image"):
    """
    Build a container image of the project by running a builder image.

    The builder runs in a docker container with the task's environment
    passed through verbatim, and the project directory copied into its
    workspace.
    """

    class Schema:
        image_name = TaskVar(help="Name of the image to build. Defaults to "
                             "docker.io/library/<project name>:<project version>",
                             type=str)
        builder = TaskVar(default=DEFAULT_BUILDER, type=str,
                          help="Builder image to run")
        environment = TaskVar("env", type=expect_env_mapping,
                              help="Environment variables passed to the builder, "
                              "specified as a mapping of key/values. Replaces "
                              "any previously configured environment.")
        add_environment = TaskVar(type=expect_env_mapping, method="add_environment_map",
                                  help="Environment variables merged into the "
                                  "configured environment")
        clean_cache = TaskVar(default=False, type=expect_bool,
                              help="Clean the builder cache before building")
        verbose_logging = TaskVar(default=False, type=expect_bool,
                                  help="Enable verbose logging from the builder")
        app_dir = TaskVar(default=".", type=str,
                          help="Directory copied into the builder workspace")

    def setup(self):
        self._environment = OrderedDict()

    @property
    def environment(self):
        return self._environment

    @environment.setter
    def environment(self, environment):
        self._environment = OrderedDict(environment or ())

    def add_environment(self, name, value):
        self._environment[name] = value

    def add_environment_map(self, environment):
        self._environment.update(environment or ())

    def get_image_name(self):
        if self.image_name:
            return normalize_image_name(self.image_name)
        return normalize_image_name(self.project.name, tag=self.project.version)

    def create_request(self, ctx):
        try:
            image_name = self.get_image_name()
            builder = normalize_image_name(self.builder)
        except ValueError as exc:
            raise ConfigFailed(str(exc), task=self)

        return BuildRequest(
            image_name=image_name,
            builder=builder,
            env=self.environment,
            clean_cache=self.clean_cache,
            verbose_logging=self.verbose_logging,
            app_dir=ctx.resolve_path(self.app_dir)
        )

    def run(self, ctx):
        Builder(ctx.docker_client, ctx.display).build(self.create_request(ctx))
