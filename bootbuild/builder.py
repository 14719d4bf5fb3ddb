from collections import OrderedDict
import tarfile
import tempfile

import docker

from .exc import BuildFailed, TaskFailed
from .utils import tarfile_add

DEFAULT_BUILDER = "gcr.io/paketo-buildpacks/builder:base-platform-api-0.3"
DEFAULT_DOMAIN = "docker.io"
LEGACY_DOMAIN = "index.docker.io"
OFFICIAL_NAMESPACE = "library"
DEFAULT_TAG = "latest"

LABEL_IMAGE_NAME = "bootbuild.image-name"
DOCKER_SOCKET = "/var/run/docker.sock"
WORKSPACE_DIR = "workspace"
CREATOR = "/cnb/lifecycle/creator"

def _is_domain(part):
    return "." in part or ":" in part or part == "localhost"

def normalize_image_name(name, tag=None):
    """
    Expand an image reference to its fully qualified form.

    ``demo`` becomes ``docker.io/library/demo:latest``. An explicit
    ``tag`` only applies when the reference has none of its own.
    """
    digest = None
    if "@" in name:
        name, digest = name.split("@", 1)

    colon = name.rfind(":")
    if colon > name.rfind("/"):
        name, tag = name[:colon], name[colon+1:]

    first, sep, rest = name.partition("/")
    if sep and _is_domain(first):
        domain, path = first, rest
    else:
        domain, path = DEFAULT_DOMAIN, name

    if domain == LEGACY_DOMAIN:
        domain = DEFAULT_DOMAIN
    if domain == DEFAULT_DOMAIN and "/" not in path:
        path = "{}/{}".format(OFFICIAL_NAMESPACE, path)

    if not path:
        raise ValueError("Invalid image name `%s'" % (name, ))

    ref = "{}/{}".format(domain, path)
    if digest is not None:
        if tag is not None:
            ref = "{}:{}".format(ref, tag)
        return "{}@{}".format(ref, digest)
    return "{}:{}".format(ref, tag or DEFAULT_TAG)

class BuildRequest(object):
    def __init__(self, image_name, builder=DEFAULT_BUILDER, env=None,
                 clean_cache=False, verbose_logging=False, app_dir="."):
        self.image_name = image_name
        self.builder = builder
        self.env = OrderedDict(env or ())
        self.clean_cache = clean_cache
        self.verbose_logging = verbose_logging
        self.app_dir = app_dir

    def __repr__(self):
        return "BuildRequest(image_name={0.image_name!r}, builder={0.builder!r})".format(self)

    @property
    def command(self):
        command = [CREATOR, "-app", "/" + WORKSPACE_DIR, "-daemon"]
        if self.clean_cache:
            command.append("-skip-restore")
        if self.verbose_logging:
            command.extend(["-log-level", "debug"])
        command.append(self.image_name)
        return command

    @property
    def environment(self):
        return ["{}={}".format(*p) for p in self.env.items()]

class Builder(object):
    def __init__(self, docker_client, display):
        self.docker_client = docker_client
        self.display = display

    def build(self, request):
        self.display.status(">>> Building image: {}".format(request.image_name))
        self.display.status("--- Builder: {}".format(request.builder))
        try:
            self._ensure_image(request.builder)

            container = self.docker_client.containers.create(
                image=request.builder,
                labels={LABEL_IMAGE_NAME: request.image_name},
                command=request.command,
                environment=request.environment,
                volumes={DOCKER_SOCKET: {'bind': DOCKER_SOCKET, 'mode': 'rw'}},
                stdin_open=self.display.interactive,
                tty=self.display.interactive
            )
        except docker.errors.DockerException as de:
            raise TaskFailed("Unable to create builder container: {}".format(de))

        try:
            self._put_app(container, request.app_dir)
            self._run(container)
        except docker.errors.DockerException as de:
            raise TaskFailed("Builder failed: {}".format(de))
        finally:
            container.remove(force=True)

        self.display.status("--- Image: {}".format(request.image_name))

    def _ensure_image(self, name):
        try:
            return self.docker_client.images.get(name)
        except docker.errors.ImageNotFound:
            self.display.status(">>> Pulling: {}".format(name))
            return self.docker_client.images.pull(name)

    def _put_app(self, container, app_dir):
        with tempfile.TemporaryFile() as tf:
            try:
                with tarfile.open(fileobj=tf, mode="w") as tar:
                    tarfile_add(tar, app_dir, WORKSPACE_DIR)
            except OSError as oe:
                raise TaskFailed("Unable to read app directory: {}".format(oe))
            tf.seek(0)

            container.put_archive(path="/", data=tf)

    def _run(self, container):
        canceled = False
        try:
            self.display.watch_container(self.docker_client, container)
        except KeyboardInterrupt:
            canceled = True

        # If we were interrupted, we got here early and need to stop.
        # If not, we are stopped anyway.
        container.stop()

        result = container.wait()
        if canceled:
            raise BuildFailed("Build canceled", rc=-1)
        if result['StatusCode'] != 0:
            raise TaskFailed("Builder failed", rc=result['StatusCode'])
