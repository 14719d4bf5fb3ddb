from . import Task, TaskVar
from ..exc import ConfigFailed
from .boot_build_image import TaskBootBuildImage

def format_environment(environment, separator=""):
    return separator.join("{}={}".format(name, value) for name, value in environment.items())

class TaskPrintEnvironment(Task, type="print-environment"):
    """
    Print the environment of a boot-build-image task.

    Each variable is written as ``name=value`` in the order it was
    configured. Entries are not separated unless ``separator`` is set,
    and no trailing newline is written.
    """

    class Schema:
        task = TaskVar(default="bootBuildImage", type=str,
                       help="Name of the boot-build-image task to report on")
        separator = TaskVar(default="", type=str,
                            help="Text written between entries")

    def run(self, ctx):
        target = ctx.project.get_task(self.task)
        if not isinstance(target, TaskBootBuildImage):
            raise ConfigFailed(
                "Task `{}' is not a boot-build-image task".format(self.task),
                task=self
            )

        ctx.display.echo(format_environment(target.environment, self.separator), nl=False)
