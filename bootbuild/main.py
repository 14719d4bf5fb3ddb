import os
import sys

import click

from .exc import BuildFailed
from .build import Project
from .display import Display

DEFAULT_BUILD_FILE = "bootbuild.yml"

def _parse_vars(ctx, param, value):
    rv = {}
    for item in value:
        k, sep, v = item.partition("=")
        if not sep or not k:
            raise click.BadParameter("expected KEY=VALUE, got {!r}".format(item))
        rv[k] = v
    return rv

@click.command()
@click.option("-f", "--file", "filename", default=".", metavar="PATH",
              help="Build file, or directory containing %s" % DEFAULT_BUILD_FILE)
@click.option("--var", "build_vars", multiple=True, callback=_parse_vars, metavar="KEY=VALUE",
              help="Set a template variable, overriding the build file")
@click.option("-q", "--quiet", is_flag=True, help="Don't report progress on stderr")
@click.option("--list", "list_tasks", is_flag=True, help="List tasks and exit")
@click.option("--interactive/--no-interactive", default=None,
              help="Attach a terminal to the builder (default: when stdin is a terminal)")
@click.argument('tasks', nargs=-1)
def cli(filename, build_vars, quiet, list_tasks, interactive, tasks):
    if os.path.isdir(filename):
        filename = os.path.join(filename, DEFAULT_BUILD_FILE)

    if interactive is None:
        interactive = sys.stdin.isatty()
    display = Display(interactive=interactive, quiet=quiet)

    try:
        project = Project(filename, vars=build_vars)
    except FileNotFoundError as fef:
        click.echo(str(fef), err=True)
        sys.exit(1)
    except BuildFailed as bf:
        click.echo(str(bf), err=True)
        sys.exit(1)

    if list_tasks:
        for task in project.tasks.values():
            if task.description:
                display.echo("{} - {}".format(task.name, task.description))
            else:
                display.echo(task.name)
        return

    try:
        project.run(tasks, display=display)
    except BuildFailed as bf:
        click.echo(str(bf), err=True)
        sys.exit(1)
