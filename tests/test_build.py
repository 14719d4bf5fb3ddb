import datetime
import io
import os
import tempfile
import unittest

import pytest

from bootbuild.build import Project
from bootbuild.display import Display
from bootbuild.exc import ConfigFailed, TemplateFailed
from bootbuild.yaml import from_yaml

BUILD_FILE = """\
name: demo
version: 0.0.1

vars:
  jvm_version: 13.0.1

tasks:
  bootBuildImage:
    type: boot-build-image
    description: Build the {{ project.name }} image
    environment:
      BP_JVM_VERSION: "{{ jvm_version }}"

  bootBuildImageEnvironment:
    type: print-environment
"""

def run_output(project, names):
    out = io.StringIO()
    project.run(names, display=Display(interactive=False, quiet=True, stdout=out, stderr=io.StringIO()))
    return out.getvalue()

class TestProject(unittest.TestCase):
    def test_load(self):
        project = Project(config=from_yaml(BUILD_FILE))

        self.assertEqual(project.name, "demo")
        self.assertEqual(project.version, "0.0.1")
        self.assertEqual(list(project.tasks), ["bootBuildImage", "bootBuildImageEnvironment"])

        task = project.get_task("bootBuildImage")
        self.assertEqual(task.description, "Build the demo image")
        self.assertEqual(task.environment, {"BP_JVM_VERSION": "13.0.1"})
        self.assertEqual(task.get_image_name(), "docker.io/library/demo:0.0.1")

    def test_var_override(self):
        project = Project(config=from_yaml(BUILD_FILE), vars={"jvm_version": "17"})
        self.assertEqual(project.get_task("bootBuildImage").environment, {"BP_JVM_VERSION": "17"})

    def test_default_name(self):
        project = Project(config={"tasks": {}}, root_dir="/srv/demo-app")
        self.assertEqual(project.name, "demo-app")
        self.assertEqual(project.version, "unspecified")

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as td:
            fn = os.path.join(td, "bootbuild.yml")
            with open(fn, "w") as f:
                f.write(BUILD_FILE)

            project = Project(fn)
            self.assertEqual(project.root_dir, td)
            self.assertEqual(project.vars["project"]["root_dir"], td)
            self.assertEqual(run_output(project, ["bootBuildImageEnvironment"]),
                             "BP_JVM_VERSION=13.0.1")

    def test_include_vars(self):
        with tempfile.TemporaryDirectory() as td:
            with open(os.path.join(td, "extra.yml"), "w") as f:
                f.write("registry: example.com\n")

            project = Project(root_dir=td, config=from_yaml("""
            include-vars: extra.yml
            tasks:
              bootBuildImage:
                type: boot-build-image
                image-name: "{{ registry }}/demo:1"
            """))
            self.assertEqual(project.get_task("bootBuildImage").get_image_name(),
                             "example.com/demo:1")

class TestConfigure(unittest.TestCase):
    def test_replace(self):
        project = Project(config=from_yaml(BUILD_FILE + """
configure:
  - task: bootBuildImage
    environment:
      A: "1"
      B: "2"
"""))
        self.assertEqual(run_output(project, ["bootBuildImageEnvironment"]), "A=1B=2")

    def test_last_wins(self):
        project = Project(config=from_yaml(BUILD_FILE + """
configure:
  - task: bootBuildImage
    environment:
      A: "1"
  - task: bootBuildImage
    environment:
      B: "2"
"""))
        self.assertEqual(run_output(project, ["bootBuildImageEnvironment"]), "B=2")

    def test_add(self):
        project = Project(config=from_yaml(BUILD_FILE + """
configure:
  - task: bootBuildImage
    add-environment:
      BPL_JVM_HEAD_ROOM: "8"
"""))
        self.assertEqual(run_output(project, ["bootBuildImageEnvironment"]),
                         "BP_JVM_VERSION=13.0.1BPL_JVM_HEAD_ROOM=8")

    def test_unknown_task(self):
        with self.assertRaises(ConfigFailed) as cm:
            Project(config=from_yaml(BUILD_FILE + """
configure:
  - task: bootBuildImages
    environment: {}
"""))
        self.assertIn("No task called `bootBuildImages'", str(cm.exception))
        self.assertEqual(cm.exception.line, 18)

    def test_missing_task_field(self):
        with self.assertRaises(ConfigFailed):
            Project(config=from_yaml(BUILD_FILE + """
configure:
  - environment: {}
"""))

class TestConfigErrors(unittest.TestCase):
    def assertConfigFails(self, text, message=None):
        with self.assertRaises(ConfigFailed) as cm:
            Project(config=from_yaml(text))
        if message is not None:
            self.assertIn(message, str(cm.exception))
        return cm.exception

    def test_not_mapping(self):
        self.assertConfigFails("- a\n- b\n", "expected a mapping")

    def test_missing_tasks(self):
        self.assertConfigFails("name: demo\n", "Need tasks")

    def test_unexpected_attribute(self):
        self.assertConfigFails("tasks: {}\nstages: {}\n", "Unexpected attributes stages")

    def test_missing_type(self):
        self.assertConfigFails("tasks:\n  a:\n    task: b\n", "missing required field type")

    def test_unknown_type(self):
        self.assertConfigFails("tasks:\n  a:\n    type: nope\n", "No task type called `nope'")

    def test_unknown_item_position(self):
        exc = self.assertConfigFails(
            "tasks:\n"
            "  bootBuildImage:\n"
            "    type: boot-build-image\n"
            "    colour: blue\n",
            "Unknown item `colour' found"
        )
        self.assertEqual((exc.line, exc.column), (4, 4))
        self.assertTrue(str(exc).endswith(":4:4: Unknown item `colour' found"))

    def test_unknown_dependency(self):
        self.assertConfigFails(
            "tasks:\n  a:\n    type: print-environment\n    depends-on: [b]\n",
            "depends on unknown task `b'"
        )

    def test_undefined_template_var(self):
        with self.assertRaises(TemplateFailed):
            Project(config=from_yaml(
                "tasks:\n  a:\n    type: boot-build-image\n    image-name: '{{ nope }}'\n"
            ))

    def test_template_syntax(self):
        with self.assertRaises(TemplateFailed) as cm:
            Project(config=from_yaml(
                "tasks:\n  a:\n    type: boot-build-image\n    image-name: '{{ nope '\n"
            ))
        self.assertIn("Problem parsing template", str(cm.exception))

    def test_duplicate_register(self):
        project = Project(name="demo")
        project.register_task("a", "print-environment")
        with self.assertRaises(ConfigFailed):
            project.register_task("a", "boot-build-image")

#
#
#

ORDER_FILE = """
tasks:
  report:
    type: print-environment
    task: image
    depends-on: [prepare, image]
  prepare:
    type: print-environment
    task: image
    separator: ","
  image:
    type: boot-build-image
    depends-on: prepare
"""

def test_execution_order():
    project = Project(config=from_yaml(ORDER_FILE))
    assert [t.name for t in project.execution_order(["report"])] == ["prepare", "image", "report"]
    assert [t.name for t in project.execution_order(["prepare", "prepare"])] == ["prepare"]

def test_default_tasks():
    project = Project(config=from_yaml(ORDER_FILE + "default-tasks: prepare\n"))
    assert project.default_tasks == ["prepare"]

    out = io.StringIO()
    result = project.run(display=Display(interactive=False, quiet=True, stdout=out))
    assert result.tasks == ["prepare"]
    assert out.getvalue() == ""

def test_default_tasks_unknown():
    with pytest.raises(ConfigFailed):
        Project(config=from_yaml(ORDER_FILE + "default-tasks: [missing]\n"))

def test_cycle():
    project = Project(config=from_yaml("""
tasks:
  a:
    type: print-environment
    depends-on: [b]
  b:
    type: print-environment
    depends-on: [a]
"""))
    with pytest.raises(ConfigFailed) as excinfo:
        project.run(["a"])
    assert "Dependency cycle detected at task `a'" in str(excinfo.value)

@pytest.mark.parametrize('template,expected', [
    ("{{ 'a/b/c' | dirname }}", "a/b"),
    ("{{ 'a/b/c' | basename }}", "c"),
    ("{{ '13.0.1' | regex_search('^([0-9]+)') }}", "13"),
    ("{{ 'a-b' | regex_replace('-', '_') }}", "a_b"),
    ("{{ {'A': '1', 'B': '2'} | env_items | join(' ') }}", "A=1 B=2"),
    ("{{ [1, 2] | to_json }}", "[1, 2]"),
    ("{{ project.name }}-{{ project.version }}", "demo-unspecified"),
])
def test_template_filters(template, expected):
    project = Project(name="demo")
    assert project.template(template) == expected

def test_template_env(monkeypatch):
    monkeypatch.setenv("BOOTBUILD_TEST_VALUE", "from-env")
    project = Project(name="demo")
    assert project.template("{{ env.BOOTBUILD_TEST_VALUE }}") == "from-env"

SCALAR_FILE = """
version: 17.10
tasks:
  bootBuildImage:
    type: boot-build-image
    environment:
      BP_NATIVE_IMAGE: true
      BP_JVM_VERSION: 17.10
      BUILD_DATE: 2020-01-01
      BUILD_TIME: 2001-12-14t21:59:43.10-05:00
  bootBuildImageEnvironment:
    type: print-environment
    separator: " "
"""

def test_scalars_passed_as_written():
    project = Project(config=from_yaml(SCALAR_FILE))

    assert project.version == "17.10"
    assert run_output(project, ["bootBuildImageEnvironment"]) == (
        "BP_NATIVE_IMAGE=true BP_JVM_VERSION=17.10 "
        "BUILD_DATE=2020-01-01 BUILD_TIME=2001-12-14t21:59:43.10-05:00"
    )

def test_template_passes_non_strings():
    project = Project(name="demo")
    today = datetime.date(2020, 1, 1)
    assert project.template(today) is today
    assert project.template({"when": today}) == {"when": today}
