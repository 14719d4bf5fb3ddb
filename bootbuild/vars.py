import os

class BuildVars(dict):
    """
    Template context for a project.

    ``env`` is the process environment, ``project`` describes the build
    file, then the file's ``vars`` and any command line overrides follow,
    later ones winning.
    """

    def __init__(self, project=None, overrides=None):
        super().__init__(env=dict(os.environ))

        if project is not None:
            self['project'] = project.get_self_vars()
            self.update(project.global_vars)
        if overrides:
            self.update(overrides)
