import struct
import sys

import click
import dockerpty

def _pump_streams(docker_out, stdout, stderr):
    # Attach sockets multiplex both streams behind 8-byte frame headers
    while True:
        header = docker_out.read(8)
        if not header:
            break
        stype, length = struct.unpack('>BxxxL', header)

        buffer = []
        while length > 0:
            chunk = docker_out.read(length)
            if not chunk:
                break
            length -= len(chunk)
            buffer.append(chunk)

        data = b"".join(buffer)
        if stype == 1:
            stdout.buffer.write(data)
            stdout.flush()
        elif stype == 2:
            stderr.buffer.write(data)
            stderr.flush()

class Display(object):
    def __init__(self, interactive=True, quiet=False, stdin=None, stdout=None, stderr=None):
        self.interactive = interactive
        self.quiet = quiet
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.stdin = stdin if stdin is not None else sys.stdin

    def watch_container(self, docker_client, container):
        if self.interactive:
            dockerpty.start(
                docker_client.api, container.id,
                stdout=self.stdout,
                stderr=self.stderr,
                stdin=self.stdin,
                interactive=self.interactive,
                logs=1
            )
        else:
            docker_out = docker_client.api.attach_socket(container.id, {
                'stdout': 1, 'stderr': 1, 'stream': 1
            })
            docker_client.api.start(container.id)

            _pump_streams(docker_out, self.stdout, self.stderr)

    def echo(self, *args, **kwargs):
        err = kwargs.pop("err", False)
        click.echo(*args, file=self.stderr if err else self.stdout, **kwargs)

    def status(self, message):
        """
        Report progress on stderr, keeping stdout for task output.
        """
        if not self.quiet:
            self.echo(message, err=True)
