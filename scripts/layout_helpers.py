#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Helpers for the tests: lay out version directories the way the
# repository does, and record commands instead of running them.

import os
import subprocess
import threading


def make_layout(root, versions):
    """versions maps a version directory name to whether it has an
    alpine variant"""
    for version, alpine in versions.items():
        os.makedirs(os.path.join(root, version))
        with open(os.path.join(root, version, "Dockerfile"), "w") as f:
            f.write("FROM postgres\n")
        if alpine:
            os.makedirs(os.path.join(root, version, "alpine"))
            with open(os.path.join(root, version, "alpine", "Dockerfile"), "w") as f:
                f.write("FROM postgres:alpine\n")
    return root


class RecordingRunner:
    """Records commands, fails the ones containing any of the given words"""

    def __init__(self, fail_on=()):
        self.commands = []
        self.envs = []
        self.fail_on = set(fail_on)
        self.lock = threading.Lock()

    def __call__(self, argv, env=None):
        with self.lock:
            self.commands.append(list(argv))
            self.envs.append(env)
        if self.fail_on.intersection(argv):
            raise subprocess.CalledProcessError(1, argv)

    def commands_with(self, word):
        return [c for c in self.commands if word in c]
