#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# Walk a DependencyGraph and run the external commands of each operation.
#
# A failed operation stops its own chain: nothing that depends on it runs.
# Without keep_going no new operation is started after the first failure,
# the same as make without -k.

import os
import shlex
import subprocess
import sys
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait


def run_command(argv, env=None, dry_run=False):
    """Echo and run a command, raising CalledProcessError on failure."""
    print(" ".join(shlex.quote(arg) for arg in argv), flush=True)
    if dry_run:
        return
    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)
    subprocess.run(argv, check=True, env=full_env)


def run_operation(operation, runner=run_command):
    if operation.creates and os.path.exists(operation.creates):
        print(f"{operation.name}: {operation.creates} already exists", flush=True)
        return
    for command in operation.commands:
        runner(command, env=operation.env)


class RunResult:
    def __init__(self):
        self.succeeded = []
        self.failed = []
        self.skipped = []

    @property
    def ok(self):
        return not self.failed

    def __repr__(self):
        return (
            f"RunResult(succeeded={self.succeeded}, failed={self.failed}, "
            f"skipped={self.skipped})"
        )


def run_goals(graph, goals, runner=run_command, jobs=1, keep_going=False):
    """Run everything the goals need. Independent operations run on up to
    `jobs` threads, an operation starts once all of its prerequisites
    succeeded."""
    jobs = max(1, jobs)
    pending = graph.closure(goals)
    result = RunResult()
    broken = set()
    running = {}
    stopped = False

    with ThreadPoolExecutor(max_workers=jobs) as pool:
        while pending or running:
            for name in list(pending):
                deps = graph.dependencies(name)
                if any(dep in broken for dep in deps):
                    pending.remove(name)
                    broken.add(name)
                    result.skipped.append(name)
                    print(f"{name}: skipped, a prerequisite failed", file=sys.stderr)
                    continue
                if stopped or len(running) >= jobs:
                    continue
                if all(dep in result.succeeded for dep in deps):
                    pending.remove(name)
                    future = pool.submit(run_operation, graph.nodes[name], runner)
                    running[future] = name

            if not running:
                # stopped after a failure, whatever is left does not run
                result.skipped.extend(pending)
                break

            finished, _ = wait(running, return_when=FIRST_COMPLETED)
            for future in finished:
                name = running.pop(future)
                try:
                    future.result()
                except (subprocess.CalledProcessError, OSError) as e:
                    print(f"*** {name} failed: {e}", file=sys.stderr, flush=True)
                    result.failed.append(name)
                    broken.add(name)
                    if not keep_going:
                        stopped = True
                else:
                    result.succeeded.append(name)

    return result
