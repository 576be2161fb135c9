#  This file and its contents are licensed under the Apache License 2.0.
#  Please see the included NOTICE for copyright information and
#  LICENSE-APACHE for a copy of the license.

# The operations of an invocation as an explicit DAG plus the composite
# goals (build, test, push, ...) that fan out over it.

from rule_generator import (
    BUILD,
    PUSH,
    PUSH_LATEST_NAME,
    TAG_LATEST_NAME,
    TEST,
    generate_rules,
    operation_name,
)

class DependencyGraph:
    def __init__(self):
        self.nodes = {}
        self.edges = {}
        self.aliases = {}

    def __contains__(self, name):
        return name in self.nodes

    def __len__(self):
        return len(self.nodes)

    def add(self, operation):
        if operation.name in self.nodes:
            raise ValueError(f"operation '{operation.name}' defined twice")
        self.nodes[operation.name] = operation
        self.edges[operation.name] = list(operation.dependencies)

    def alias(self, name, goals):
        self.aliases[name] = list(goals)

    def dependencies(self, name):
        return list(self.edges[name])

    def dependents(self, name):
        return [node for node, deps in self.edges.items() if name in deps]

    def resolve(self, goal):
        """Return the node names a goal stands for."""
        if goal in self.aliases:
            return list(self.aliases[goal])
        if goal in self.nodes:
            return [goal]
        raise KeyError(goal)

    def validate(self):
        for name, deps in self.edges.items():
            for dep in deps:
                if dep not in self.nodes:
                    raise ValueError(f"'{name}' depends on undefined '{dep}'")
        # raises on cycles
        self.closure(list(self.nodes))

    def closure(self, goals):
        """Return every node needed for the goals, prerequisites first.
        Ties keep the order in which the goals and dependencies are listed."""
        order = []
        done = set()
        visiting = set()

        def visit(name):
            if name in done:
                return
            if name in visiting:
                raise ValueError(f"dependency cycle through '{name}'")
            visiting.add(name)
            for dep in self.edges[name]:
                visit(dep)
            visiting.discard(name)
            done.add(name)
            order.append(name)

        for goal in goals:
            for name in self.resolve(goal):
                visit(name)
        return order


def build_graph(targets, config):
    graph = DependencyGraph()
    for operation in generate_rules(targets, config):
        graph.add(operation)
    graph.validate()

    # the latest rules only exist when the latest version is selected,
    # otherwise their goals stand for nothing
    tag_latest = [TAG_LATEST_NAME] if TAG_LATEST_NAME in graph else []
    push_latest = [PUSH_LATEST_NAME] if PUSH_LATEST_NAME in graph else []

    graph.alias("build", [operation_name(BUILD, t) for t in targets])
    graph.alias("test", [operation_name(TEST, t) for t in targets])
    graph.alias("push", [operation_name(PUSH, t) for t in targets] + push_latest)
    graph.alias(TAG_LATEST_NAME, tag_latest)
    graph.alias(PUSH_LATEST_NAME, push_latest)
    return graph
