#!/usr/bin/env python

import os
import tempfile
import unittest

from dependency_graph import DependencyGraph, build_graph
from image_config import ImageConfig
from layout_helpers import make_layout
from rule_generator import Operation
from version_selector import select_targets


class TestDependencyGraph(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = make_layout(
            self.tmp.name, {"17-3.5": True, "16-3.5": True, "10-2.5": False}
        )

    def tearDown(self):
        self.tmp.cleanup()

    def graph(self, version=None, variant=None, latest_version="17-3.5"):
        config = ImageConfig(
            root=self.root,
            version=version,
            variant=variant,
            offimg_local_clone=os.path.join(self.root, "official-images"),
            latest_version=latest_version,
        )
        return build_graph(select_targets(self.root, version, variant), config)

    def testTestRunsAfterBuild(self):
        graph = self.graph()
        for target in ["10-2.5", "16-3.5", "16-3.5-alpine", "17-3.5-alpine"]:
            order = graph.closure([f"test-{target}"])
            self.assertLess(order.index(f"build-{target}"), order.index(f"test-{target}"))
            self.assertIn("test-prepare", order)

    def testPushRunsAfterTest(self):
        graph = self.graph()
        order = graph.closure(["push-16-3.5"])
        self.assertEqual(order, ["test-prepare", "build-16-3.5", "test-16-3.5", "push-16-3.5"])

    def testGlobalAliases(self):
        graph = self.graph("16-3.5")
        self.assertEqual(graph.resolve("build"), ["build-16-3.5", "build-16-3.5-alpine"])
        self.assertEqual(graph.resolve("test"), ["test-16-3.5", "test-16-3.5-alpine"])
        self.assertEqual(graph.resolve("push"), ["push-16-3.5", "push-16-3.5-alpine"])

    def testPushLatestWithoutVersion(self):
        graph = self.graph()
        self.assertIn("push-latest", graph.resolve("push"))
        order = graph.closure(["push-latest"])
        self.assertLess(order.index("build-17-3.5"), order.index("tag-latest"))
        self.assertLess(order.index("push-17-3.5"), order.index("push-latest"))

    def testPushLatestWithLatestVersion(self):
        self.assertIn("push-latest", self.graph("17-3.5").resolve("push"))
        self.assertIn("push-latest", self.graph("17-3.5", "default").resolve("push"))

    def testPushLatestElided(self):
        for version, variant in [("16-3.5", None), ("17-3.5", "alpine")]:
            graph = self.graph(version, variant)
            self.assertNotIn("push-latest", graph.resolve("push"))
            self.assertNotIn("push-latest", graph)
            self.assertNotIn("tag-latest", graph)
            self.assertEqual(graph.resolve("push-latest"), [])
            self.assertEqual(graph.resolve("tag-latest"), [])

    def testPushLatestElidedWhenLatestMissing(self):
        graph = self.graph(latest_version="18-3.6")
        self.assertNotIn("push-latest", graph.resolve("push"))

    def testEmptyTargetSet(self):
        graph = self.graph("10-2.5", "alpine")
        self.assertEqual(graph.resolve("build"), [])
        self.assertEqual(graph.resolve("push"), [])

    def testUnknownGoal(self):
        with self.assertRaises(KeyError):
            self.graph().resolve("build-9.6-2.5")

    def testUndefinedDependency(self):
        graph = DependencyGraph()
        graph.add(Operation("test-x", "test", [], ("build-x",)))
        with self.assertRaises(ValueError):
            graph.validate()

    def testCycle(self):
        graph = DependencyGraph()
        graph.add(Operation("a", "build", [], ("b",)))
        graph.add(Operation("b", "build", [], ("a",)))
        with self.assertRaises(ValueError):
            graph.validate()

    def testDuplicate(self):
        graph = DependencyGraph()
        graph.add(Operation("a", "build", []))
        with self.assertRaises(ValueError):
            graph.add(Operation("a", "build", []))

    def testDependents(self):
        graph = self.graph("16-3.5", "default")
        self.assertEqual(graph.dependents("build-16-3.5"), ["test-16-3.5"])
        self.assertEqual(graph.dependencies("push-16-3.5"), ["test-16-3.5"])


if __name__ == "__main__":
    unittest.main()
