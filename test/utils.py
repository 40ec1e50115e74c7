"""
Tests for the utils module (Unset sentinel and helpers).

This module verifies semantic guarantees of the `UnsetType` sentinel:
- Singleton identity (single instance per interpreter process).
- Falsy semantics and representation behavior.
- Copying, deep copying, pickling, and thread safety properties.
- Finality (type cannot be subclassed).

and the behavior of coalesce(), rename(), mirror() and ordinal().
"""
import copy
import pickle
import unittest
from collections import Counter
from threading import Thread, Lock
from unittest import TestCase

from argsieve.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def setUp(self) -> None:
        self.unset: UnsetType = UnsetType()

    def testSingleton(self) -> None:
        """
        The constructor returns the same object reference on every call.
        """
        self.assertIs(self.unset, UnsetType())
        self.assertIs(Unset, self.unset)

    def testHashAndSetUniqueness(self) -> None:
        set = {self.unset, UnsetType()}
        self.assertEqual(len(set), 1)

    def testRepr(self) -> None:
        self.assertEqual(repr(self.unset), "Unset")

    def testFalsely(self) -> None:
        self.assertFalse(bool(self.unset))

    def testNotEqualToNoneOrFalse(self) -> None:
        """
        Falsy does not imply equality with other falsy values (None/False/"").
        """
        self.assertNotEqual(self.unset, None)
        self.assertNotEqual(self.unset, False)  # noqa: E712
        self.assertNotEqual(self.unset, "")

    def testUnionAnnotations(self) -> None:
        union = str | Unset
        self.assertIsInstance("text", union)
        self.assertIsInstance(Unset, union)
        self.assertNotIsInstance(3, union)

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(self.unset), self.unset)
        self.assertIs(copy.deepcopy(self.unset), self.unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(self.unset)), self.unset)

    def testThreadSafetySingleton(self) -> None:
        """
        Concurrent constructions return the same instance.
        """
        results: list[UnsetType] = []
        lock: Lock = Lock()

        def worker():
            instance = UnsetType()
            with lock:
                results.append(instance)

        threads: list[Thread] = [Thread(target=worker) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(results), 16)
        for instance in results:
            self.assertIs(instance, self.unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    """Behavioral tests for coalesce, rename, mirror and ordinal."""

    def testCoalesceReplacesOnlyUnset(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "x"), "")

    def testRenameFunctionForm(self):
        def work():
            pass

        self.assertIs(rename(work, "do_work"), work)
        self.assertEqual(work.__name__, "do_work")
        self.assertEqual(work.__qualname__, "do_work")

    def testRenameDecoratorForm(self):
        @rename("do_work")
        def work():
            pass

        self.assertEqual(work.__name__, "do_work")

    def testRenameRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            rename(3, "name")
        with self.assertRaises(TypeError):
            rename(lambda: None, 3)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorReturnsDefensiveCopies(self):
        class Holder:
            items = mirror("items")
            counts = mirror("counts")
            table = mirror("table")

            def __init__(self):
                self._items = ["a", "b"]
                self._counts = Counter("aab")
                self._table = {"k": ["v"]}

        holder = Holder()
        holder.items.append("c")
        holder.counts["z"] += 1
        holder.table["k"].append("w")

        self.assertEqual(holder.items, ["a", "b"])
        self.assertEqual(holder.counts, Counter({"a": 2, "b": 1}))
        self.assertIsInstance(holder.counts, Counter)
        self.assertEqual(holder.table, {"k": ["v"]})

    def testMirrorIsReadOnly(self):
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = []

        with self.assertRaises(AttributeError):
            Holder().items = ["x"]

    def testMirrorRejectsNonString(self):
        with self.assertRaises(TypeError):
            mirror(1)

    def testOrdinalWords(self):
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(3), "third")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self):
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(12), "12th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(111), "111th")
        self.assertEqual(ordinal(104), "104th")


if __name__ == '__main__':
    unittest.main()
