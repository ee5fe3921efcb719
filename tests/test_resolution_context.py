"""
Resolution Context Tests

Tests for the loading stack used in circular dependency detection
"""

import unittest

from taginjection.exceptions import CircularDependencyError
from taginjection.resolution_context import ResolutionContext


class TestResolutionContext(unittest.TestCase):
    """Tests for ResolutionContext"""

    def test_push_and_pop(self):
        """Keys are pushed and popped in stack order"""
        ctx = ResolutionContext()
        ctx.push("a")
        ctx.push("b")

        self.assertEqual(len(ctx), 2)
        self.assertIn("a", ctx)
        self.assertEqual(ctx.pop(), "b")
        self.assertEqual(ctx.pop(), "a")
        self.assertEqual(len(ctx), 0)

    def test_reentry_raises(self):
        """Pushing a key already on the stack raises"""
        ctx = ResolutionContext()
        for key in ("s1", "s2", "s3"):
            ctx.push(key)

        with self.assertRaises(CircularDependencyError) as cm:
            ctx.push("s2")

        self.assertEqual(cm.exception.origin, "s1")
        self.assertEqual(cm.exception.key, "s3")
        self.assertEqual(
            str(cm.exception),
            "circular reference found while building service 's1' at service 's3'",
        )
        # the failed push leaves the stack untouched
        self.assertEqual(ctx.loading, ["s1", "s2", "s3"])

    def test_key_can_be_pushed_again_after_pop(self):
        """Sequential uses of a key are not cycles"""
        ctx = ResolutionContext()
        ctx.push("a")
        ctx.pop()
        ctx.push("a")

        self.assertEqual(ctx.loading, ["a"])

    def test_repr(self):
        """repr shows the chain"""
        ctx = ResolutionContext()
        ctx.push("a")
        ctx.push("b")

        self.assertEqual(repr(ctx), "ResolutionContext(a -> b)")


if __name__ == '__main__':
    unittest.main()
