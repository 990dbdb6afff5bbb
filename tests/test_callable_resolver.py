import operator
import unittest

from subscribe_for_data.extensions.callable_resolver import coerce_callable, resolve_callable


class TestCallableResolver(unittest.TestCase):
    def test_resolve_callable(self):
        fn = resolve_callable("operator:getitem", min_params=2)
        self.assertIs(fn, operator.getitem)

    def test_reject_path_without_colon(self):
        with self.assertRaises(ValueError):
            resolve_callable("operator.getitem")

    def test_reject_empty_parts(self):
        for path in (":getitem", "operator:"):
            with self.subTest(path=path):
                with self.assertRaises(ValueError):
                    resolve_callable(path)

    def test_reject_unknown_module(self):
        with self.assertRaises(ValueError):
            resolve_callable("no_such_module_for_sfd:fn")

    def test_reject_missing_attribute(self):
        with self.assertRaises(ValueError):
            resolve_callable("operator:no_such_function")

    def test_reject_non_callable(self):
        with self.assertRaises(ValueError):
            resolve_callable("math:pi")

    def test_reject_callable_with_too_few_params(self):
        with self.assertRaises(ValueError):
            resolve_callable("builtins:len", min_params=2)

    def test_var_positional_accepts_any_arity(self):
        fn = resolve_callable("builtins:print", min_params=2)
        self.assertIs(fn, print)

    def test_coerce_callable(self):
        self.assertIsNone(coerce_callable(None))
        self.assertIs(coerce_callable(len), len)
        self.assertIs(coerce_callable("builtins:len"), len)
        with self.assertRaises(ValueError):
            coerce_callable(3.5)

    def test_coerce_callable_checks_arity(self):
        def one(a):
            return a

        self.assertIs(coerce_callable(one, min_params=1), one)
        with self.assertRaises(ValueError):
            coerce_callable(one, min_params=2)
        self.assertIs(coerce_callable(print, min_params=3), print)


if __name__ == "__main__":
    unittest.main()
