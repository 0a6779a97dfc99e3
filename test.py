#!/usr/bin/python
import unittest
import copy
import logging
import sys
import os
import types

from mockwrapper import (
    Wrapper, Verify, WrapperTestCase, Engine, RuleStore, ReturnRule,
    CallRecorder, CallRecord, ArgumentMatcher, VerificationError,
    InvalidRuleDefinition, Undefined, ValueReturner, SequenceReturner,
    FunctionRunner, ExceptionRaiser, make_result, match_deeply,
    match_sequence, match_params, format_arguments, check_pattern,
    Interceptor, Proxy, ProxyInterceptor, ClassPatcher, ModulePatcher,
    PatchedMethod, get_wrapper, register_wrapper, unregister_wrapper,
    import_target, ANY, VARIOUS, SAME, CONTAINS, MOCK, STUB, WRAP, CLONE)


class Calculator(object):

    def __init__(self):
        self.offset = 10

    def add(self, a, b):
        return a + b

    def qux(self, value):
        return value + self.offset


def make_greeter_class():
    class Greeter(object):

        greeting = "Hello"

        def __init__(self, name="world"):
            self.name = name

        def greet(self, other=None):
            return "%s, %s" % (self.greeting, other or self.name)

        def shout(self):
            return self.greet().upper()

        @staticmethod
        def punctuation():
            return "!"

        @classmethod
        def create(cls, name):
            return cls(name)

    return Greeter


class StubInterceptor(object):

    def __init__(self):
        self.calls = []

    def call_original(self, name, args, kwargs, instance=None, owner=None):
        self.calls.append((name, args, kwargs, instance, owner))
        return "original"


class IntegrationTest(unittest.TestCase):

    def test_default_and_conditional_precedence(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("foo", returns="bar")
        wrapper.add_mock("foo", with_args=["baz"], returns="bat")
        wrapper.add_mock("foo", with_args=["bam"], returns="ouch")
        obj = wrapper.get_object()
        self.assertEqual(obj.foo("baz"), "bat")
        self.assertEqual(obj.foo("flee"), "bar")
        self.assertEqual(obj.foo(), "bar")
        self.assertEqual(obj.foo("bam"), "ouch")

    def test_wrap_passes_unmocked_calls_through(self):
        wrapper = Wrapper(Calculator())
        self.assertEqual(wrapper.get_object().qux(1), 11)

    def test_stub_returns_none_for_unmocked_calls(self):
        wrapper = Wrapper(Calculator(), mode="stub")
        obj = wrapper.get_object()
        self.assertEqual(obj.qux(1), None)
        self.assertEqual(obj.unknown(1, 2), None)
        self.assertEqual(obj.offset, 10)

    def test_mock_returns_none_for_known_methods_only(self):
        wrapper = Wrapper(Calculator(), mode="mock")
        obj = wrapper.get_object()
        self.assertEqual(obj.qux(1), None)
        self.assertEqual(obj.add(1, 2), None)
        self.assertRaises(AttributeError, getattr, obj, "unknown")

    def test_sequence_return(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("names", returns=["Dave", "Fred", "Harry"])
        first, second, third = wrapper.get_object().names()
        self.assertEqual((first, second, third), ("Dave", "Fred", "Harry"))

    def test_container_return(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("names", returns=[["Dave", "Fred", "Harry"]])
        self.assertEqual(wrapper.get_object().names(),
                         ["Dave", "Fred", "Harry"])

    def test_verify(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("add", returns=3)
        obj = wrapper.get_object()
        obj.add(1, 2)
        obj.add(1, 2)
        obj.add(2, 2)
        wrapper.verify("add").exactly(3)
        wrapper.verify("add").with_args([1, 2]).at_least(2).at_most(2)
        wrapper.verify("add").with_args([2, ANY]).once()
        wrapper.verify("add").with_args([3, 3]).never()
        self.assertRaises(VerificationError,
                          wrapper.verify("add").with_args([1, 2]).once)

    def test_verify_message(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("foo", returns="bar")
        try:
            wrapper.verify("foo").with_args(["baz"]).once()
        except VerificationError as e:
            self.assertEqual(str(e), "[MockWrapper] foo('baz'): "
                                     "Expected 1 time(s), seen 0 time(s).")
            self.assertEqual(e.method, "foo")
            self.assertEqual(str(e.matcher), "('baz')")
            self.assertEqual(e.constraint, "1 time(s)")
            self.assertEqual(e.actual, 0)
        else:
            self.fail("VerificationError not raised")

    def test_verification_error_is_assertion_error(self):
        wrapper = Wrapper(Calculator())
        self.assertRaises(AssertionError, wrapper.verify("foo").once)

    def test_wrap_records_only_mocked_methods(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("add", with_args=[1, 1], returns=0)
        obj = wrapper.get_object()
        self.assertEqual(obj.add(1, 1), 0)
        self.assertEqual(obj.add(2, 2), 4)
        self.assertEqual(obj.qux(1), 11)
        self.assertEqual([call.args for call in wrapper.get_calls_to("add")],
                         [(1, 1), (2, 2)])
        self.assertEqual(wrapper.get_calls_to("qux"), [])

    def test_mock_doesnt_record_methods_without_rules(self):
        wrapper = Wrapper(Calculator(), mode="mock")
        wrapper.get_object().qux(1)
        self.assertEqual(wrapper.get_calls_to("qux"), [])

    def test_record_all(self):
        wrapper = Wrapper(Calculator(), record_all=True)
        obj = wrapper.get_object()
        self.assertEqual(obj.qux(1), 11)
        self.assertEqual(obj.add(1, b=2), 3)
        self.assertEqual([str(call) for call in wrapper.get_all_calls()],
                         ["qux(1)", "add(1, b=2)"])
        self.assertEqual(obj.offset, 10)

    def test_record_copy(self):
        wrapper = Wrapper(Calculator(), mode="stub", record_all=True)
        items = [1]
        wrapper.get_object().push(items)
        items.append(2)
        (call,) = wrapper.get_calls_to("push")
        self.assertEqual(call.args, ([1, 2],))
        self.assertTrue(call.args[0] is items)

    def test_record_clone(self):
        wrapper = Wrapper(Calculator(), mode="stub", record_all=True,
                          record_method=CLONE)
        items = [1]
        wrapper.get_object().push(items)
        items.append(2)
        (call,) = wrapper.get_calls_to("push")
        self.assertEqual(call.args, ([1],))
        self.assertFalse(call.args[0] is items)

    def test_resets(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("add", returns=0)
        wrapper.add_mock("qux", returns=0)
        obj = wrapper.get_object()
        obj.add(1, 1)
        obj.qux(1)

        wrapper.reset_calls("add")
        self.assertEqual(wrapper.get_calls_to("add"), [])
        self.assertEqual(len(wrapper.get_calls_to("qux")), 1)
        self.assertTrue(wrapper.is_mocked("add", [1, 1]))

        wrapper.reset_mocks("qux")
        self.assertFalse(wrapper.is_mocked("qux", [1]))
        self.assertTrue(wrapper.is_mocked("add", [1, 1]))
        self.assertEqual(len(wrapper.get_calls_to("qux")), 1)
        self.assertEqual(obj.qux(1), 11)

        wrapper.reset_all()
        self.assertFalse(wrapper.is_mocked("add", [1, 1]))
        self.assertEqual(wrapper.get_all_calls(), [])

    def test_is_mocked_doesnt_record(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("add", with_args=[1, 1], returns=0)
        self.assertTrue(wrapper.is_mocked("add", [1, 1]))
        self.assertTrue(wrapper.is_mocked("add", [1, 1]))
        self.assertFalse(wrapper.is_mocked("add", [1, 2]))
        self.assertFalse(wrapper.is_mocked("qux"))
        self.assertEqual(wrapper.get_calls_to("add"), [])

    def test_calls_and_raises(self):
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("add", calls=lambda a, b: a * b)
        wrapper.add_mock("qux", raises=ValueError("boom"))
        obj = wrapper.get_object()
        self.assertEqual(obj.add(3, 4), 12)
        self.assertRaises(ValueError, obj.qux, 1)
        wrapper.verify("qux").once()

    def test_keyword_arguments(self):
        wrapper = Wrapper(Calculator(), mode="mock")
        wrapper.add_mock("add", with_args=[1], with_kwargs={"b": 2},
                         returns="keyword")
        wrapper.add_mock("add", with_kwargs=ANY, returns="any")
        obj = wrapper.get_object()
        self.assertEqual(obj.add(1, b=2), "keyword")
        self.assertEqual(obj.add(b=3), "any")
        self.assertEqual(obj.add(1, 2), None)

    def test_cyclic_arguments(self):
        cycle = []
        cycle.append(cycle)
        wrapper = Wrapper(Calculator())
        wrapper.add_mock("add", with_args=[cycle], returns="cycle")
        self.assertEqual(wrapper.get_object().add(cycle), "cycle")
        other = []
        other.append(other)
        self.assertFalse(wrapper.is_mocked("add", [other]))

    def test_class_level(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter)
        self.addCleanup(wrapper.restore)
        wrapper.add_mock("greet", returns="Hi")
        first = Greeter("first")
        second = Greeter("second")
        self.assertEqual(first.greet(), "Hi")
        self.assertEqual(second.greet(), "Hi")
        self.assertEqual(first.shout(), "HI")
        calls = wrapper.get_calls_to("greet")
        self.assertEqual(len(calls), 3)
        self.assertTrue(calls[0].instance is first)
        self.assertTrue(calls[1].instance is second)
        self.assertTrue(calls[2].instance is first)
        self.assertTrue(wrapper.get_object() is Greeter)

        wrapper.restore()
        self.assertEqual(first.greet(), "Hello, first")
        self.assertEqual(first.shout(), "HELLO, FIRST")
        self.assertEqual(get_wrapper(Greeter), None)

    def test_class_level_passthrough(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter)
        self.addCleanup(wrapper.restore)
        wrapper.add_mock("greet", with_args=["bob"], returns="Yo")
        greeter = Greeter()
        self.assertEqual(greeter.greet("bob"), "Yo")
        self.assertEqual(greeter.greet("al"), "Hello, al")
        wrapper.verify("greet").exactly(2)
        wrapper.verify("greet").with_args(["bob"]).once()

    def test_class_level_subclass(self):
        Greeter = make_greeter_class()
        class Polite(Greeter):
            def shout(self):
                return "please"
        wrapper = Wrapper(Greeter, mode="mock")
        self.addCleanup(wrapper.restore)
        wrapper.add_mock("greet", returns="Hi")
        polite = Polite()
        self.assertEqual(polite.greet(), "Hi")
        self.assertEqual(polite.shout(), "please")

    def test_class_level_mock_mode(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter, mode="mock")
        self.addCleanup(wrapper.restore)
        self.assertEqual(Greeter.punctuation(), None)
        self.assertEqual(Greeter("x").greet(), None)
        self.assertEqual(Greeter.create("x"), None)
        self.assertRaises(AttributeError, getattr, Greeter(), "unknown")
        wrapper.restore()
        self.assertEqual(Greeter.punctuation(), "!")
        self.assertEqual(Greeter.create("x").name, "x")

    def test_class_level_stub_mode(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter, mode="stub")
        self.addCleanup(wrapper.restore)
        self.assertEqual(Greeter().unknown(1), None)
        self.assertEqual(Greeter().greet(), None)
        wrapper.restore()
        self.assertRaises(AttributeError, getattr, Greeter(), "unknown")
        self.assertFalse("__getattr__" in Greeter.__dict__)

    def test_class_level_record_all(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter, record_all=True)
        self.addCleanup(wrapper.restore)
        greeter = Greeter.create("z")
        self.assertEqual(greeter.name, "z")
        self.assertEqual(Greeter.punctuation(), "!")
        self.assertEqual(greeter.greet(), "Hello, z")
        self.assertEqual([str(call) for call in wrapper.get_all_calls()],
                         ["create('z')", "punctuation()", "greet()"])

    def test_class_level_classmethod_on_subclass(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter, record_all=True)
        self.addCleanup(wrapper.restore)
        class Polite(Greeter):
            pass
        polite = Polite.create("z")
        self.assertTrue(type(polite) is Polite)
        self.assertEqual(polite.name, "z")
        self.assertTrue(type(polite.create("y")) is Polite)
        self.assertTrue(type(Greeter.create("x")) is Greeter)
        wrapper.verify("create").exactly(3)

    def test_stub_proxy_writes_reach_target(self):
        calculator = Calculator()
        wrapper = Wrapper(calculator, mode="stub")
        obj = wrapper.get_object()
        obj.offset = 5
        self.assertEqual((obj.offset, calculator.offset), (5, 5))
        del obj.offset
        self.assertFalse(hasattr(calculator, "offset"))

    def test_module_level(self):
        module = types.ModuleType("mockwrapper_sample")
        def greet(name):
            return "Hello, %s" % name
        module.greet = greet
        sys.modules["mockwrapper_sample"] = module
        self.addCleanup(sys.modules.pop, "mockwrapper_sample", None)

        wrapper = Wrapper("mockwrapper_sample")
        self.addCleanup(wrapper.restore)
        wrapper.add_mock("greet", with_args=["bob"], returns="Yo")
        self.assertTrue(wrapper.get_object() is module)
        self.assertEqual(module.greet("bob"), "Yo")
        self.assertEqual(module.greet("al"), "Hello, al")
        wrapper.verify("greet").at_least(2)
        wrapper.restore()
        self.assertTrue(module.greet is greet)

    def test_module_level_stub_mode(self):
        module = types.ModuleType("mockwrapper_sample")
        module.greet = lambda name: "Hello, %s" % name
        wrapper = Wrapper(module, mode="stub")
        self.addCleanup(wrapper.restore)
        self.assertEqual(module.greet("al"), None)
        self.assertEqual(module.unknown(), None)
        wrapper.restore()
        self.assertEqual(module.greet("al"), "Hello, al")
        self.assertRaises(AttributeError, getattr, module, "unknown")
        self.assertFalse("__getattr__" in vars(module))

    def test_context_manager(self):
        Greeter = make_greeter_class()
        with Wrapper(Greeter, mode="stub") as wrapper:
            self.assertEqual(Greeter().greet(), None)
        self.assertEqual(Greeter().greet(), "Hello, world")
        self.assertEqual(get_wrapper(Greeter), None)
        wrapper.verify("greet").never()

    def test_context_manager_doesnt_swallow(self):
        Greeter = make_greeter_class()
        def run():
            with Wrapper(Greeter, mode="stub"):
                raise ValueError()
        self.assertRaises(ValueError, run)
        self.assertEqual(Greeter().greet(), "Hello, world")

    def test_wrapping_twice(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter)
        self.addCleanup(wrapper.restore)
        self.assertRaises(RuntimeError, Wrapper, Greeter)
        wrapper.restore()
        other = Wrapper(Greeter)
        self.addCleanup(other.restore)
        self.assertTrue(get_wrapper(Greeter) is other)

    def test_instances_may_be_wrapped_twice(self):
        calculator = Calculator()
        first = Wrapper(calculator, mode="stub")
        second = Wrapper(calculator, mode="mock")
        self.assertEqual(first.get_object().unknown(), None)
        self.assertRaises(AttributeError,
                          getattr, second.get_object(), "unknown")

    def test_bad_options(self):
        self.assertRaises(ValueError, Wrapper, Calculator(), mode="fake")
        self.assertRaises(ValueError, Wrapper, Calculator(),
                          record_method="shallow")

    def test_bad_rules(self):
        wrapper = Wrapper(Calculator())
        self.assertRaises(InvalidRuleDefinition,
                          wrapper.add_mock, "add", with_args="1")
        self.assertRaises(InvalidRuleDefinition,
                          wrapper.add_mock, "add", with_kwargs=["b"])
        self.assertRaises(InvalidRuleDefinition,
                          wrapper.add_mock, "add", with_args=[{"a": VARIOUS}])
        self.assertRaises(InvalidRuleDefinition,
                          wrapper.add_mock, "add", returns=1, raises=KeyError)
        self.assertRaises(InvalidRuleDefinition,
                          wrapper.add_mock, "add", calls=1)
        self.assertRaises(InvalidRuleDefinition, wrapper.add_mock, "")
        self.assertFalse(wrapper.is_mocked("add", [1, 2]))

    def test_invalid_rule_is_value_error(self):
        self.assertTrue(issubclass(InvalidRuleDefinition, ValueError))

    def test_add_mock_chaining(self):
        wrapper = Wrapper(Calculator())
        self.assertTrue(wrapper.add_mock("add", returns=1) is wrapper)

    def test_restore_is_idempotent(self):
        Greeter = make_greeter_class()
        wrapper = Wrapper(Greeter, mode="mock")
        wrapper.restore()
        wrapper.restore()
        self.assertEqual(Greeter().greet(), "Hello, world")

    def test_logging(self):
        with self.assertLogs("mockwrapper", level=logging.DEBUG) as logs:
            wrapper = Wrapper(Calculator(), mode="stub")
            wrapper.add_mock("add", with_args=[1, 2], returns=3)
            wrapper.get_object().qux(1)
        output = os.linesep.join(logs.output)
        self.assertIn("Added rule for add(1, 2)", output)
        self.assertIn("No rule for qux(1), returning None", output)


class MatchDeeplyTest(unittest.TestCase):

    def test_scalars(self):
        self.assertTrue(match_deeply(1, 1))
        self.assertTrue(match_deeply("a", "a"))
        self.assertFalse(match_deeply(1, 2))
        self.assertTrue(match_deeply(None, None))
        self.assertFalse(match_deeply(None, 0))

    def test_sequences(self):
        self.assertTrue(match_deeply([1, [2, 3]], [1, [2, 3]]))
        self.assertTrue(match_deeply((1, 2), (1, 2)))
        self.assertFalse(match_deeply([1, 2], [1, 2, 3]))
        self.assertFalse(match_deeply([1, [2, 3]], [1, [2, 4]]))
        self.assertFalse(match_deeply([1], (1,)))
        self.assertFalse(match_deeply([1], 1))

    def test_mappings(self):
        self.assertTrue(match_deeply({"a": [1, {"b": 2}]},
                                     {"a": [1, {"b": 2}]}))
        self.assertFalse(match_deeply({"a": 1}, {"a": 1, "b": 2}))
        self.assertFalse(match_deeply({"a": 1}, {"a": 2}))
        self.assertFalse(match_deeply({"a": 1}, [("a", 1)]))

    def test_any(self):
        self.assertTrue(match_deeply(ANY, 1))
        self.assertTrue(match_deeply(ANY, None))
        self.assertTrue(match_deeply([1, ANY], [1, [2, 3]]))
        self.assertTrue(match_deeply({"a": ANY}, {"a": None}))
        self.assertFalse(match_deeply({"a": ANY}, {}))
        self.assertFalse(match_deeply([1, ANY], [1]))

    def test_nested_various(self):
        self.assertTrue(match_deeply([1, [VARIOUS, 4]], [1, [2, 3, 4]]))
        self.assertFalse(match_deeply([1, [VARIOUS, 4]], [1, [2, 3]]))

    def test_same(self):
        obj = []
        self.assertTrue(match_deeply(SAME(obj), obj))
        self.assertFalse(match_deeply(SAME(obj), []))

    def test_contains(self):
        self.assertTrue(match_deeply(CONTAINS(1), [1, 2]))
        self.assertTrue(match_deeply(CONTAINS("a"), {"a": 1}))
        self.assertFalse(match_deeply(CONTAINS(3), [1, 2]))
        self.assertFalse(match_deeply(CONTAINS(1), 1))

    def test_contains_needs_container_or_iterable(self):
        class Bag(object):
            def __iter__(self):
                return iter([1, 2])
        self.assertTrue(match_deeply(CONTAINS(2), Bag()))
        self.assertFalse(match_deeply(CONTAINS(3), Bag()))
        self.assertFalse(match_deeply(CONTAINS(1), object()))
        self.assertFalse(match_deeply(CONTAINS(None), None))

    def test_cycles(self):
        first = []
        first.append(first)
        second = []
        second.append(second)
        self.assertTrue(match_deeply(first, first))
        self.assertFalse(match_deeply(first, second))

        mapping = {}
        mapping["self"] = mapping
        self.assertTrue(match_deeply(mapping, mapping))
        self.assertFalse(match_deeply(mapping, {"self": {}}))

    def test_shared_nodes_arent_cycles(self):
        first = [1]
        second = [1]
        self.assertTrue(match_deeply([first, first], [second, second]))


class MatchParamsTest(unittest.TestCase):

    def true(self, *args):
        self.assertTrue(match_params(*args), repr(args))

    def false(self, *args):
        self.assertFalse(match_params(*args), repr(args))

    def test_any_repr(self):
        self.assertEqual(repr(ANY), "ANY")

    def test_various_repr(self):
        self.assertEqual(repr(VARIOUS), "VARIOUS")

    def test_various_equals(self):
        self.assertEqual(VARIOUS, VARIOUS)
        self.assertNotEqual(VARIOUS, ANY)
        self.assertNotEqual(ANY, VARIOUS)

    def test_same_repr(self):
        self.assertEqual(repr(SAME("obj")), "SAME('obj')")

    def test_same_equals(self):
        l1 = []
        l2 = []
        self.assertEqual(SAME(l1), SAME(l1))
        self.assertNotEqual(SAME(l1), SAME(l2))
        self.assertNotEqual(ANY, SAME(l1))
        self.assertNotEqual(SAME(l1), ANY)

    def test_contains_repr(self):
        self.assertEqual(repr(CONTAINS("obj")), "CONTAINS('obj')")

    def test_contains_equals(self):
        self.assertEqual(CONTAINS([1]), CONTAINS([1]))
        self.assertNotEqual(CONTAINS(1), CONTAINS([1]))
        self.assertNotEqual(ANY, CONTAINS(1))

    def test_normal(self):
        self.true((), {}, (), {})
        self.true((1, 2), {"a": 3}, (1, 2), {"a": 3})
        self.false((1,), {}, (), {})
        self.false((), {}, (1,), {})
        self.false((1, 2), {"a": 3}, (1, 2), {"a": 4})
        self.false((1, 2), {"a": 3}, (1, 3), {"a": 3})

    def test_any(self):
        self.true((1, 2), {"a": ANY}, (1, 2), {"a": 4})
        self.true((1, ANY), {"a": 3}, (1, 3), {"a": 3})
        self.false((ANY,), {}, (), {})

    def test_any_keywords(self):
        self.true((1,), ANY, (1,), {})
        self.true((1,), ANY, (1,), {"a": 1, "b": 2})
        self.false((1,), ANY, (2,), {"a": 1})

    def test_various_alone(self):
        self.true((VARIOUS,), {}, (), {})
        self.true((VARIOUS,), {}, (1, 2), {})
        self.true((VARIOUS,), {"a": 1}, (), {"a": 1})
        self.true((VARIOUS,), {"a": 1}, (1, 2), {"a": 1})
        self.false((VARIOUS,), {"a": 1}, (), {})
        self.false((VARIOUS,), {}, (), {"a": 2})

    def test_various_at_start(self):
        self.true((VARIOUS, 3, 4), {}, (3, 4), {})
        self.true((VARIOUS, 3, 4), {}, (1, 2, 3, 4), {})
        self.true((VARIOUS, 3, 4), {"a": 1}, (3, 4), {"a": 1})
        self.false((VARIOUS, 3, 4), {}, (), {})
        self.false((VARIOUS, 3, 4), {}, (3, 5), {})
        self.false((VARIOUS, 3, 4), {}, (5, 5), {})
        self.false((VARIOUS, 3, 4), {"a": 1}, (3, 4), {})
        self.false((VARIOUS, 3, 4), {"a": 1}, (3, 4), {"b": 2})

    def test_various_at_end(self):
        self.true((1, 2, VARIOUS), {}, (1, 2), {})
        self.true((1, 2, VARIOUS), {}, (1, 2, 3, 4), {})
        self.true((1, 2, VARIOUS), {"a": 1}, (1, 2), {"a": 1})
        self.false((1, 2, VARIOUS), {}, (), {})
        self.false((1, 2, VARIOUS), {}, (1, 3), {})
        self.false((1, 2, VARIOUS), {}, (3, 3), {})
        self.false((1, 2, VARIOUS), {"a": 1}, (1, 2), {})

    def test_various_at_middle(self):
        self.true((1, VARIOUS, 4), {}, (1, 4), {})
        self.true((1, VARIOUS, 4), {}, (1, 2, 3, 4), {})
        self.true((1, VARIOUS, 4), {"a": 1}, (1, 4), {"a": 1})
        self.false((1, VARIOUS, 4), {}, (), {})
        self.false((1, VARIOUS, 4), {}, (1, 5), {})
        self.false((1, VARIOUS, 4), {}, (5, 5), {})
        self.false((1, VARIOUS, 4), {"a": 1}, (1, 4), {})

    def test_various_multiple(self):
        self.true((VARIOUS, 3, VARIOUS, 6, VARIOUS), {},
                  (1, 2, 3, 4, 5, 6), {})
        self.true((VARIOUS, VARIOUS, VARIOUS), {}, (1, 2, 3, 4, 5, 6), {})
        self.true((VARIOUS, VARIOUS, VARIOUS), {},  (), {})
        self.true((VARIOUS, VARIOUS, 3), {}, (3,), {})
        self.false((VARIOUS, 3, VARIOUS, 6, VARIOUS), {},
                   (1, 2, 3, 4, 5), {})
        self.false((VARIOUS, 3, VARIOUS, 6, VARIOUS), {},
                   (1, 2, 4, 5, 6), {})

    def test_sequence_ignores_sequence_type(self):
        self.assertTrue(match_sequence([1, 2], (1, 2)))


class ArgumentMatcherTest(unittest.TestCase):

    def test_matches(self):
        matcher = ArgumentMatcher(["baz"])
        self.assertTrue(matcher.matches(("baz",)))
        self.assertTrue(matcher.matches(["baz"], {}))
        self.assertFalse(matcher.matches(("bam",)))
        self.assertFalse(matcher.matches(("baz",), {"a": 1}))

    def test_keywords(self):
        matcher = ArgumentMatcher(["a"], {"b": 1})
        self.assertTrue(matcher.matches(("a",), {"b": 1}))
        self.assertFalse(matcher.matches(("a",), {"b": 2}))
        self.assertFalse(matcher.matches(("a",), {}))

    def test_str(self):
        self.assertEqual(str(ArgumentMatcher([1, "z"], {"a": 2})),
                         "(1, 'z', a=2)")
        self.assertEqual(str(ArgumentMatcher([1], ANY)), "(1, **ANY)")
        self.assertEqual(str(ArgumentMatcher()), "()")

    def test_repr(self):
        self.assertEqual(repr(ArgumentMatcher([1])),
                         "ArgumentMatcher((1,), {})")

    def test_invalid(self):
        self.assertRaises(InvalidRuleDefinition, ArgumentMatcher, "abc")
        self.assertRaises(InvalidRuleDefinition, ArgumentMatcher, VARIOUS)
        self.assertRaises(InvalidRuleDefinition, ArgumentMatcher, [], [1])
        self.assertRaises(InvalidRuleDefinition,
                          ArgumentMatcher, [], {"a": VARIOUS})
        self.assertRaises(InvalidRuleDefinition,
                          ArgumentMatcher, [[{"a": VARIOUS}]])

    def test_check_pattern(self):
        check_pattern([VARIOUS, (1, VARIOUS), {"a": [VARIOUS]}])
        cycle = []
        cycle.append(cycle)
        check_pattern(cycle)
        self.assertRaises(InvalidRuleDefinition, check_pattern, {"a": VARIOUS})

    def test_format_arguments(self):
        self.assertEqual(format_arguments((1, "a"), {"z": 1, "b": 2}),
                         "(1, 'a', b=2, z=1)")


class CallRecorderTest(unittest.TestCase):

    def setUp(self):
        self.recorder = CallRecorder()

    def test_record(self):
        record = self.recorder.record("foo", [1], {"a": 2})
        self.assertEqual(type(record), CallRecord)
        self.assertEqual(record.method, "foo")
        self.assertEqual(record.args, (1,))
        self.assertEqual(record.kwargs, {"a": 2})
        self.assertEqual(record.instance, None)

    def test_calls_to_keeps_order(self):
        for i in range(5):
            self.recorder.record("foo", (i,))
        self.recorder.record("bar", ())
        self.assertEqual([call.args for call in self.recorder.calls_to("foo")],
                         [(0,), (1,), (2,), (3,), (4,)])

    def test_calls_to_unknown(self):
        self.assertEqual(self.recorder.calls_to("foo"), [])

    def test_calls_to_returns_copy(self):
        self.recorder.record("foo", ())
        self.recorder.calls_to("foo").pop()
        self.assertEqual(len(self.recorder.calls_to("foo")), 1)

    def test_all_calls(self):
        self.recorder.record("foo", (1,))
        self.recorder.record("bar", (2,))
        self.recorder.record("foo", (3,))
        calls = self.recorder.all_calls()
        self.assertEqual([call.method for call in calls],
                         ["foo", "bar", "foo"])
        self.assertEqual([call.index for call in calls], [0, 1, 2])

    def test_clear_method(self):
        self.recorder.record("foo", ())
        self.recorder.record("bar", ())
        self.recorder.clear("foo")
        self.assertEqual(self.recorder.calls_to("foo"), [])
        self.assertEqual(len(self.recorder.calls_to("bar")), 1)
        self.assertEqual(self.recorder.methods(), ["bar"])

    def test_clear_all(self):
        self.recorder.record("foo", ())
        self.recorder.record("bar", ())
        self.recorder.clear()
        self.assertEqual(self.recorder.all_calls(), [])

    def test_index_keeps_growing_after_clear(self):
        self.recorder.record("foo", ())
        self.recorder.clear()
        self.assertEqual(self.recorder.record("foo", ()).index, 1)

    def test_str_and_repr(self):
        record = self.recorder.record("foo", (1,), {"a": 2})
        self.assertEqual(str(record), "foo(1, a=2)")
        self.assertEqual(repr(record), "CallRecord('foo', (1,), {'a': 2}, 0)")


class ResultTest(unittest.TestCase):

    def test_value(self):
        self.assertEqual(ValueReturner(3).run((), {}), 3)

    def test_sequence(self):
        self.assertEqual(SequenceReturner([1, 2]).run((), {}), (1, 2))
        self.assertEqual(SequenceReturner([[1, 2]]).run((), {}), [1, 2])
        self.assertEqual(SequenceReturner([]).run((), {}), None)

    def test_function(self):
        runner = FunctionRunner(lambda *args, **kwargs: (args, kwargs))
        self.assertEqual(runner.run((1,), {"a": 2}), ((1,), {"a": 2}))

    def test_exception(self):
        self.assertRaises(KeyError, ExceptionRaiser(KeyError).run, (), {})

    def test_make_result(self):
        self.assertEqual(type(make_result()), ValueReturner)
        self.assertEqual(make_result().run((), {}), None)
        self.assertEqual(type(make_result(returns=(1, 2))), ValueReturner)
        self.assertEqual(type(make_result(returns=[1, 2])), SequenceReturner)
        self.assertEqual(type(make_result(calls=len)), FunctionRunner)
        self.assertEqual(type(make_result(raises=KeyError)), ExceptionRaiser)
        self.assertRaises(InvalidRuleDefinition,
                          make_result, calls=len, raises=KeyError)

    def test_undefined_survives_copies(self):
        self.assertEqual(repr(Undefined), "Undefined")
        self.assertTrue(copy.copy(Undefined) is Undefined)
        self.assertTrue(copy.deepcopy([Undefined])[0] is Undefined)


class RuleStoreTest(unittest.TestCase):

    def setUp(self):
        self.store = RuleStore()

    def add(self, method, args, value):
        matcher = None
        if args is not None:
            matcher = ArgumentMatcher(args)
        return self.store.add_rule(method, matcher, ValueReturner(value))

    def test_add_rule(self):
        rule = self.add("foo", ["a"], 1)
        self.assertEqual(type(rule), ReturnRule)
        self.assertEqual(rule.method, "foo")
        self.assertFalse(rule.is_default())
        self.assertTrue(self.add("foo", None, 2).is_default())

    def test_precedence(self):
        self.add("foo", None, "bar")
        self.add("foo", ["baz"], "bat")
        self.add("foo", ["bam"], "ouch")
        self.assertEqual(self.store.resolve("foo", ["baz"]), "bat")
        self.assertEqual(self.store.resolve("foo", ["flee"]), "bar")
        self.assertEqual(self.store.resolve("foo", []), "bar")
        self.assertEqual(self.store.resolve("foo", ["bam"]), "ouch")

    def test_first_match_wins(self):
        self.add("foo", [ANY], "any")
        self.add("foo", ["baz"], "baz")
        self.assertEqual(self.store.resolve("foo", ["baz"]), "any")

    def test_later_default_replaces_default(self):
        self.add("foo", None, "first")
        self.add("foo", ["baz"], "bat")
        self.add("foo", None, "second")
        self.assertEqual(self.store.resolve("foo", ["flee"]), "second")
        self.assertEqual(self.store.resolve("foo", ["baz"]), "bat")
        self.assertEqual(len(self.store.get_rules("foo")), 2)

    def test_unresolved(self):
        self.assertTrue(self.store.resolve("foo", []) is Undefined)
        self.add("foo", ["baz"], "bat")
        self.assertTrue(self.store.resolve("foo", ["flee"]) is Undefined)
        self.assertTrue(self.store.find_rule("foo", ["flee"]) is Undefined)

    def test_resolve_none(self):
        self.add("foo", None, None)
        self.assertEqual(self.store.resolve("foo", []), None)

    def test_is_mocked(self):
        self.assertFalse(self.store.is_mocked("foo", []))
        self.add("foo", ["baz"], "bat")
        self.assertTrue(self.store.is_mocked("foo", ["baz"]))
        self.assertFalse(self.store.is_mocked("foo", ["flee"]))
        self.add("foo", None, "bar")
        self.assertTrue(self.store.is_mocked("foo", ["flee"]))

    def test_has_rules_and_methods(self):
        self.add("foo", ["baz"], "bat")
        self.add("bar", None, "bar")
        self.assertTrue(self.store.has_rules("foo"))
        self.assertFalse(self.store.has_rules("baz"))
        self.assertEqual(self.store.methods(), ["bar", "foo"])

    def test_reset_method(self):
        self.add("foo", None, "bar")
        self.add("qux", None, "quux")
        self.store.reset("foo")
        self.assertFalse(self.store.has_rules("foo"))
        self.assertEqual(self.store.resolve("qux"), "quux")

    def test_reset_all(self):
        self.add("foo", None, "bar")
        self.add("qux", ["a"], "quux")
        self.store.reset()
        self.assertEqual(self.store.methods(), [])

    def test_bad_method_name(self):
        self.assertRaises(InvalidRuleDefinition, self.add, "", None, 1)
        self.assertRaises(InvalidRuleDefinition, self.add, None, None, 1)


class EngineTest(unittest.TestCase):

    def make_engine(self, mode=WRAP, **options):
        engine = Engine(mode, **options)
        engine.interceptor = StubInterceptor()
        return engine

    def test_invoke_resolves(self):
        engine = self.make_engine()
        engine.rules.add_rule("foo", None, ValueReturner("bar"))
        self.assertEqual(engine.invoke("foo", [1]), "bar")
        self.assertEqual(engine.interceptor.calls, [])

    def test_invoke_expands_sequences(self):
        engine = self.make_engine()
        engine.rules.add_rule("names", None, make_result(["Dave", "Fred"]))
        self.assertEqual(engine.invoke("names"), ("Dave", "Fred"))

    def test_wrap_fallback(self):
        engine = self.make_engine(WRAP)
        self.assertEqual(engine.invoke("qux", [1], {"a": 2}), "original")
        self.assertEqual(engine.interceptor.calls,
                         [("qux", (1,), {"a": 2}, None, None)])

    def test_wrap_fallback_keeps_owner(self):
        engine = self.make_engine(WRAP)
        instance = Calculator()
        engine.invoke("qux", [1], {}, instance, Calculator)
        self.assertEqual(engine.interceptor.calls,
                         [("qux", (1,), {}, instance, Calculator)])

    def test_stub_and_mock_fallback(self):
        for mode in (STUB, MOCK):
            engine = self.make_engine(mode)
            self.assertEqual(engine.invoke("qux", [1]), None)
            self.assertEqual(engine.interceptor.calls, [])

    def test_wrap_without_interceptor(self):
        engine = Engine()
        self.assertRaises(RuntimeError, engine.invoke, "qux", [1])

    def test_recording_policy(self):
        engine = self.make_engine()
        engine.invoke("qux", [1])
        self.assertEqual(engine.recorder.calls_to("qux"), [])
        engine.rules.add_rule("qux", ArgumentMatcher([2]), ValueReturner(0))
        engine.invoke("qux", [1])
        engine.invoke("qux", [2])
        self.assertEqual([call.args for call in engine.recorder.calls_to("qux")],
                         [(1,), (2,)])

    def test_record_all(self):
        engine = self.make_engine(record_all=True)
        instance = object()
        engine.invoke("qux", [1], instance=instance)
        (call,) = engine.recorder.calls_to("qux")
        self.assertTrue(call.instance is instance)

    def test_snapshot(self):
        items = [1]
        args, kwargs = self.make_engine().snapshot([items], {"a": items})
        self.assertTrue(args[0] is items)
        args, kwargs = self.make_engine(record_method=CLONE).snapshot(
            [items], {"a": items})
        self.assertFalse(args[0] is items)
        self.assertTrue(args[0] is kwargs["a"])

    def test_exceptions_propagate(self):
        engine = self.make_engine()
        engine.rules.add_rule("foo", None, ExceptionRaiser(KeyError("k")))
        self.assertRaises(KeyError, engine.invoke, "foo")
        self.assertEqual(len(engine.recorder.calls_to("foo")), 1)

    def test_reentrant_calls(self):
        engine = self.make_engine()
        engine.rules.add_rule("outer", None,
                              FunctionRunner(lambda: engine.invoke("inner")))
        engine.rules.add_rule("inner", None, ValueReturner("inner"))
        self.assertEqual(engine.invoke("outer"), "inner")
        self.assertEqual([call.method for call in engine.recorder.all_calls()],
                         ["outer", "inner"])

    def test_bad_options(self):
        self.assertRaises(ValueError, Engine, "fake")
        self.assertRaises(ValueError, Engine, WRAP, False, "fake")


class VerifyTest(unittest.TestCase):

    def make_verify(self, *calls):
        recorder = CallRecorder()
        for args in calls:
            recorder.record("foo", args)
        return Verify("foo", recorder.calls_to("foo"))

    def test_count_laws(self):
        for count in range(4):
            verify = self.make_verify(*[(i,) for i in range(count)])
            verify.exactly(count)
            self.assertRaises(VerificationError, verify.exactly, count + 1)
            verify.at_least(count)
            self.assertRaises(VerificationError, verify.at_least, count + 1)
            verify.at_most(count)
            if count >= 1:
                self.assertRaises(VerificationError, verify.at_most, count - 1)
            if count == 1:
                verify.once()
            else:
                self.assertRaises(VerificationError, verify.once)
            if count == 0:
                verify.never()
            else:
                self.assertRaises(VerificationError, verify.never)

    def test_chaining(self):
        verify = self.make_verify((1,), (1,), (2,))
        self.assertTrue(verify.at_least(1) is verify)
        self.assertTrue(verify.with_args([1]) is verify)
        verify.at_least(2).at_most(2).exactly(2)

    def test_with_args(self):
        verify = self.make_verify((1,), (2,), (1,))
        self.assertEqual([call.args for call in verify.with_args([1]).get_calls()],
                         [(1,), (1,)])
        self.assertEqual(verify.count(), 2)

    def test_with_matcher(self):
        verify = self.make_verify((1, 2), (3,))
        verify.with_args(ArgumentMatcher([VARIOUS, 2])).once()

    def test_with_args_only_once(self):
        verify = self.make_verify((1,))
        verify.with_args([1])
        self.assertRaises(RuntimeError, verify.with_args, [2])

    def test_bad_times(self):
        verify = self.make_verify()
        self.assertRaises(ValueError, verify.exactly, -1)
        self.assertRaises(ValueError, verify.at_least, 1.5)

    def test_messages(self):
        verify = self.make_verify((1,))
        for method, args, message in [
            ("exactly", (2,), "[MockWrapper] foo: Expected 2 time(s), "
                              "seen 1 time(s)."),
            ("at_least", (2,), "[MockWrapper] foo: Expected at least 2 "
                               "time(s), seen 1 time(s)."),
            ("at_most", (0,), "[MockWrapper] foo: Expected at most 0 "
                              "time(s), seen 1 time(s)."),
            ("never", (), "[MockWrapper] foo: Expected 0 time(s), "
                          "seen 1 time(s)."),
            ]:
            try:
                getattr(verify, method)(*args)
            except VerificationError as e:
                self.assertEqual(str(e), message)
            else:
                self.fail("%s%r didn't fail" % (method, args))

    def test_reads_only(self):
        recorder = CallRecorder()
        recorder.record("foo", ())
        verify = Verify("foo", recorder.calls_to("foo"))
        verify.with_args([]).once()
        self.assertEqual(len(recorder.calls_to("foo")), 1)


class ProxyTest(unittest.TestCase):

    def setUp(self):
        self.engine = Engine(WRAP)
        self.calculator = Calculator()
        self.interceptor = ProxyInterceptor(self.engine, self.calculator)
        self.engine.interceptor = self.interceptor
        self.proxy = self.interceptor.get_object()

    def test_is_interceptor(self):
        self.assertTrue(isinstance(self.interceptor, Interceptor))
        self.assertFalse(self.interceptor.is_global)

    def test_class(self):
        self.assertTrue(type(self.proxy) is Proxy)
        self.assertTrue(self.proxy.__class__ is Calculator)
        self.assertTrue(isinstance(self.proxy, Calculator))

    def test_attributes_pass_through(self):
        self.assertEqual(self.proxy.offset, 10)
        self.assertEqual(self.proxy.add(1, 2), 3)
        self.assertRaises(AttributeError, getattr, self.proxy, "unknown")

    def test_install(self):
        self.interceptor.install(["add"])
        self.assertTrue(self.interceptor.intercepts("add"))
        self.assertFalse(self.interceptor.intercepts("qux"))
        self.engine.rules.add_rule("add", None, ValueReturner(0))
        self.assertEqual(self.proxy.add(1, 2), 0)
        self.assertEqual(self.proxy.add.__name__, "add")
        self.assertEqual(self.proxy.qux(1), 11)

    def test_install_all(self):
        self.interceptor.install_all()
        self.assertTrue(self.interceptor.intercepts("qux"))
        self.assertEqual(self.proxy.qux(1), 11)
        self.assertEqual(self.proxy.offset, 10)
        self.assertRaises(AttributeError, getattr, self.proxy, "unknown")

    def test_install_all_missing(self):
        self.engine.rules.add_rule("unknown", None, ValueReturner(1))
        self.interceptor.install_all(include_missing=True)
        self.assertEqual(self.proxy.unknown(), 1)

    def test_real_object_is_untouched(self):
        self.interceptor.install(["add"])
        self.engine.rules.add_rule("add", None, ValueReturner(0))
        self.assertEqual(self.calculator.add(1, 2), 3)

    def test_uninstall(self):
        self.interceptor.install_all(include_missing=True)
        self.interceptor.uninstall()
        self.assertFalse(self.interceptor.intercepts("add"))
        self.assertRaises(AttributeError, getattr, self.proxy, "unknown")

    def test_call_original(self):
        self.assertEqual(
            self.interceptor.call_original("add", (1,), {"b": 2}), 3)

    def test_setattr_reaches_target(self):
        self.proxy.offset = 5
        self.assertEqual(self.calculator.offset, 5)
        self.assertEqual(self.proxy.offset, 5)
        self.assertEqual(self.proxy.qux(1), 6)
        self.proxy.extra = "new"
        self.assertEqual(self.calculator.extra, "new")

    def test_delattr_reaches_target(self):
        del self.proxy.offset
        self.assertFalse(hasattr(self.calculator, "offset"))
        self.assertRaises(AttributeError, getattr, self.proxy, "offset")
        self.assertRaises(AttributeError, delattr, self.proxy, "offset")


class ClassPatcherTest(unittest.TestCase):

    def setUp(self):
        self.Greeter = make_greeter_class()
        self.engine = Engine(WRAP)
        self.patcher = ClassPatcher(self.engine, self.Greeter)
        self.engine.interceptor = self.patcher

        class FakeWrapper(object):
            engine = self.engine

        register_wrapper(self.Greeter, FakeWrapper)
        self.addCleanup(unregister_wrapper, self.Greeter)
        self.addCleanup(self.patcher.uninstall)

    def test_is_global(self):
        self.assertTrue(self.patcher.is_global)

    def test_method_names(self):
        self.assertEqual(sorted(self.patcher.method_names()),
                         ["create", "greet", "punctuation", "shout"])

    def test_install(self):
        original = self.Greeter.__dict__["greet"]
        self.patcher.install(["greet"])
        self.assertEqual(type(self.Greeter.__dict__["greet"]), PatchedMethod)
        self.assertTrue(self.patcher.intercepts("greet"))
        self.assertEqual(self.Greeter().greet("al"), "Hello, al")
        self.patcher.uninstall()
        self.assertTrue(self.Greeter.__dict__["greet"] is original)

    def test_install_missing_method(self):
        self.patcher.install(["unknown"])
        self.engine.rules.add_rule("unknown", None, ValueReturner(1))
        self.assertEqual(self.Greeter().unknown(), 1)
        self.patcher.uninstall()
        self.assertFalse(hasattr(self.Greeter, "unknown"))

    def test_call_original_without_method(self):
        self.patcher.install(["unknown"])
        self.assertRaises(AttributeError, self.Greeter().unknown)

    def test_call_original_inherited(self):
        class Loud(self.Greeter):
            pass
        patcher = ClassPatcher(self.engine, Loud)
        self.assertEqual(patcher.get_unpatched_attr("greet"),
                         self.Greeter.__dict__["greet"])
        self.assertEqual(patcher.call_original("greet", (), {}, Loud("l")),
                         "Hello, l")

    def test_call_original_classmethod_owner(self):
        class Loud(self.Greeter):
            pass
        created = self.patcher.call_original("create", ("l",), {}, None, Loud)
        self.assertTrue(type(created) is Loud)
        created = self.patcher.call_original("create", ("g",), {})
        self.assertTrue(type(created) is self.Greeter)

    def test_patched_method_requires_wrapper(self):
        self.patcher.install(["greet"])
        unregister_wrapper(self.Greeter)
        self.assertRaises(RuntimeError, getattr, self.Greeter(), "greet")

    def test_fallback_ignores_special_names(self):
        self.patcher.install_all(include_missing=True)
        self.assertTrue(callable(self.Greeter().unknown))
        self.assertFalse(hasattr(self.Greeter(), "__unknown__"))


class ModulePatcherTest(unittest.TestCase):

    def setUp(self):
        self.module = types.ModuleType("mockwrapper_sample")
        self.module.greet = lambda name: "Hello, %s" % name
        self.module.answer = 42
        self.engine = Engine(WRAP)
        self.patcher = ModulePatcher(self.engine, self.module)
        self.engine.interceptor = self.patcher
        self.addCleanup(self.patcher.uninstall)

    def test_method_names(self):
        self.assertEqual(self.patcher.method_names(), ["greet"])

    def test_install(self):
        self.engine.rules.add_rule("greet", None, ValueReturner("Hi"))
        self.patcher.install(["greet"])
        self.assertEqual(self.module.greet("al"), "Hi")
        self.assertEqual(self.module.greet.__name__, "greet")

    def test_call_original(self):
        self.patcher.install(["greet"])
        self.assertEqual(self.module.greet("al"), "Hello, al")
        self.assertRaises(AttributeError,
                          self.patcher.call_original, "unknown", (), {})

    def test_fallback_ignores_special_names(self):
        self.patcher.install_all(include_missing=True)
        self.assertTrue(callable(self.module.unknown))
        self.assertFalse(hasattr(self.module, "__path__"))


class RegistryTest(unittest.TestCase):

    def test_register(self):
        target = make_greeter_class()
        register_wrapper(target, "wrapper")
        self.addCleanup(unregister_wrapper, target)
        self.assertEqual(get_wrapper(target), "wrapper")
        self.assertRaises(RuntimeError, register_wrapper, target, "other")
        unregister_wrapper(target)
        self.assertEqual(get_wrapper(target), None)

    def test_unknown(self):
        self.assertEqual(get_wrapper(object()), None)


class ImportTargetTest(unittest.TestCase):

    def test_module(self):
        self.assertTrue(import_target("os.path") is os.path)

    def test_attribute(self):
        self.assertTrue(import_target("os.path.join") is os.path.join)
        self.assertTrue(import_target("unittest.TestCase")
                        is unittest.TestCase)

    def test_missing(self):
        self.assertRaises(ImportError, import_target, "mockwrapper_missing")
        self.assertRaises(AttributeError, import_target, "os.path.missing")


class WrapperTestCaseTest(unittest.TestCase):

    def test_restores_on_cleanup(self):
        Greeter = make_greeter_class()

        class SampleTest(WrapperTestCase):
            def test_greet(inner):
                wrapper = inner.wrap(Greeter, mode="mock")
                wrapper.add_mock("greet", returns="Hi")
                inner.assertEqual(Greeter().greet(), "Hi")
                inner.assertEqual(Greeter().shout(), None)

        result = unittest.TestResult()
        SampleTest("test_greet").run(result)
        self.assertTrue(result.wasSuccessful(), result.failures)
        self.assertEqual(Greeter().greet(), "Hello, world")
        self.assertEqual(get_wrapper(Greeter), None)

    def test_restores_on_failure(self):
        Greeter = make_greeter_class()

        class SampleTest(WrapperTestCase):
            def test_greet(inner):
                inner.wrap(Greeter, mode="stub")
                inner.fail()

        result = unittest.TestResult()
        SampleTest("test_greet").run(result)
        self.assertEqual(len(result.failures), 1)
        self.assertEqual(Greeter().greet(), "Hello, world")


if __name__ == "__main__":
    unittest.main()
