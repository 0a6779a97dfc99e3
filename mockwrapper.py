import copy
import importlib
import inspect
import itertools
import logging
import threading
import types
import unittest
from collections.abc import Container, Iterable


__all__ = ["Wrapper", "Verify", "WrapperTestCase", "VerificationError",
           "InvalidRuleDefinition", "get_wrapper", "ANY", "VARIOUS", "SAME",
           "CONTAINS", "MOCK", "STUB", "WRAP", "COPY", "CLONE"]


ERROR_PREFIX = "[MockWrapper] "

MOCK = "mock"
STUB = "stub"
WRAP = "wrap"
MODES = (MOCK, STUB, WRAP)

COPY = "copy"
CLONE = "clone"
RECORD_METHODS = (COPY, CLONE)

log = logging.getLogger(__name__)


# --------------------------------------------------------------------
# Exceptions

class VerificationError(AssertionError):
    """Raised when recorded calls don't satisfy a count constraint.

    @ivar method: Name of the verified method.
    @ivar matcher: L{ArgumentMatcher} filtering the calls, or None.
    @ivar constraint: Description of the expected count, such as
                      C{"at least 2 time(s)"}.
    @ivar actual: Number of calls actually seen.
    """

    def __init__(self, method, matcher, constraint, actual):
        self.method = method
        self.matcher = matcher
        self.constraint = constraint
        self.actual = actual
        expression = method
        if matcher is not None:
            expression += str(matcher)
        super(VerificationError, self).__init__(
            "%s%s: Expected %s, seen %d time(s)."
            % (ERROR_PREFIX, expression, constraint, actual))


class InvalidRuleDefinition(ValueError):
    """Raised when a rule or argument pattern can't possibly be matched."""


class UndefinedType(object):
    """Marker telling "no value given" apart from an explicit None.

    Rule options default to it, and lookups return it when nothing
    was found.  Copying yields the same marker, so cloned arguments
    still compare by identity.
    """

    __slots__ = ()

    def __repr__(self):
        return "Undefined"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

Undefined = UndefinedType()


# --------------------------------------------------------------------
# Special arguments for matching parameters.

class SpecialArgument(object):
    """Placeholder usable in argument patterns instead of a literal value.

    Subclasses decide in L{matches()} whether an actual argument is
    accepted.  The optional C{value} is what the placeholder was built
    around, and shows up in its repr.
    """

    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        name = type(self).__name__
        if self.value is None:
            return name
        return "%s(%r)" % (name, self.value)

    def matches(self, other):
        return True

    def __eq__(self, other):
        return type(other) is type(self) and self.value == other.value

    def __ne__(self, other):
        return not self.__eq__(other)


class ANY(SpecialArgument):
    """Matches any single argument, None included."""

ANY = ANY()


class VARIOUS(SpecialArgument):
    """Matches zero or more elements of a sequence."""

VARIOUS = VARIOUS()


class SAME(SpecialArgument):
    """Matches only the very object given, never an equal copy."""

    def matches(self, other):
        return other is self.value

    def __eq__(self, other):
        return type(other) is type(self) and other.value is self.value


class CONTAINS(SpecialArgument):
    """Matches containers and iterables holding an element equal to value.

    Arguments supporting neither membership tests nor iteration don't
    match, instead of raising.
    """

    def matches(self, other):
        if not isinstance(other, (Container, Iterable)):
            return False
        return self.value in other


# --------------------------------------------------------------------
# Argument matching.

def match_deeply(expected, actual, _seen=None):
    """Compare C{actual} against the pattern in C{expected}.

    Lists and tuples are compared element-wise, mappings by their keys
    and values, and anything else with C{==}.  Special arguments found
    anywhere in the pattern decide for themselves whether they match.

    Self-referencing structures are supported: when the same pair of
    containers is met again while still being compared, they match
    only if they're the very same object.
    """
    if isinstance(expected, SpecialArgument):
        return expected.matches(actual)
    if isinstance(expected, (list, tuple)):
        if (not isinstance(actual, (list, tuple)) or
            isinstance(expected, list) != isinstance(actual, list)):
            return False
    elif isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
    else:
        return bool(expected == actual)

    if _seen is None:
        _seen = set()
    key = (id(expected), id(actual))
    if key in _seen:
        return expected is actual
    _seen.add(key)
    try:
        if isinstance(expected, dict):
            if set(expected) != set(actual):
                return False
            for name in expected:
                if not match_deeply(expected[name], actual[name], _seen):
                    return False
            return True
        return match_sequence(expected, actual, _seen)
    finally:
        _seen.discard(key)


def match_sequence(pattern, values, _seen=None):
    """Match the values against pattern, considering the special VARIOUS."""
    if not any(item is VARIOUS for item in pattern):
        if len(pattern) != len(values):
            return False
        for expected, actual in zip(pattern, values):
            if not match_deeply(expected, actual, _seen):
                return False
        return True

    # This is based on the idea of the Levenshtein Distance between two
    # strings.  After each pattern item, matched[j] tells whether the
    # pattern seen so far matches the first j values.
    matched = [True] + [False] * len(values)
    for expected in pattern:
        if expected is VARIOUS:
            for j in range(1, len(matched)):
                matched[j] = matched[j] or matched[j-1]
        else:
            for j in range(len(values), 0, -1):
                matched[j] = (matched[j-1] and
                              match_deeply(expected, values[j-1], _seen))
            matched[0] = False
        if not any(matched):
            return False
    return matched[-1]


def match_params(args1, kwargs1, args2, kwargs2):
    """Match the two sets of parameters, considering special arguments."""
    if not match_sequence(args1, args2):
        return False
    return match_deeply(kwargs1, kwargs2)


def format_arguments(args, kwargs):
    """Transform the arguments into a nice string such as (1, 'z', a=2)."""
    items = [repr(arg) for arg in args]
    if kwargs is ANY:
        items.append("**ANY")
    else:
        for pair in sorted(kwargs.items()):
            items.append("%s=%r" % pair)
    return "(%s)" % ", ".join(items)


def check_pattern(pattern, _stack=None):
    """Raise InvalidRuleDefinition if VARIOUS is misplaced in the pattern.

    VARIOUS only makes sense as an element of a list or tuple.
    """
    if isinstance(pattern, (list, tuple)):
        children = [(item, True) for item in pattern]
    elif isinstance(pattern, dict):
        children = [(item, False) for item in pattern.values()]
    else:
        return
    if _stack is None:
        _stack = set()
    if id(pattern) in _stack:
        return
    _stack.add(id(pattern))
    for child, in_sequence in children:
        if child is VARIOUS and not in_sequence:
            raise InvalidRuleDefinition(ERROR_PREFIX +
                                        "VARIOUS may only be used as an "
                                        "element of a list or tuple")
        check_pattern(child, _stack)
    _stack.discard(id(pattern))


class ArgumentMatcher(object):
    """Structural pattern over the arguments of a call.

    @param args: Sequence with the expected positional arguments.
    @param kwargs: Mapping with the expected keyword arguments.  None means
                   no keyword arguments at all, and C{ANY} accepts any.
    """

    def __init__(self, args=(), kwargs=None):
        if not isinstance(args, (list, tuple)):
            raise InvalidRuleDefinition(ERROR_PREFIX +
                                        "Arguments must be given as a list "
                                        "or tuple, not %r" % (args,))
        if kwargs is None:
            kwargs = {}
        elif kwargs is not ANY and not isinstance(kwargs, dict):
            raise InvalidRuleDefinition(ERROR_PREFIX +
                                        "Keyword arguments must be given as "
                                        "a dict, not %r" % (kwargs,))
        check_pattern(args)
        if kwargs is not ANY:
            check_pattern(kwargs)
        self.args = tuple(args)
        self.kwargs = kwargs

    def __repr__(self):
        return "ArgumentMatcher(%r, %r)" % (self.args, self.kwargs)

    def __str__(self):
        return format_arguments(self.args, self.kwargs)

    def matches(self, args, kwargs=None):
        return match_params(self.args, self.kwargs, tuple(args), kwargs or {})


# --------------------------------------------------------------------
# Call recording.

class CallRecord(object):
    """One intercepted call.

    The index orders calls across all methods of the same target.  For
    class-level targets, the instance which received the call is kept
    as well.
    """

    def __init__(self, method, args, kwargs, index, instance=None):
        self.method = method
        self.args = args
        self.kwargs = kwargs
        self.index = index
        self.instance = instance

    def __repr__(self):
        return "CallRecord(%r, %r, %r, %d)" % \
               (self.method, self.args, self.kwargs, self.index)

    def __str__(self):
        return self.method + format_arguments(self.args, self.kwargs)


class CallRecorder(object):
    """Append-only log of received calls, kept per method."""

    def __init__(self):
        self._calls = {} # {method: [CallRecord]}
        self._counter = itertools.count()

    def record(self, method, args, kwargs=None, instance=None):
        record = CallRecord(method, tuple(args), dict(kwargs or {}),
                            next(self._counter), instance)
        self._calls.setdefault(method, []).append(record)
        return record

    def calls_to(self, method):
        """Return calls to the given method, in the order they were seen."""
        return list(self._calls.get(method, ()))

    def all_calls(self):
        """Return calls to every method, in the order they were seen."""
        calls = []
        for records in self._calls.values():
            calls.extend(records)
        calls.sort(key=lambda record: record.index)
        return calls

    def methods(self):
        return [method for method, calls in self._calls.items() if calls]

    def clear(self, method=None):
        """Forget recorded calls to the given method, or to all of them."""
        if method is None:
            self._calls.clear()
        else:
            self._calls.pop(method, None)


# --------------------------------------------------------------------
# Results produced by rules.

class Result(object):
    """What happens once a rule is picked for a call."""

    def run(self, args, kwargs):
        """Return the value handed back to the caller."""


class ValueReturner(Result):
    """Return the same value every time."""

    def __init__(self, value):
        self.value = value

    def run(self, args, kwargs):
        return self.value


class SequenceReturner(Result):
    """Return several values at once.

    The values are returned as a tuple, so that the caller may unpack
    them.  A single value is returned by itself, which allows returning
    a list as such by wrapping it in another list.
    """

    def __init__(self, values):
        self.values = list(values)

    def run(self, args, kwargs):
        if not self.values:
            return None
        if len(self.values) == 1:
            return self.values[0]
        return tuple(self.values)


class FunctionRunner(Result):
    """Call a function with the arguments of the call, and return its result.
    """

    def __init__(self, func):
        self._func = func

    def run(self, args, kwargs):
        return self._func(*args, **kwargs)


class ExceptionRaiser(Result):

    def __init__(self, exception):
        self.exception = exception

    def run(self, args, kwargs):
        raise self.exception


def make_result(returns=Undefined, calls=Undefined, raises=Undefined):
    """Build the result of a rule from the options given by the user.

    @param returns: Value to be returned.  A list is taken as several
                    values to be returned at once (see L{SequenceReturner}).
    @param calls: Function to be called with the arguments of the call.
    @param raises: Class or instance of exception to be raised.
    """
    given = [name for name, value in [("returns", returns), ("calls", calls),
                                      ("raises", raises)]
             if value is not Undefined]
    if len(given) > 1:
        raise InvalidRuleDefinition(ERROR_PREFIX +
                                    "Only one of returns, calls or raises may "
                                    "be given, got %s" % ", ".join(given))
    if calls is not Undefined:
        if not callable(calls):
            raise InvalidRuleDefinition(ERROR_PREFIX +
                                        "calls must be callable, not %r"
                                        % (calls,))
        return FunctionRunner(calls)
    if raises is not Undefined:
        return ExceptionRaiser(raises)
    if isinstance(returns, list):
        return SequenceReturner(returns)
    if returns is Undefined:
        returns = None
    return ValueReturner(returns)


# --------------------------------------------------------------------
# Rules.

class ReturnRule(object):

    def __init__(self, method, matcher, result):
        self.method = method
        self.matcher = matcher
        self.result = result

    def __repr__(self):
        if self.matcher is None:
            return "ReturnRule(%r)" % self.method
        return "ReturnRule(%r, %r)" % (self.method, self.matcher)

    def is_default(self):
        return self.matcher is None

    def matches(self, args, kwargs=None):
        return self.matcher is None or self.matcher.matches(args, kwargs)

    def run(self, args, kwargs):
        return self.result.run(args, kwargs)


class RuleStore(object):
    """Return rules of a target, kept per method.

    Rules guarded by an argument matcher are tried in the order they
    were added, and the first one matching wins.  When none of them
    matches, the default rule of the method (the one without a matcher)
    is used, if there's one.  Adding a new default replaces the previous
    one, but leaves guarded rules alone.
    """

    def __init__(self):
        self._conditional = {} # {method: [ReturnRule]}
        self._defaults = {} # {method: ReturnRule}

    def add_rule(self, method, matcher, result):
        if not isinstance(method, str) or not method:
            raise InvalidRuleDefinition(ERROR_PREFIX +
                                        "Method name must be a non-empty "
                                        "string, not %r" % (method,))
        rule = ReturnRule(method, matcher, result)
        if matcher is None:
            self._defaults[method] = rule
        else:
            self._conditional.setdefault(method, []).append(rule)
        return rule

    def get_rules(self, method):
        """Return rules of the method in resolution order."""
        rules = list(self._conditional.get(method, ()))
        if method in self._defaults:
            rules.append(self._defaults[method])
        return rules

    def find_rule(self, method, args=(), kwargs=None):
        """Return the rule to be used for the given call, or Undefined."""
        for rule in self.get_rules(method):
            if rule.matches(args, kwargs):
                return rule
        return Undefined

    def resolve(self, method, args=(), kwargs=None):
        """Return the value configured for the given call, or Undefined."""
        rule = self.find_rule(method, args, kwargs)
        if rule is Undefined:
            return Undefined
        return rule.run(tuple(args), kwargs or {})

    def is_mocked(self, method, args=(), kwargs=None):
        return self.find_rule(method, args, kwargs) is not Undefined

    def has_rules(self, method):
        return bool(self._conditional.get(method)) or method in self._defaults

    def methods(self):
        return sorted(set(self._defaults).union(
            method for method, rules in self._conditional.items() if rules))

    def reset(self, method=None):
        """Forget rules of the given method, or of all of them."""
        if method is None:
            self._conditional.clear()
            self._defaults.clear()
        else:
            self._conditional.pop(method, None)
            self._defaults.pop(method, None)


# --------------------------------------------------------------------
# Resolution engine.

class Engine(object):
    """Resolve intercepted calls against rules, and record them.

    @param mode: What to do with calls no rule accounts for.  With
                 C{"wrap"} they're passed through to the real target,
                 while with C{"mock"} and C{"stub"} they return None.
    @param record_all: Record every intercepted call, rather than only
                       calls to methods which have rules.
    @param record_method: C{"copy"} records shallow copies of the
                          arguments, while C{"clone"} records deep copies.
    """

    def __init__(self, mode=WRAP, record_all=False, record_method=COPY):
        if mode not in MODES:
            raise ValueError(ERROR_PREFIX + "Unknown mode %r, expected one "
                             "of %s" % (mode, ", ".join(MODES)))
        if record_method not in RECORD_METHODS:
            raise ValueError(ERROR_PREFIX + "Unknown record method %r, "
                             "expected one of %s"
                             % (record_method, ", ".join(RECORD_METHODS)))
        self.mode = mode
        self.record_all = bool(record_all)
        self.record_method = record_method
        self.rules = RuleStore()
        self.recorder = CallRecorder()
        self.interceptor = None
        self.lock = threading.RLock()

    def snapshot(self, args, kwargs):
        """Return copies of the arguments as configured by record_method."""
        if self.record_method == CLONE:
            return copy.deepcopy((tuple(args), dict(kwargs)))
        return tuple(args), dict(kwargs)

    def invoke(self, method, args=(), kwargs=None, instance=None,
               owner=None):
        """This is called by interceptors whenever a call is intercepted.

        @param method: Name of the called method.
        @param args: Positional arguments of the call.
        @param kwargs: Keyword arguments of the call.
        @param instance: Instance which received the call, when the
                         target is a class.
        @param owner: Class the method was looked up on, when the target
                      is a class.
        """
        args = tuple(args)
        kwargs = kwargs or {}
        with self.lock:
            if self.record_all or self.rules.has_rules(method):
                self.recorder.record(method, *self.snapshot(args, kwargs),
                                     instance=instance)
            rule = self.rules.find_rule(method, args, kwargs)
        if rule is not Undefined:
            return rule.run(args, kwargs)
        if self.mode != WRAP:
            log.debug("No rule for %s%s, returning None", method,
                      format_arguments(args, kwargs))
            return None
        if self.interceptor is None:
            raise RuntimeError(ERROR_PREFIX + "No real object to pass %s "
                               "through to" % method)
        log.debug("No rule for %s%s, passing through", method,
                  format_arguments(args, kwargs))
        return self.interceptor.call_original(method, args, kwargs,
                                              instance, owner)


# --------------------------------------------------------------------
# Verification.

class Verify(object):
    """Chainable assertions about recorded calls to one method.

    Normally obtained from L{Wrapper.verify()}::

        wrapper.verify("fetch").with_args(["url"]).at_least(2).at_most(3)

    Each assertion is checked as soon as it's called, and raises
    L{VerificationError} when the number of calls doesn't satisfy it.
    """

    def __init__(self, method, calls):
        self.method = method
        self._calls = list(calls)
        self._matcher = None

    def with_args(self, args=(), kwargs=None):
        """Only consider calls with arguments matching the given ones.

        @param args: Sequence with the expected positional arguments, or
                     an L{ArgumentMatcher}.
        @param kwargs: Mapping with the expected keyword arguments.
        """
        if self._matcher is not None:
            raise RuntimeError(ERROR_PREFIX + "Calls to %s are already "
                               "filtered by %s" % (self.method, self._matcher))
        if isinstance(args, ArgumentMatcher):
            self._matcher = args
        else:
            self._matcher = ArgumentMatcher(args, kwargs)
        return self

    def get_calls(self):
        """Return the calls being verified."""
        if self._matcher is None:
            return self._calls[:]
        return [call for call in self._calls
                if self._matcher.matches(call.args, call.kwargs)]

    def count(self):
        return len(self.get_calls())

    def _check(self, times, accept, constraint):
        if not isinstance(times, int) or times < 0:
            raise ValueError(ERROR_PREFIX + "Number of times must be a "
                             "non-negative integer, not %r" % (times,))
        seen = self.count()
        if not accept(seen, times):
            raise VerificationError(self.method, self._matcher,
                                    constraint % times, seen)
        return self

    def exactly(self, times):
        return self._check(times, lambda seen, times: seen == times,
                           "%d time(s)")

    def at_least(self, times):
        return self._check(times, lambda seen, times: seen >= times,
                           "at least %d time(s)")

    def at_most(self, times):
        return self._check(times, lambda seen, times: seen <= times,
                           "at most %d time(s)")

    def once(self):
        return self.exactly(1)

    def never(self):
        return self.exactly(0)


# --------------------------------------------------------------------
# Interception.

_registry = {} # {id(target): (target, wrapper)}
_registry_lock = threading.Lock()


def register_wrapper(target, wrapper):
    """Make the wrapper the active one for a class or module."""
    with _registry_lock:
        if id(target) in _registry:
            raise RuntimeError(ERROR_PREFIX + "%r is already wrapped"
                               % (target,))
        _registry[id(target)] = (target, wrapper)


def unregister_wrapper(target):
    with _registry_lock:
        _registry.pop(id(target), None)


def get_wrapper(target):
    """Return the active wrapper for the class or module, or None."""
    entry = _registry.get(id(target))
    if entry is not None and entry[0] is target:
        return entry[1]
    return None


def import_target(path):
    """Return the object found at a dotted path such as 'os.path.join'."""
    import_stack = path.split(".")
    attr_stack = []
    while import_stack:
        module_path = ".".join(import_stack)
        try:
            object = importlib.import_module(module_path)
        except ImportError:
            attr_stack.insert(0, import_stack.pop())
            continue
        else:
            for attr in attr_stack:
                object = getattr(object, attr)
            return object
    raise ImportError(ERROR_PREFIX + "Can't import %r" % path)


def is_special_name(name):
    return name.startswith("__") and name.endswith("__")


class Interceptor(object):
    """Route calls made on a real target to an engine.

    Interceptors are told which method names must be routed with
    L{install()}, or to route every method with L{install_all()}.  Calls
    the engine can't resolve may be passed back through
    L{call_original()}, and L{uninstall()} puts the target back in its
    original state.
    """

    is_global = False

    def __init__(self, engine, target):
        self.engine = engine
        self.target = target
        self._names = set()
        self._all = False
        self._missing = False

    def intercepts(self, name):
        return self._all or self._missing or name in self._names

    def install(self, names):
        self._names.update(names)

    def install_all(self, include_missing=False):
        """Route every method of the target.

        @param include_missing: Also route methods the target doesn't have.
        """
        self._all = True
        self._missing = self._missing or include_missing

    def uninstall(self):
        self._names.clear()
        self._all = self._missing = False

    def get_object(self):
        """Return the object calls should be made on."""
        return self.target

    def call_original(self, name, args, kwargs, instance=None, owner=None):
        raise NotImplementedError


class Proxy(object):
    """Stand-in for an instance, routing its methods to an interceptor."""

    def __init__(self, interceptor):
        self.__mockwrapper_interceptor__ = interceptor

    def __getattribute__(self, name):
        if name.startswith("__mockwrapper_"):
            return super(Proxy, self).__getattribute__(name)
        interceptor = self.__mockwrapper_interceptor__
        if name == "__class__":
            return type(interceptor.target)
        return interceptor.lookup(name)

    def __setattr__(self, name, value):
        if name.startswith("__mockwrapper_"):
            super(Proxy, self).__setattr__(name, value)
        else:
            setattr(self.__mockwrapper_interceptor__.target, name, value)

    def __delattr__(self, name):
        if name.startswith("__mockwrapper_"):
            super(Proxy, self).__delattr__(name)
        else:
            delattr(self.__mockwrapper_interceptor__.target, name)


class ProxyInterceptor(Interceptor):
    """Intercept calls on a single instance through a L{Proxy}.

    The instance itself is left untouched.
    """

    def __init__(self, engine, target):
        super(ProxyInterceptor, self).__init__(engine, target)
        self.proxy = Proxy(self)

    def get_object(self):
        return self.proxy

    def route(self, name):
        def method(*args, **kwargs):
            return self.engine.invoke(name, args, kwargs)
        method.__name__ = name
        return method

    def lookup(self, name):
        if is_special_name(name):
            return getattr(self.target, name)
        if name in self._names:
            return self.route(name)
        try:
            value = getattr(self.target, name)
        except AttributeError:
            if self._missing:
                return self.route(name)
            raise
        if self._all and callable(value):
            return self.route(name)
        return value

    def call_original(self, name, args, kwargs, instance=None, owner=None):
        return getattr(self.target, name)(*args, **kwargs)


class Patcher(Interceptor):
    """Intercept calls by replacing attributes of the target itself.

    Changes are global, so they're undone by L{uninstall()}.
    """

    is_global = True

    def __init__(self, engine, target):
        super(Patcher, self).__init__(engine, target)
        self._patched = {} # {attr: original}

    def patch_attr(self, attr, value):
        if attr not in self._patched:
            self._patched[attr] = self.target.__dict__.get(attr, Undefined)
        setattr(self.target, attr, value)

    def method_names(self):
        """Return names of methods found in the target."""
        raise NotImplementedError

    def make_patch(self, name):
        """Return the value installed in place of the given method."""
        raise NotImplementedError

    def make_fallback(self):
        """Return a __getattr__ hook routing methods the target lacks."""
        raise NotImplementedError

    def install(self, names):
        for name in names:
            if name not in self._names:
                self._names.add(name)
                self.patch_attr(name, self.make_patch(name))

    def install_all(self, include_missing=False):
        self.install(self.method_names())
        if include_missing and not self._missing:
            self._missing = True
            self.patch_attr("__getattr__", self.make_fallback())
        log.debug("Intercepting all methods of %r", self.target)

    def intercepts(self, name):
        return self._missing or name in self._names

    def uninstall(self):
        for attr, original in self._patched.items():
            if original is Undefined:
                delattr(self.target, attr)
            else:
                setattr(self.target, attr, original)
        self._patched.clear()
        super(Patcher, self).uninstall()
        log.debug("Restored %r", self.target)


class PatchedMethod(object):
    """Descriptor installed in place of a method of a wrapped class.

    The wrapper is looked up in the registry of wrapped classes on every
    access, so calls made through any instance end up in the same engine.
    """

    def __init__(self, name, owner):
        self._name = name
        self._owner = owner

    def __get__(self, obj, cls=None):
        wrapper = get_wrapper(self._owner)
        if wrapper is None:
            raise RuntimeError(ERROR_PREFIX + "%r isn't wrapped anymore"
                               % (self._owner,))
        engine = wrapper.engine
        name = self._name
        def method(*args, **kwargs):
            return engine.invoke(name, args, kwargs, obj, cls)
        method.__name__ = name
        return method


class ClassPatcher(Patcher):
    """Intercept calls made through any instance of a class.

    Subclasses and their instances are affected as well, unless they
    override the methods.
    """

    def method_names(self):
        names = []
        for name in dir(self.target):
            if is_special_name(name):
                continue
            value = inspect.getattr_static(self.target, name)
            if (inspect.isroutine(value) or
                isinstance(value, (staticmethod, classmethod))):
                names.append(name)
        return names

    def make_patch(self, name):
        return PatchedMethod(name, self.target)

    def make_fallback(self):
        engine = self.engine
        def __getattr__(obj, name):
            if is_special_name(name):
                raise AttributeError(name)
            def method(*args, **kwargs):
                return engine.invoke(name, args, kwargs, obj, type(obj))
            method.__name__ = name
            return method
        return __getattr__

    def get_unpatched_attr(self, name):
        for cls in self.target.__mro__:
            if cls is self.target and name in self._patched:
                original = self._patched[name]
                if original is not Undefined:
                    return original
            elif name in cls.__dict__:
                return cls.__dict__[name]
        return Undefined

    def call_original(self, name, args, kwargs, instance=None, owner=None):
        original = self.get_unpatched_attr(name)
        if original is Undefined:
            raise AttributeError("type object %r has no attribute %r"
                                 % (self.target.__name__, name))
        if owner is None:
            owner = self.target if instance is None else type(instance)
        if hasattr(type(original), "__get__"):
            original = original.__get__(instance, owner)
        return original(*args, **kwargs)


class ModulePatcher(Patcher):
    """Intercept calls to functions of a module."""

    def method_names(self):
        return [name for name, value in list(vars(self.target).items())
                if not is_special_name(name) and inspect.isroutine(value)]

    def make_patch(self, name):
        engine = self.engine
        def function(*args, **kwargs):
            return engine.invoke(name, args, kwargs)
        function.__name__ = name
        return function

    def make_fallback(self):
        make_patch = self.make_patch
        def __getattr__(name):
            if is_special_name(name):
                raise AttributeError(name)
            return make_patch(name)
        return __getattr__

    def call_original(self, name, args, kwargs, instance=None, owner=None):
        if name in self._patched:
            original = self._patched[name]
        else:
            original = vars(self.target).get(name, Undefined)
        if original is Undefined:
            raise AttributeError("module %r has no attribute %r"
                                 % (self.target.__name__, name))
        return original(*args, **kwargs)


def make_interceptor(engine, target):
    if isinstance(target, types.ModuleType):
        return ModulePatcher(engine, target)
    if isinstance(target, type):
        return ClassPatcher(engine, target)
    return ProxyInterceptor(engine, target)


# --------------------------------------------------------------------
# Wrapper.

class Wrapper(object):
    """Controller of a mocked target.

    A wrapper intercepts calls made on its target, returns values set
    up with L{add_mock()}, and records calls so that they may be
    inspected and verified afterwards.  For instance::

        wrapper = Wrapper(Store())
        wrapper.add_mock("get", returns="default")
        wrapper.add_mock("get", with_args=["answer"], returns=42)
        store = wrapper.get_object()
        assert store.get("answer") == 42
        assert store.get("question") == "default"
        wrapper.verify("get").with_args(["answer"]).once()

    The target may be an instance, a class, a module, or the dotted path
    of one of them.  Instances are left alone, and calls must be made on
    the proxy returned by L{get_object()}.  Classes and modules are
    changed in place until L{restore()} is called, so calls made through
    any instance of a wrapped class are intercepted.  The wrapper may be
    used as a context manager, which restores the target on exit::

        with Wrapper("os.path", mode="stub") as wrapper:
            wrapper.add_mock("exists", returns=True)
            ...

    @param target: Object to be wrapped.
    @param mode: How calls without a matching rule behave.  C{"wrap"}
                 (the default) passes them through to the real target,
                 C{"mock"} makes every method of the target return None,
                 and C{"stub"} does the same even for methods the target
                 doesn't have.
    @param record_all: Record every intercepted call, even when the method
                       has no rules.
    @param record_method: C{"copy"} (the default) records shallow copies
                          of arguments, and C{"clone"} deep copies.
    """

    def __init__(self, target, mode=WRAP, record_all=False,
                 record_method=COPY):
        if isinstance(target, str):
            target = import_target(target)
        self.engine = Engine(mode, record_all, record_method)
        self.target = target
        interceptor = make_interceptor(self.engine, target)
        if interceptor.is_global:
            register_wrapper(target, self)
        self.engine.interceptor = interceptor
        self._restored = False
        try:
            if mode == STUB:
                interceptor.install_all(include_missing=True)
            elif mode == MOCK or record_all:
                interceptor.install_all()
        except Exception:
            self.restore()
            raise
        log.debug("Wrapped %r in %s mode", target, mode)

    def __enter__(self):
        return self

    def __exit__(self, type, value, traceback):
        """Restore the target.  Exceptions are never swallowed."""
        self.restore()
        return False

    @property
    def interceptor(self):
        return self.engine.interceptor

    def get_object(self):
        """Return the object calls should be made on.

        That's a proxy when an instance is wrapped, and the target itself
        for classes and modules.
        """
        return self.interceptor.get_object()

    def add_mock(self, method, with_args=None, with_kwargs=None,
                 returns=Undefined, calls=Undefined, raises=Undefined):
        """Make calls to the method return the given value.

        Without C{with_args} and C{with_kwargs} the rule is the default
        for the method, replacing any previous default.  Otherwise it's
        only used for calls with matching arguments, and rules added
        first have precedence.

        @param method: Name of the method.
        @param with_args: Sequence with the expected positional arguments.
                          May contain special arguments such as C{ANY}.
        @param with_kwargs: Mapping with the expected keyword arguments.
        @param returns: Value to be returned.  A list is returned as a
                        tuple of values, so that the caller may unpack them.
                        Wrap a list in another one to return it as is.
        @param calls: Function called with the arguments of the call, whose
                      result is returned.
        @param raises: Class or instance of exception to be raised.
        """
        matcher = None
        if with_args is not None or with_kwargs is not None:
            if with_args is None:
                with_args = ()
            matcher = ArgumentMatcher(with_args, with_kwargs)
        result = make_result(returns, calls, raises)
        with self.engine.lock:
            self.engine.rules.add_rule(method, matcher, result)
        self.interceptor.install([method])
        if matcher is None:
            log.debug("Added default rule for %s", method)
        else:
            log.debug("Added rule for %s%s", method, matcher)
        return self

    def is_mocked(self, method, args=(), kwargs=None):
        """Return true if a rule would handle the given call."""
        with self.engine.lock:
            return self.engine.rules.is_mocked(method, args, kwargs)

    def get_calls_to(self, method):
        """Return L{CallRecord}s of the method, in the order they happened."""
        with self.engine.lock:
            return self.engine.recorder.calls_to(method)

    def get_all_calls(self):
        with self.engine.lock:
            return self.engine.recorder.all_calls()

    def verify(self, method):
        """Return a L{Verify} object for checking calls to the method."""
        with self.engine.lock:
            return Verify(method, self.engine.recorder.calls_to(method))

    def reset_mocks(self, method=None):
        """Remove rules of the method, or of every method.

        Recorded calls are kept.
        """
        with self.engine.lock:
            self.engine.rules.reset(method)
        log.debug("Reset rules of %s", method or "all methods")

    def reset_calls(self, method=None):
        """Forget calls to the method, or to every method.

        Rules are kept.
        """
        with self.engine.lock:
            self.engine.recorder.clear(method)
        log.debug("Reset calls to %s", method or "all methods")

    def reset_all(self):
        self.reset_mocks()
        self.reset_calls()

    def restore(self):
        """Undo changes done to the target.

        Rules and recorded calls are kept, so calls may still be verified.
        Calling it more than once is harmless.
        """
        if self._restored:
            return
        self._restored = True
        self.interceptor.uninstall()
        if self.interceptor.is_global:
            unregister_wrapper(self.target)


# --------------------------------------------------------------------
# unittest integration.

class WrapperTestCase(unittest.TestCase):
    """unittest.TestCase subclass with Wrapper support.

    Wrappers created with L{wrap()} are restored once the test is done,
    whether it succeeds or not.
    """

    def wrap(self, target, **options):
        """Return a L{Wrapper} for the target, restored on cleanup.

        Options are the same accepted by L{Wrapper}.
        """
        wrapper = Wrapper(target, **options)
        self.addCleanup(wrapper.restore)
        return wrapper
