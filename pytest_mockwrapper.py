from collections.abc import Callable, Generator
from typing import Any

import pytest

from mockwrapper import Wrapper


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("mockwrapper")
    group.addoption(
        "--mock-record-all",
        action="store_true",
        default=False,
        help="Record every intercepted call, even to methods without rules.",
    )


@pytest.fixture
def mock_wrapper(
    request: pytest.FixtureRequest,
) -> Generator[Callable[..., Wrapper], None, None]:
    """Factory of wrappers which are restored when the test finishes.

    Usage:

        def test_fetch(mock_wrapper):
            wrapper = mock_wrapper(Client, mode="mock")
            wrapper.add_mock("fetch", returns="payload")
            assert Client().fetch("url") == "payload"
            wrapper.verify("fetch").once()
    """
    record_all = request.config.getoption("--mock-record-all", default=False)
    wrappers: list[Wrapper] = []

    def wrap(target: Any, **options: Any) -> Wrapper:
        options.setdefault("record_all", record_all)
        wrapper = Wrapper(target, **options)
        wrappers.append(wrapper)
        return wrapper

    yield wrap

    # Restore in reverse, so that nested changes unwind cleanly
    for wrapper in reversed(wrappers):
        wrapper.restore()
