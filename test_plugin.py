from __future__ import annotations

from mockwrapper import get_wrapper


class Calculator:

    def add(self, a: int, b: int) -> int:
        return a + b


def test_mock_wrapper_fixture(mock_wrapper):
    wrapper = mock_wrapper(Calculator(), mode="mock")
    wrapper.add_mock("add", with_args=[1, 2], returns=0)
    assert wrapper.get_object().add(1, 2) == 0
    wrapper.verify("add").once()


def test_mock_wrapper_fixture_restores(pytester):
    pytester.makepyfile(
        """
        import calendar

        def test_stub(mock_wrapper):
            mock_wrapper(calendar, mode="stub")
            assert calendar.isleap(2000) is None

        def test_restored():
            assert calendar.isleap(2000) is True
        """
    )
    result = pytester.runpytest("-p", "pytest_mockwrapper")
    result.assert_outcomes(passed=2)


def test_mock_wrapper_record_all_option(pytester):
    pytester.makepyfile(
        """
        import calendar

        def test_record_all(mock_wrapper):
            wrapper = mock_wrapper(calendar)
            assert calendar.isleap(2000) is True
            assert [call.args for call in wrapper.get_calls_to("isleap")] \\
                == [(2000,)]
        """
    )
    result = pytester.runpytest("-p", "pytest_mockwrapper", "--mock-record-all")
    result.assert_outcomes(passed=1)


def test_mock_wrapper_fixture_restores_classes(mock_wrapper):
    wrapper = mock_wrapper(Calculator, mode="mock")
    assert get_wrapper(Calculator) is wrapper
    assert Calculator().add(1, 2) is None
    wrapper.restore()
    assert get_wrapper(Calculator) is None
    assert Calculator().add(1, 2) == 3
