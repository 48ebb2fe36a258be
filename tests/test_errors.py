from errors import ConfigurationError, ErrorCategory, PlayerError


def test_defaults_and_labels() -> None:
    err = PlayerError("boom")
    assert err.category == ErrorCategory.RUNTIME
    assert err.exit_code == 1
    assert err.label() == "Runtime error"
    assert str(err) == "boom"


def test_configuration_error_category_and_code() -> None:
    err = ConfigurationError("no questions")
    assert err.category == ErrorCategory.CONFIG
    assert err.exit_code == 2
    assert err.label() == "Configuration error"
    assert isinstance(err, PlayerError)


def test_configuration_error_code_passthrough() -> None:
    assert ConfigurationError("x", exit_code=9).exit_code == 9
