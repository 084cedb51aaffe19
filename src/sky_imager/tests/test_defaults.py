from os.path import join

import pytest

from sky_imager.config import CONFIG_PATH
from sky_imager.defaults import defaults
from sky_imager.gaussian import Gaussian2D, evaluate_gaussian_2d


@pytest.fixture(autouse=True)
def reset_defaults():
    yield
    defaults.set(None, refresh=True)
    defaults.deactivate()


@pytest.fixture(scope="function")
def gauss():
    return Gaussian2D(0.3, -0.2, major_axis=2.0, minor_axis=2.0)


def test_config_swap():
    defaults.set("default")
    config1 = defaults().copy()
    defaults.set("fast", refresh=True)
    assert config1 != defaults()
    assert defaults("max_step") == 0.125


def test_direct_config_path():
    defaults.set(join(CONFIG_PATH, "default.yaml"), refresh=True)
    assert defaults("max_step") == 1 / 32
    assert defaults("samples_per_sigma") == 5
    assert defaults("degenerate_minor_axis") == 1e-3


def test_null_config():
    defaults.set(None, refresh=True)
    assert defaults() == {}


def test_multiple_param_specification():
    config = {"simpson": {"max_step": 0.1}, "coarse": {"max_step": 0.2}}
    with pytest.warns(UserWarning, match="max_step"):
        defaults.set(config, refresh=True)
    assert defaults("max_step") == 0.2


def test_integration_changes(gauss):
    default_value = evaluate_gaussian_2d(gauss, 0, 0)
    defaults.set("fast", refresh=True)
    assert evaluate_gaussian_2d(gauss, 0, 0) != default_value


def test_explicit_argument_beats_config(gauss):
    default_value = evaluate_gaussian_2d(gauss, 0, 0)
    defaults.set("fast", refresh=True)
    assert evaluate_gaussian_2d(gauss, 0, 0, max_step=1 / 32) == default_value
    assert evaluate_gaussian_2d(gauss, 0, 0, 1 / 32) == default_value


def test_deactivated_config_ignored(gauss):
    default_value = evaluate_gaussian_2d(gauss, 0, 0)
    defaults.set("fast", refresh=True)
    defaults.deactivate()
    assert evaluate_gaussian_2d(gauss, 0, 0) == default_value


def test_activate_and_deactivate():
    defaults.activate()
    assert defaults._override_defaults
    defaults.deactivate()
    assert not defaults._override_defaults


def test_dict_unpacking():
    config = {
        "integration": {
            "simpson": {"max_step": 0.25, "samples_per_sigma": 3},
            "line": {"pa_tolerance": 1e-3},
        }
    }
    defaults.set(config, refresh=True)
    for value in defaults().values():
        assert not isinstance(value, dict)
    assert defaults("pa_tolerance") == 1e-3


def test_refresh():
    defaults.set("default")
    defaults.set({"max_step": 0.5}, refresh=True)
    assert "samples_per_sigma" not in defaults()
    assert "max_step" in defaults()
    # default behavior is to not refresh, just update
    defaults.set({"max_step": 0.25, "samples_per_sigma": 2})
    assert "samples_per_sigma" in defaults()
    assert defaults("max_step") == 0.25


def test_call_with_bad_component():
    defaults.set("default")
    with pytest.raises(KeyError) as err:
        defaults("not_a_valid_key")
    assert "not_a_valid_key not found in configuration." == err.value.args[0]


def test_bad_config_type():
    with pytest.raises(ValueError) as err:
        defaults.set(1)
    assert "The configuration must be a" in err.value.args[0]


def test_bad_config_file():
    with pytest.raises(FileNotFoundError):
        defaults.set("not_a_file")
