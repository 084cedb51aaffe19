"""Module for interfacing with package-wide default parameters."""

import functools
import inspect
import warnings
from os import path

import yaml

from .config import CONFIG_PATH

NAMED_CONFIGS = {
    "default": path.join(CONFIG_PATH, "default.yaml"),
    "fast": path.join(CONFIG_PATH, "fast.yaml"),
}


class _Singleton(type):
    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]


class Defaults(metaclass=_Singleton):
    """Class for dynamically changing sky_imager parameter defaults.

    This class retrieves integration settings from YAML files and lets them
    be switched while in an interactive environment. It is intended to exist
    as a singleton; an instance is created at the end of this module and that
    instance is what is imported in the sky_imager constructor.

    Examples
    --------
    To use the coarse quick-look sampling (and activate it)::

        sky_imager.defaults.set("fast")

    To use a custom set of defaults, pass the path to a configuration YAML
    or a dictionary::

        sky_imager.defaults.set({"max_step": 1 / 64})

    To revert back to the defaults defined in function signatures::

        sky_imager.defaults.deactivate()

    To view the value of one parameter, or of all of them::

        sky_imager.defaults("max_step")
        sky_imager.defaults()
    """

    def __init__(self, config=None):
        """Load in a configuration.

        Parameters
        ----------
        config : str or dict, optional
            May either be an absolute path to a configuration YAML, one of
            the named configurations ('default', 'fast'), or a dictionary.

        Notes
        -----
        Nested sections of a configuration only serve to organise it. The
        resulting configuration always takes the form {param : value}, so a
        parameter repeated in different sections takes the value specified
        last.
        """
        self._raw_config = {}
        self._config = {}
        self._config_name = None
        self._override_defaults = False
        if config:
            self._set_config(config)

    def __call__(self, component=None):
        """Return the defaults dictionary, or a single parameter."""
        if component is not None:
            try:
                return self._config[component]
            except KeyError:
                raise KeyError(f"{component} not found in configuration.")
        else:
            return self._config

    def set(self, new_config, refresh=False):
        """Set the defaults to those specified in `new_config`.

        Also activates those defaults.

        Parameters
        ----------
        new_config : str or dict
            Name of a packaged configuration, absolute path to a
            configuration file, or dictionary of parameters.
        refresh : bool, optional
            Choose whether to completely overwrite the old config or
            just add new values to it.
        """
        if refresh:
            self._config = {}
        self._set_config(new_config)
        self.activate()

    def activate(self):
        """Activate the defaults."""
        self._override_defaults = True

    def deactivate(self):
        """Revert to function defaults."""
        self._override_defaults = False

    def _set_config(self, config):
        """Retrieve the configuration specified."""
        if config is None:
            self._config_name = None
            self._raw_config = {}
            self._config = {}
        elif isinstance(config, str):
            self._config_name = config
            if config in NAMED_CONFIGS:
                config = NAMED_CONFIGS[config]
            with open(config) as conf:
                self._raw_config = yaml.safe_load(conf.read()) or {}
        elif isinstance(config, dict):
            self._raw_config = config
            self._config_name = "custom"
        else:
            raise ValueError(
                "The configuration must be a dictionary, an absolute "
                "path to a configuration YAML, or a configuration name."
            )

        self._config = self._unpack_dict(self._raw_config, self._config)
        self._check_config()

    @staticmethod
    def _unpack_dict(nested_dict, new_dict=None):
        """Extract individual parameters from a (partially) nested dictionary.

        Examples
        --------
        >>> Defaults._unpack_dict({"simpson": {"max_step": 0.1}, "pa_tolerance": 0})
        {'max_step': 0.1, 'pa_tolerance': 0}
        """
        if new_dict is None:
            new_dict = {}
        for key, value in nested_dict.items():
            if isinstance(value, dict):
                Defaults._unpack_dict(value, new_dict)
            else:
                new_dict[key] = value
        return new_dict

    def _recursive_enumerate(self, counts, dictionary):
        for key, value in dictionary.items():
            if isinstance(value, dict):
                self._recursive_enumerate(counts, value)
            else:
                counts[key] = counts.get(key, 0) + 1

    def _check_config(self):
        """Warn if any keys in the configuration are repeated."""
        counts = {}
        self._recursive_enumerate(counts, self._raw_config)
        repeated = [param for param, count in counts.items() if count > 1]
        if repeated:
            warnings.warn(
                "The following parameters have multiple values defined "
                "in the configuration:\n"
                + "\n".join(repeated)
                + "\nPlease check your configuration, as only the last "
                "value specified for each parameter will be used.",
                stacklevel=1,
            )

    def _handler(self, func):
        """Decorator for applying new function parameter defaults."""

        @functools.wraps(func)
        def new_func(*args, **kwargs):
            if not self._override_defaults:
                return func(*args, **kwargs)

            signature = inspect.signature(func)
            bound = signature.bind_partial(*args, **kwargs)
            new_args = {
                param: value
                for param, value in self().items()
                if param in signature.parameters and param not in bound.arguments
            }
            return func(*args, **kwargs, **new_args)

        return new_func


#: An object specifying the defaults to use throughout sky_imager, and methods to
#: alter them.
defaults = Defaults()
_defaults = defaults._handler
