# Configuration settings should be set in app.config
# The defaults are kept as class variables of cattery.Cattery, they can be overridden
# with keyword arguments to the CatteryAPI constructor or with environment variables
import os
import logging
from flask import current_app
import cattery
from typing import Optional, Union


def get_config(option: str) -> Optional[Union[bool, str]]:
    """Retrieve a configuration parameter from the app
    :param option: configuration parameter
    :return: configuration value
    :rtype: string
    """
    try:
        result = current_app.config[option]
    except (KeyError, RuntimeError):
        # RuntimeError: working outside of the application context
        result = getattr(cattery.Cattery, option, os.environ.get(option, None))
    return result


def is_debug() -> bool:
    """
    We use the loglevel to check whether we're running in debug mode
    :return: whether the app is in debug mode
    :rtype: Boolean
    """
    return cattery.log.getEffectiveLevel() < logging.INFO
