from typing import Optional

from cachetools import cached
from dotenv import find_dotenv, load_dotenv

from paradesk.config.logger import logging_setup
from paradesk.config.settings import apply_env_overrides


@cached(cache={})
def setup():
    """
    One-time setup of env, settings, and logging. Idempotent.
    """

    env_setup()

    apply_env_overrides()

    logging_setup()


def env_setup() -> Optional[str]:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)
    return dotenv_path or None
